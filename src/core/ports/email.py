"""
Email Adapter Interface.

Protocol-based interface for sending transactional emails (booking and
order confirmations, reminders, welcome and password-reset mail).

Key requirements:
- Caller supplies an already rendered HTML body
- send_template_email reports failure in its result instead of raising
- Production provider adapters plug in behind the same interface

Implementation strategies:
1. DevEmailAdapter: Logs emails (dev/test)
2. HTTP provider adapter (Brevo/SendGrid style API)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol


@dataclass(frozen=True)
class EmailResult:
    """Result of an email send attempt."""

    success: bool
    recipient: str
    message_id: str | None = None  # Provider's message ID
    error: str | None = None
    sent_at: datetime | None = None

    @classmethod
    def sent(cls, recipient: str, message_id: str | None = None) -> EmailResult:
        return cls(
            success=True,
            recipient=recipient,
            message_id=message_id,
            sent_at=datetime.now(UTC),
        )

    @classmethod
    def failed(cls, recipient: str, error: str) -> EmailResult:
        return cls(success=False, recipient=recipient, error=error)


class EmailPort(Protocol):
    """Transactional email sender."""

    async def send_template_email(
        self,
        to: str,
        subject: str,
        html: str,
    ) -> EmailResult:
        """
        Send a rendered email.

        Args:
            to: Recipient address
            subject: Subject line
            html: Rendered HTML body

        Returns:
            EmailResult; must not raise for provider-side failures
        """
        ...


# --- Error Types ---


class EmailError(Exception):
    """Base exception for email-related errors."""

    pass


class EmailSendError(EmailError):
    """Failed to send email."""

    def __init__(self, recipient: str, error: str, retriable: bool = True) -> None:
        self.recipient = recipient
        self.error = error
        self.retriable = retriable
        super().__init__(f"Failed to send email to {recipient}: {error}")
