"""
Dev Email Adapter.

Logs emails instead of sending them. Used for local development and tests.

Key behaviors:
- Logs recipient, subject and a body preview
- Returns a successful EmailResult with a `dev-` message id
- Stores emails in memory for test assertions
- Can be told to fail, to exercise retry paths
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from src.core.ports.email import EmailResult, EmailSendError

logger = logging.getLogger(__name__)


@dataclass
class SentEmail:
    """Record of a logged email for test assertions."""

    id: str
    recipient: str
    subject: str
    html: str
    logged_at: datetime


@dataclass
class DevEmailAdapter:
    """
    Dev email adapter that logs instead of sending.

    Implements EmailPort.
    """

    # In-memory storage for test assertions
    sent_emails: list[SentEmail] = field(default_factory=list)

    # Configuration
    log_level: int = logging.INFO
    log_body: bool = True
    body_preview_length: int = 100

    # Number of upcoming sends that raise EmailSendError
    fail_next: int = 0

    async def send_template_email(self, to: str, subject: str, html: str) -> EmailResult:
        if self.fail_next > 0:
            self.fail_next -= 1
            raise EmailSendError(to, "Dev adapter configured to fail")

        message_id = f"dev-{uuid4().hex[:12]}"
        self.sent_emails.append(
            SentEmail(
                id=message_id,
                recipient=to,
                subject=subject,
                html=html,
                logged_at=datetime.now(UTC),
            )
        )
        self._log_email(to, subject, html, message_id)
        return EmailResult.sent(to, message_id)

    def _log_email(self, recipient: str, subject: str, html: str, message_id: str) -> None:
        parts = [f"EMAIL (dev): To={recipient}", f"Subject={subject}"]

        if self.log_body and html:
            preview = html[: self.body_preview_length]
            if len(html) > self.body_preview_length:
                preview += "..."
            parts.append(f"Body={preview}")

        parts.append(f"MessageID={message_id}")
        logger.log(self.log_level, ", ".join(parts))

    # --- Test Helper Methods ---

    def get_last_email(self) -> SentEmail | None:
        return self.sent_emails[-1] if self.sent_emails else None

    def get_emails_to(self, recipient: str) -> list[SentEmail]:
        return [e for e in self.sent_emails if e.recipient == recipient]

    def clear(self) -> None:
        self.sent_emails.clear()

    @property
    def email_count(self) -> int:
        return len(self.sent_emails)
