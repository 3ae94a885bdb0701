"""
Transactional email service.

High-level senders on top of EmailPort. Each send runs through the
SafeExecutor under the "email" service label, so provider hiccups are
retried and logged; the caller always gets an EmailResult back and never
an exception.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from decimal import Decimal

from src.components.safe_exec import RetryPolicy, SafeExecutor
from src.core.ports.email import EmailPort, EmailResult, EmailSendError
from src.services import email_templates as templates
from src.services.email_templates import OrderLine

logger = logging.getLogger(__name__)

EMAIL_SERVICE = "email"


def format_price(amount: Decimal | float | int, currency_symbol: str = "₦") -> str:
    return f"{currency_symbol}{Decimal(str(amount)):.2f}"


class EmailService:
    def __init__(
        self,
        sender: EmailPort,
        executor: SafeExecutor,
        policy: RetryPolicy[EmailResult] | None = None,
        site_url: str = templates.DEFAULT_SITE_URL,
        currency_symbol: str = "₦",
    ) -> None:
        self._sender = sender
        self._executor = executor
        self._policy = policy
        self._site_url = site_url
        self.currency_symbol = currency_symbol

    async def _send(self, to: str, subject: str, html: str) -> EmailResult:
        async def work() -> EmailResult:
            result = await self._sender.send_template_email(to, subject, html)
            if not result.success:
                raise EmailSendError(to, result.error or "unknown error")
            return result

        outcome = await self._executor.execute(work, EMAIL_SERVICE, self._policy)
        if outcome.ok:
            return outcome.value

        logger.warning("Email %r to %s not sent: %s", subject, to, outcome.error.message)
        return EmailResult.failed(to, outcome.user_message)

    def price(self, amount: Decimal | float | int) -> str:
        return format_price(amount, self.currency_symbol)

    async def send_booking_confirmation(
        self,
        to: str,
        customer_name: str,
        service_name: str,
        booking_date: str,
        booking_time: str,
        booking_id: str,
    ) -> EmailResult:
        html = templates.booking_confirmed_email(
            customer_name,
            service_name,
            booking_date,
            booking_time,
            booking_id,
            site_url=self._site_url,
        )
        return await self._send(to, f"Booking Confirmed: {service_name}", html)

    async def send_order_confirmation(
        self,
        to: str,
        customer_name: str,
        order_number: str,
        order_date: str,
        items: Sequence[OrderLine],
        subtotal: str,
        total: str,
        shipping_address: str | None = None,
    ) -> EmailResult:
        html = templates.order_confirmed_email(
            customer_name,
            order_number,
            order_date,
            items,
            subtotal,
            total,
            shipping_address=shipping_address,
            site_url=self._site_url,
        )
        return await self._send(to, f"Order Confirmed: #{order_number}", html)

    async def send_booking_reminder(
        self,
        to: str,
        customer_name: str,
        service_name: str,
        booking_date: str,
        booking_time: str,
    ) -> EmailResult:
        html = templates.booking_reminder_email(
            customer_name, service_name, booking_date, booking_time, site_url=self._site_url
        )
        return await self._send(to, f"Reminder: Your {service_name} appointment tomorrow", html)

    async def send_welcome(self, to: str, customer_name: str) -> EmailResult:
        html = templates.welcome_email(customer_name, site_url=self._site_url)
        return await self._send(to, "Welcome to Naomi Luxe! ✨", html)

    async def send_password_reset(
        self, to: str, reset_link: str, expires_in: str = "1 hour"
    ) -> EmailResult:
        html = templates.password_reset_email(reset_link, expires_in)
        return await self._send(to, "Reset Your Password - Naomi Luxe", html)
