"""
Transactional email templates.

Renders the HTML bodies for booking, order, reminder, welcome and
password-reset mail. All interpolated values are escaped.

Key behaviors:
- Every body shares one layout (brand header, footer)
- Prices arrive pre-formatted (e.g. "₦15000.00")
- Links are built from the configured site URL
"""

from __future__ import annotations

import html
from collections.abc import Sequence
from dataclasses import dataclass

DEFAULT_SITE_URL = "https://naomi-luxe.com"
BRAND = "Naomi Luxe"


@dataclass(frozen=True)
class OrderLine:
    """One rendered row of an order email."""

    name: str
    quantity: int
    price: str


def _escape(text: object) -> str:
    return html.escape(str(text))


def _layout(preview: str, body: str) -> str:
    return (
        "<!DOCTYPE html>"
        '<html><head><meta charset="utf-8">'
        f"<title>{_escape(BRAND)}</title></head>"
        '<body style="font-family: Arial, sans-serif; background: #f6f6f6;">'
        f'<div style="display:none">{_escape(preview)}</div>'
        '<div style="max-width: 600px; margin: 0 auto; background: #ffffff; padding: 32px;">'
        f'<h1 style="font-size: 28px; letter-spacing: 2px;">{_escape(BRAND.upper())}</h1>'
        f"{body}"
        '<hr style="border-color: #eeeeee;">'
        f'<p style="font-size: 12px; color: #888888;">&copy; {_escape(BRAND)}. '
        "All rights reserved.</p>"
        "</div></body></html>"
    )


def _paragraph(text: str) -> str:
    return f'<p style="font-size: 16px; line-height: 24px; color: #333333;">{text}</p>'


def _button(href: str, label: str) -> str:
    return (
        f'<p><a href="{_escape(href)}" style="background: #000000; color: #ffffff; '
        f'padding: 12px 24px; text-decoration: none;">{_escape(label)}</a></p>'
    )


def _details(title: str, rows: Sequence[tuple[str, str]]) -> str:
    items = "".join(
        f"<p><strong>{_escape(label)}:</strong> {_escape(value)}</p>" for label, value in rows
    )
    return (
        '<div style="background: #f9f9f9; padding: 20px;">'
        f"<h3>{_escape(title)}</h3>{items}</div>"
    )


def _signoff(line: str) -> str:
    return _paragraph(f"{_escape(line)}<br><strong>The {_escape(BRAND)} Team</strong>")


# --- Templates ---


def booking_confirmed_email(
    customer_name: str,
    service_name: str,
    booking_date: str,
    booking_time: str,
    booking_id: str,
    site_url: str = DEFAULT_SITE_URL,
) -> str:
    body = (
        '<h2 style="font-size: 24px;">Booking Confirmed! 🎉</h2>'
        + _paragraph(f"Hi {_escape(customer_name)},")
        + _paragraph("Great news! Your booking has been confirmed. We're excited to see you!")
        + _details(
            "Booking Details",
            [
                ("Service", service_name),
                ("Date", booking_date),
                ("Time", booking_time),
                ("Booking ID", booking_id),
            ],
        )
        + _button(f"{site_url}/bookings/{booking_id}", "View Booking Details")
        + _paragraph(
            "Please arrive 10 minutes before your appointment time. If you need to "
            "reschedule or cancel, please contact us at least 24 hours in advance."
        )
        + _signoff("Looking forward to pampering you!")
    )
    return _layout(f"Your booking for {service_name} is confirmed!", body)


def booking_reminder_email(
    customer_name: str,
    service_name: str,
    booking_date: str,
    booking_time: str,
    site_url: str = DEFAULT_SITE_URL,
) -> str:
    body = (
        '<h2 style="font-size: 24px;">Appointment Reminder ⏰</h2>'
        + _paragraph(f"Hi {_escape(customer_name)},")
        + _paragraph(
            f"This is a friendly reminder that your {_escape(service_name)} "
            "appointment is tomorrow."
        )
        + _details(
            "Appointment Details",
            [("Service", service_name), ("Date", booking_date), ("Time", booking_time)],
        )
        + _button(f"{site_url}/bookings", "View My Bookings")
        + _signoff("See you soon!")
    )
    return _layout(f"Reminder: {service_name} tomorrow at {booking_time}", body)


def order_confirmed_email(
    customer_name: str,
    order_number: str,
    order_date: str,
    items: Sequence[OrderLine],
    subtotal: str,
    total: str,
    shipping_address: str | None = None,
    site_url: str = DEFAULT_SITE_URL,
) -> str:
    rows = "".join(
        "<tr>"
        f"<td>{_escape(item.name)}</td>"
        f'<td style="text-align: center;">{item.quantity}</td>'
        f'<td style="text-align: right;">{_escape(item.price)}</td>'
        "</tr>"
        for item in items
    )
    table = (
        '<table style="width: 100%; border-collapse: collapse;">'
        "<tr><th align=\"left\">Item</th><th>Qty</th><th align=\"right\">Price</th></tr>"
        f"{rows}"
        f'<tr><td colspan="2">Subtotal</td><td align="right">{_escape(subtotal)}</td></tr>'
        f'<tr><td colspan="2"><strong>Total</strong></td>'
        f'<td align="right"><strong>{_escape(total)}</strong></td></tr>'
        "</table>"
    )
    shipping = (
        _details("Shipping Address", [("Address", shipping_address)])
        if shipping_address
        else ""
    )
    body = (
        '<h2 style="font-size: 24px;">Order Confirmed! 📦</h2>'
        + _paragraph(f"Hi {_escape(customer_name)},")
        + _paragraph("Thank you for your order! We're getting it ready for you.")
        + _details("Order Details", [("Order Number", f"#{order_number}"), ("Date", order_date)])
        + table
        + shipping
        + _button(f"{site_url}/orders", "View Order")
        + _signoff("Thank you for shopping with us!")
    )
    return _layout(f"Your order #{order_number} is confirmed!", body)


def welcome_email(customer_name: str, site_url: str = DEFAULT_SITE_URL) -> str:
    body = (
        f'<h2 style="font-size: 24px;">Welcome to {_escape(BRAND)}! ✨</h2>'
        + _paragraph(f"Hi {_escape(customer_name)},")
        + _paragraph(
            "We're thrilled to have you. Browse our latest collection and book "
            "your first appointment whenever you're ready."
        )
        + _button(f"{site_url}/products", "Start Shopping")
        + _signoff("Welcome aboard!")
    )
    return _layout(f"Welcome to {BRAND}", body)


def password_reset_email(reset_link: str, expires_in: str = "1 hour") -> str:
    body = (
        '<h2 style="font-size: 24px;">Reset Your Password</h2>'
        + _paragraph("We received a request to reset your password.")
        + _button(reset_link, "Reset Password")
        + _paragraph(f"This link expires in {_escape(expires_in)}.")
        + _paragraph(
            "If you didn't request a password reset, you can safely ignore this email."
        )
        + _signoff("Stay fabulous!")
    )
    return _layout("Reset your password", body)
