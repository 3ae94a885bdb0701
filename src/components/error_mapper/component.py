"""
Error-message mapper component.

Turns a raw error string from a named service into text that is safe to
show an end user. Pure lookup over fixed tables: no state, no I/O.
"""

from __future__ import annotations

from collections.abc import Mapping

from src.components.error_mapper.models import MessageRule, ServiceMessages

GENERIC_MESSAGE = "Something went wrong. Please try again."

SUPABASE_MESSAGES = ServiceMessages(
    rules=(
        MessageRule("invalid login credentials", "Incorrect email or password."),
        MessageRule("email not confirmed", "Please confirm your email before logging in."),
        MessageRule("user already registered", "This email is already registered."),
        MessageRule("jwt expired", "Your session has expired. Please log in again."),
    ),
    default="An unexpected error occurred with Supabase.",
)

STREAM_MESSAGES = ServiceMessages(
    rules=(
        MessageRule("rate limit", "You are sending too many messages. Please slow down."),
        MessageRule("unauthorized", "You are not authorized to use chat at the moment."),
    ),
    default="An unexpected error occurred with chat.",
)

SERVICE_MESSAGES: Mapping[str, ServiceMessages] = {
    "supabase": SUPABASE_MESSAGES,
    "stream": STREAM_MESSAGES,
}


def map_service_message(messages: ServiceMessages, raw_message: str) -> str:
    normalized = raw_message.lower()
    for rule in messages.rules:
        if rule.matches(normalized):
            return rule.message
    return messages.default


def to_user_message(service: str, raw_message: str) -> str:
    """
    Map a raw error message to a user-facing one.

    Args:
        service: Service label the error came from (exact match, e.g. "supabase")
        raw_message: The internal error text

    Returns:
        A message from the service's table, or the generic message for
        labels without one.
    """
    messages = SERVICE_MESSAGES.get(service)
    if messages is None:
        return GENERIC_MESSAGE
    return map_service_message(messages, raw_message)
