"""
Error-message mapper component.

Maps raw service errors to user-facing messages.
"""

from src.components.error_mapper.component import (
    GENERIC_MESSAGE,
    SERVICE_MESSAGES,
    STREAM_MESSAGES,
    SUPABASE_MESSAGES,
    map_service_message,
    to_user_message,
)
from src.components.error_mapper.models import MessageRule, ServiceMessages

__all__ = [
    "GENERIC_MESSAGE",
    "SERVICE_MESSAGES",
    "STREAM_MESSAGES",
    "SUPABASE_MESSAGES",
    "MessageRule",
    "ServiceMessages",
    "map_service_message",
    "to_user_message",
]
