"""
Notification inbox actions.

Every action requires a signed-in user and only touches that user's own
notifications; admins get no special access here.
"""

from __future__ import annotations

from typing import Any, ClassVar
from uuid import UUID

from pydantic import ValidationError

from src.components.safe_exec import RetryPolicyRegistry, SafeExecutor
from src.core.ports.cache import PathInvalidatorPort
from src.core.ports.db import NotificationPreferencesRepoPort, NotificationRepoPort
from src.domain.entities import Notification, NotificationPreferences, Profile, utc_now
from src.domain.policy import require_auth
from src.services.base import ActionResult, ActionService, validation_message

PREFERENCE_CHANNELS = ("email_notifications", "push_notifications", "sms_notifications")


class NotificationActions(ActionService):
    area: ClassVar[str] = "notifications"
    paths: ClassVar[tuple[str, ...]] = ("/notifications",)

    def __init__(
        self,
        repo: NotificationRepoPort,
        preferences: NotificationPreferencesRepoPort,
        executor: SafeExecutor,
        policies: RetryPolicyRegistry,
        invalidator: PathInvalidatorPort,
    ) -> None:
        super().__init__(executor, policies, invalidator)
        self._repo = repo
        self._preferences = preferences

    async def list_mine(self, user: Profile | None) -> ActionResult[list[Notification]]:
        if require_auth(user) is None:
            return ActionResult.unauthorized()

        result = await self._call("listByUser", self._repo.list_by_user, user.id)
        if not result.ok:
            return ActionResult.failure(result.user_message)
        return ActionResult.success(result.value)

    async def list_unread(self, user: Profile | None) -> ActionResult[list[Notification]]:
        if require_auth(user) is None:
            return ActionResult.unauthorized()

        result = await self._call("listUnread", self._repo.list_unread_by_user, user.id)
        if not result.ok:
            return ActionResult.failure(result.user_message)
        return ActionResult.success(result.value)

    async def get(
        self, user: Profile | None, notification_id: UUID
    ) -> ActionResult[Notification]:
        if require_auth(user) is None:
            return ActionResult.unauthorized()

        result = await self._call("get", self._repo.get_by_id, notification_id)
        if not result.ok:
            return ActionResult.failure(result.user_message)
        if result.value is None:
            return ActionResult.not_found("Notification")
        if result.value.user_id != user.id:
            return ActionResult.forbidden()
        return ActionResult.success(result.value)

    async def mark_read(
        self, user: Profile | None, notification_id: UUID
    ) -> ActionResult[Notification]:
        return await self._change(user, notification_id, "markRead", self._repo.mark_read)

    async def archive(
        self, user: Profile | None, notification_id: UUID
    ) -> ActionResult[Notification]:
        return await self._change(user, notification_id, "archive", self._repo.archive)

    async def _change(
        self, user: Profile | None, notification_id: UUID, op: str, apply: Any
    ) -> ActionResult[Notification]:
        owned = await self.get(user, notification_id)
        if not owned.ok:
            return owned

        result = await self._call(op, apply, notification_id)
        if not result.ok:
            return ActionResult.failure(result.user_message)
        if result.value is None:
            return ActionResult.not_found("Notification")

        self._revalidate()
        return ActionResult.success(result.value)

    async def mark_all_read(self, user: Profile | None) -> ActionResult[int]:
        if require_auth(user) is None:
            return ActionResult.unauthorized()

        result = await self._call("markAllRead", self._repo.mark_all_read, user.id)
        if not result.ok:
            return ActionResult.failure(result.user_message)

        self._revalidate()
        return ActionResult.success(result.value, f"{result.value} notification(s) marked as read")

    async def delete(self, user: Profile | None, notification_id: UUID) -> ActionResult[None]:
        owned = await self.get(user, notification_id)
        if not owned.ok:
            return ActionResult.failure(owned.error or "", owned.code or "failed")

        result = await self._call("delete", self._repo.delete, notification_id)
        if not result.ok:
            return ActionResult.failure(result.user_message)
        if not result.value:
            return ActionResult.not_found("Notification")

        self._revalidate()
        return ActionResult.success(None, "Notification deleted")

    # --- Preferences ---

    async def get_preferences(
        self, user: Profile | None
    ) -> ActionResult[NotificationPreferences]:
        """The stored preferences, or the defaults when none are saved yet."""
        if require_auth(user) is None:
            return ActionResult.unauthorized()

        result = await self._call("getPreferences", self._preferences.get_by_user, user.id)
        if not result.ok:
            return ActionResult.failure(result.user_message)
        return ActionResult.success(result.value or NotificationPreferences(user_id=user.id))

    async def update_preferences(
        self, user: Profile | None, changes: dict[str, dict[str, bool]]
    ) -> ActionResult[NotificationPreferences]:
        """Merge per-channel toggles into the current preferences and save them."""
        current = await self.get_preferences(user)
        if not current.ok:
            return current

        unknown = set(changes) - set(PREFERENCE_CHANNELS)
        if unknown:
            names = ", ".join(sorted(unknown))
            return ActionResult.invalid(f"Unknown preference channel(s): {names}")

        merged = current.data.model_dump()
        for channel, toggles in changes.items():
            merged[channel] = {**merged[channel], **toggles}
        merged["updated_at"] = utc_now()

        try:
            preferences = NotificationPreferences.model_validate(merged)
        except ValidationError as e:
            return ActionResult.invalid(validation_message(e))

        result = await self._call("updatePreferences", self._preferences.upsert, preferences)
        if not result.ok:
            return ActionResult.failure(result.user_message)

        self._revalidate()
        return ActionResult.success(result.value, "Preferences updated")
