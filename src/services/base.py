"""
Shared plumbing for the action layer.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, Literal, TypeVar
from uuid import UUID

from pydantic import BaseModel, ValidationError

from src.components.safe_exec import (
    OperationResult,
    RetryPolicyRegistry,
    SafeExecutor,
)
from src.core.ports.cache import PathInvalidatorPort
from src.domain.entities import Profile
from src.domain.policy import require_admin

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

ActionCode = Literal["unauthorized", "forbidden", "not_found", "invalid", "failed"]

SIGN_IN_REQUIRED = "Unauthorized: Please sign in"
ADMIN_REQUIRED = "Unauthorized: Admin access required"
ACCESS_DENIED = "Unauthorized: Access denied"


@dataclass(frozen=True)
class ActionResult(Generic[T]):
    """Outcome of an action. `code` is set exactly when `ok` is False."""

    ok: bool
    data: T | None = None
    message: str | None = None
    error: str | None = None
    code: ActionCode | None = None

    @classmethod
    def success(cls, data: T | None = None, message: str | None = None) -> ActionResult[T]:
        return cls(ok=True, data=data, message=message)

    @classmethod
    def failure(cls, error: str, code: ActionCode = "failed") -> ActionResult[T]:
        return cls(ok=False, error=error, code=code)

    @classmethod
    def unauthorized(cls, error: str = SIGN_IN_REQUIRED) -> ActionResult[T]:
        return cls.failure(error, "unauthorized")

    @classmethod
    def admin_required(cls) -> ActionResult[T]:
        return cls.failure(ADMIN_REQUIRED, "unauthorized")

    @classmethod
    def forbidden(cls) -> ActionResult[T]:
        return cls.failure(ACCESS_DENIED, "forbidden")

    @classmethod
    def not_found(cls, entity: str) -> ActionResult[T]:
        return cls.failure(f"{entity} not found", "not_found")

    @classmethod
    def invalid(cls, error: str) -> ActionResult[T]:
        return cls.failure(error, "invalid")


def validation_message(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first['msg']}" if location else str(first["msg"])


class ActionService:
    """
    Base for action groups.

    Subclasses set `area` (service-label prefix, e.g. "bookings") and
    `paths` (views to revalidate after writes).
    """

    area: ClassVar[str] = "actions"
    paths: ClassVar[tuple[str, ...]] = ()

    def __init__(
        self,
        executor: SafeExecutor,
        policies: RetryPolicyRegistry,
        invalidator: PathInvalidatorPort,
    ) -> None:
        self._executor = executor
        self._policies = policies
        self._invalidator = invalidator

    async def _call(self, op: str, fn: Callable[..., T], *args: Any) -> OperationResult[T]:
        """Run a blocking data-access call through the executor."""
        service = f"{self.area}-{op}"

        async def work() -> T:
            return await asyncio.to_thread(fn, *args)

        return await self._executor.execute(work, service, self._policies.for_service(service))

    def _revalidate(self, *extra: str) -> None:
        for path in (*self.paths, *extra):
            self._invalidator.revalidate(path)


class CrudActions(ActionService, Generic[M]):
    """
    Public reads, admin-only writes over one repository.

    The repository must provide list_all, get_by_id, create, update, delete.
    """

    entity: ClassVar[str] = "Item"
    model: type[M]

    def __init__(
        self,
        repo: Any,
        executor: SafeExecutor,
        policies: RetryPolicyRegistry,
        invalidator: PathInvalidatorPort,
    ) -> None:
        super().__init__(executor, policies, invalidator)
        self._repo = repo

    async def list(self) -> ActionResult[list[M]]:
        result = await self._call("list", self._repo.list_all)
        if not result.ok:
            return ActionResult.failure(result.user_message)
        return ActionResult.success(result.value)

    async def get(self, item_id: UUID) -> ActionResult[M]:
        result = await self._call("get", self._repo.get_by_id, item_id)
        if not result.ok:
            return ActionResult.failure(result.user_message)
        if result.value is None:
            return ActionResult.not_found(self.entity)
        return ActionResult.success(result.value)

    async def create(self, user: Profile | None, item: M) -> ActionResult[M]:
        if require_admin(user) is None:
            return ActionResult.admin_required()

        result = await self._call("create", self._repo.create, item)
        if not result.ok:
            return ActionResult.failure(result.user_message)

        self._revalidate()
        return ActionResult.success(result.value, f"{self.entity} created successfully")

    async def update(
        self, user: Profile | None, item_id: UUID, changes: dict[str, Any]
    ) -> ActionResult[M]:
        if require_admin(user) is None:
            return ActionResult.admin_required()

        existing = await self._call("get", self._repo.get_by_id, item_id)
        if not existing.ok:
            return ActionResult.failure(existing.user_message)
        if existing.value is None:
            return ActionResult.not_found(self.entity)

        try:
            self.model.model_validate({**existing.value.model_dump(), **changes})
        except ValidationError as e:
            return ActionResult.invalid(validation_message(e))

        result = await self._call("update", self._repo.update, item_id, changes)
        if not result.ok:
            return ActionResult.failure(result.user_message)
        if result.value is None:
            return ActionResult.not_found(self.entity)

        self._revalidate()
        return ActionResult.success(result.value, f"{self.entity} updated successfully")

    async def delete(self, user: Profile | None, item_id: UUID) -> ActionResult[None]:
        if require_admin(user) is None:
            return ActionResult.admin_required()

        result = await self._call("delete", self._repo.delete, item_id)
        if not result.ok:
            return ActionResult.failure(result.user_message)
        if not result.value:
            return ActionResult.not_found(self.entity)

        self._revalidate()
        return ActionResult.success(None, f"{self.entity} deleted")
