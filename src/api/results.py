"""
ActionResult to HTTP translation.

unauthorized -> 401, forbidden -> 403, not_found -> 404, invalid -> 422,
anything else (a data-access failure after retries) -> 503.
"""

from typing import TypeVar

from fastapi import HTTPException

from src.services.base import ActionResult

T = TypeVar("T")

STATUS_BY_CODE = {
    "unauthorized": 401,
    "forbidden": 403,
    "not_found": 404,
    "invalid": 422,
    "failed": 503,
}


def unwrap(result: ActionResult[T]) -> T:
    """Return the result's data, or raise the matching HTTPException."""
    if result.ok:
        return result.data  # type: ignore[return-value]

    status_code = STATUS_BY_CODE.get(result.code or "failed", 503)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    raise HTTPException(status_code=status_code, detail=result.error, headers=headers)
