"""
Admin log viewer routes.

All routes require an admin. A LogQueryError (store unreachable after
retries) is reported as 503 with the user-facing message.
"""

from datetime import datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query

from src.api.deps import get_log_viewer, require_admin_user
from src.api.schemas import ClearLogsRequest, CountResponse, LogIdsRequest
from src.components.logbuffer import LogLevel
from src.services.logs import (
    LogQueryError,
    LogsFilters,
    LogsPage,
    LogsPagination,
    LogStats,
    LogViewer,
)

router = APIRouter(dependencies=[Depends(require_admin_user)])

Viewer = Annotated[LogViewer, Depends(get_log_viewer)]


def _unavailable(e: LogQueryError) -> HTTPException:
    return HTTPException(status_code=503, detail=e.message)


@router.get("", response_model=LogsPage)
async def get_logs(
    viewer: Viewer,
    level: LogLevel | None = None,
    app: str | None = None,
    service: str | None = None,
    search: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=500)] = 50,
) -> Any:
    filters = LogsFilters(
        level=level,
        app=app,
        service=service,
        search=search,
        start_date=start_date,
        end_date=end_date,
    )
    try:
        return await viewer.get_logs(filters, LogsPagination(page=page, page_size=page_size))
    except LogQueryError as e:
        raise _unavailable(e) from e


@router.get("/stats", response_model=LogStats)
async def get_log_stats(viewer: Viewer) -> Any:
    try:
        return await viewer.get_log_stats()
    except LogQueryError as e:
        raise _unavailable(e) from e


@router.delete("/{log_id}", response_model=CountResponse)
async def delete_log(log_id: int, viewer: Viewer) -> Any:
    try:
        deleted = await viewer.delete_log(log_id)
    except LogQueryError as e:
        raise _unavailable(e) from e
    if deleted == 0:
        raise HTTPException(status_code=404, detail="Log not found")
    return CountResponse(count=deleted)


@router.post("/delete", response_model=CountResponse)
async def delete_logs(body: LogIdsRequest, viewer: Viewer) -> Any:
    try:
        return CountResponse(count=await viewer.delete_logs(body.ids))
    except LogQueryError as e:
        raise _unavailable(e) from e


@router.post("/clear", response_model=CountResponse)
async def clear_logs(body: ClearLogsRequest, viewer: Viewer) -> Any:
    try:
        return CountResponse(count=await viewer.clear_logs(body.older_than))
    except LogQueryError as e:
        raise _unavailable(e) from e
