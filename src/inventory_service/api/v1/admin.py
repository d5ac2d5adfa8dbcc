"""Admin endpoints for controlling the scheduled inventory sync jobs."""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from inventory_service.exceptions import (
    InvalidHorizonError,
    JobNotFoundError,
    UnknownJobError,
)
from inventory_service.infrastructure.database.connection import get_session_factory
from inventory_service.schemas.jobs import JobPage, MessageResponse, ToggleJobRequest
from inventory_service.services.job_dispatch import JobDispatcher, get_job_dispatcher
from inventory_service.services.job_gate import JobGate
from shared.constants import DEFAULT_PAGE_LIMIT

logger = structlog.get_logger()

router = APIRouter()


def get_job_gate() -> JobGate:
    """Dependency for FastAPI to get the job gate."""
    return JobGate(get_session_factory())


@router.get("/cron", response_model=JobPage)
async def list_cron_jobs(
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1)] = DEFAULT_PAGE_LIMIT,
    gate: JobGate = Depends(get_job_gate),
) -> JobPage:
    """List the scheduled sync jobs with their enabled flag and last run time."""
    return await gate.list_jobs(page=page, limit=limit)


@router.put("/cron/toggle", response_model=MessageResponse)
async def toggle_cron_job(
    body: ToggleJobRequest,
    gate: JobGate = Depends(get_job_gate),
) -> MessageResponse:
    """
    Enable or disable a scheduled sync job.

    Disabled jobs are skipped when their schedule fires but can still be
    triggered manually.
    """
    try:
        job = await gate.set_enabled(body.name, body.status)
    except JobNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    state = "enabled" if job.is_enabled else "disabled"
    return MessageResponse(message=f"Cron {job.name} is now {state}")


@router.get("/cron/trigger", response_model=MessageResponse)
def trigger_cron_job(
    name: Annotated[str, Query(description="Cron job name")],
    dispatcher: JobDispatcher = Depends(get_job_dispatcher),
) -> MessageResponse:
    """
    Run a named sync job now, regardless of its enabled flag.

    **Job names:**
    - `syncNext30Days`
    - `syncNext7Days`
    - `syncToday`
    """
    try:
        task_id = dispatcher.trigger_job(name)
    except UnknownJobError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    return MessageResponse(message=f"Triggered {name} successfully", task_id=task_id)


@router.get("/cron/sync", response_model=MessageResponse)
def sync_next_x_days(
    days_to_sync: Annotated[int, Query(alias="daysToSync")] = 1,
    dispatcher: JobDispatcher = Depends(get_job_dispatcher),
) -> MessageResponse:
    """Sync inventory for the next `daysToSync` days (1-60)."""
    try:
        task_id = dispatcher.sync_next_x_days(days_to_sync)
    except InvalidHorizonError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    return MessageResponse(
        message=f"Started {days_to_sync}-day inventory sync", task_id=task_id
    )
