"""Pydantic models for the job control surface."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CronJobOut(BaseModel):
    """A scheduled sync job and its switch state."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    is_enabled: bool
    last_executed: datetime | None = None


class JobPage(BaseModel):
    """One page of cron jobs."""

    data: list[CronJobOut]
    total_length: int
    page: int
    limit: int


class ToggleJobRequest(BaseModel):
    """Request body for enabling or disabling a job."""

    name: str = Field(..., description="Cron job name")
    status: bool = Field(..., description="True to enable, False to disable")


class MessageResponse(BaseModel):
    """Plain message response."""

    message: str
    task_id: str | None = None
