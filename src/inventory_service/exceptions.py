"""Exceptions raised by the inventory sync core."""


class InventorySyncError(Exception):
    """Base class for inventory sync errors."""


class InvalidHorizonError(InventorySyncError, ValueError):
    """Raised when a sync horizon falls outside the allowed day range."""

    def __init__(self, horizon_days: int, max_horizon_days: int):
        self.horizon_days = horizon_days
        self.max_horizon_days = max_horizon_days
        super().__init__(
            f"Invalid number of days to sync ({horizon_days}), "
            f"should be between 1 and {max_horizon_days}"
        )


class UnknownJobError(InventorySyncError, ValueError):
    """Raised when a job name is not one of the known sync jobs."""

    def __init__(self, job_name: str):
        self.job_name = job_name
        super().__init__(f"Invalid cron job name: {job_name}")


class JobNotFoundError(InventorySyncError, LookupError):
    """Raised when a job row does not exist in the job settings table."""

    def __init__(self, job_name: str):
        self.job_name = job_name
        super().__init__(f"Cron job not found: {job_name}")
