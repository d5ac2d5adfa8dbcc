"""Shared constants across the application."""

# Scheduled job names, as stored in cron_jobs.name
SYNC_NEXT_30_DAYS = "syncNext30Days"
SYNC_NEXT_7_DAYS = "syncNext7Days"
SYNC_TODAY = "syncToday"

# Job name -> sync horizon in days
JOB_HORIZONS = {
    SYNC_NEXT_30_DAYS: 30,
    SYNC_NEXT_7_DAYS: 7,
    SYNC_TODAY: 1,
}

# Job name -> Celery task
JOB_TASKS = {
    SYNC_NEXT_30_DAYS: "sync_worker.tasks.sync_inventory.sync_next_30_days",
    SYNC_NEXT_7_DAYS: "sync_worker.tasks.sync_inventory.sync_next_7_days",
    SYNC_TODAY: "sync_worker.tasks.sync_inventory.sync_today",
}
SYNC_NEXT_X_DAYS_TASK = "sync_worker.tasks.sync_inventory.sync_next_x_days"

# Horizon bounds for ad hoc syncs
MIN_HORIZON_DAYS = 1
MAX_HORIZON_DAYS = 60

# Default page size for job listings
DEFAULT_PAGE_LIMIT = 10

# Celery queue consumed by the sync worker
SYNC_QUEUE = "inventory"
