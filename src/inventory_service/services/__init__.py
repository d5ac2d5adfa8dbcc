"""Business logic services."""

from inventory_service.services.date_window import compute_sync_dates
from inventory_service.services.inventory_sync import InventorySyncService, SyncResult
from inventory_service.services.inventory_upsert import InventoryUpserter, UpsertResult
from inventory_service.services.job_dispatch import JobDispatcher
from inventory_service.services.job_gate import JobGate
from inventory_service.services.product_catalog import ProductCatalog, ProductSchedule

__all__ = [
    "compute_sync_dates",
    "InventorySyncService",
    "SyncResult",
    "InventoryUpserter",
    "UpsertResult",
    "JobDispatcher",
    "JobGate",
    "ProductCatalog",
    "ProductSchedule",
]
