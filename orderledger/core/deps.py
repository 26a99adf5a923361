from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request

from orderledger.core.settings import get_app_settings
from orderledger.db.store import DocumentStore
from orderledger.services.maintenance import MaintenanceService
from orderledger.services.stats import DashboardService


# PUBLIC_INTERFACE
def get_document_store(request: Request) -> Optional[DocumentStore]:
    """
    Return the document store handle created at startup.

    None means the store could not be initialised; services decide how to
    report that.
    """
    return getattr(request.app.state, "document_store", None)


# PUBLIC_INTERFACE
def get_dashboard_service(
    store: Optional[DocumentStore] = Depends(get_document_store),
) -> DashboardService:
    """DashboardService bound to the application's store handle."""
    return DashboardService(store)


# PUBLIC_INTERFACE
def get_maintenance_service(
    store: Optional[DocumentStore] = Depends(get_document_store),
) -> MaintenanceService:
    """MaintenanceService bound to the application's store handle and CLEAR_BATCH_SIZE."""
    return MaintenanceService(store, get_app_settings().CLEAR_BATCH_SIZE)
