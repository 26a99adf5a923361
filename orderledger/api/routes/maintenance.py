from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends

from orderledger.core.deps import get_maintenance_service
from orderledger.schemas.maintenance import ClearOptions, ClearSummary
from orderledger.services.maintenance import MaintenanceService

logger = logging.getLogger(__name__)

# PUBLIC_INTERFACE
router = APIRouter(
    prefix="/maintenance",
    tags=["Maintenance"],
)


# PUBLIC_INTERFACE
@router.post(
    "/clear-financials",
    response_model=ClearSummary,
    summary="Clear financial records",
    description=(
        "Deletes or resets the selected financial collections in batches of at most 450 writes. "
        "Omitted switches keep their defaults (everything except the orders themselves). "
        "Returns 503 when the document store is unavailable."
    ),
)
async def clear_financials(
    options: Optional[ClearOptions] = Body(default=None),
    service: MaintenanceService = Depends(get_maintenance_service),
) -> ClearSummary:
    logger.warning("Financial maintenance sweep requested: %s", (options or ClearOptions()).model_dump())
    return await service.clear_financials(options, strict=True)
