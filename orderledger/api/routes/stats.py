from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from orderledger.api.params import order_filters
from orderledger.core.deps import get_dashboard_service
from orderledger.schemas.orders import OrderFilters
from orderledger.schemas.stats import DashboardRead, DashboardStats, DateRange, StatsCalculateRequest
from orderledger.services.stats import (
    DEFAULT_DURATION,
    DURATION_TAGS,
    DashboardService,
    calculate_stats,
    get_date_range_for_duration,
)

# PUBLIC_INTERFACE
router = APIRouter(
    prefix="/stats",
    tags=["Stats"],
)

_DURATION_HELP = f"One of {', '.join(DURATION_TAGS)}; anything else means {DEFAULT_DURATION}"


# PUBLIC_INTERFACE
@router.get(
    "/date-range",
    response_model=DateRange,
    summary="Resolve a duration tag",
    description="Returns the calendar window (UTC) a duration tag selects right now.",
)
def date_range(
    duration: Optional[str] = Query(None, description=_DURATION_HELP),
) -> DateRange:
    return get_date_range_for_duration(duration)


# PUBLIC_INTERFACE
@router.get(
    "/dashboard",
    response_model=DashboardRead,
    summary="Dashboard statistics",
    description=(
        "Aggregates the stored orders inside the duration window (after party/material/date filters) "
        "and the ledger entries inside the same window."
    ),
)
async def dashboard(
    duration: str = Query(DEFAULT_DURATION, description=_DURATION_HELP),
    filters: OrderFilters = Depends(order_filters),
    service: DashboardService = Depends(get_dashboard_service),
) -> DashboardRead:
    return await service.dashboard(duration, filters)


# PUBLIC_INTERFACE
@router.post(
    "/calculate",
    response_model=DashboardStats,
    summary="Calculate statistics for supplied records",
    description=(
        "Pure aggregation over the orders and optional ledger entries in the request body. "
        "rangeStart/rangeEnd bound the ledger entries only (inclusive)."
    ),
)
def calculate(payload: StatsCalculateRequest) -> DashboardStats:
    return calculate_stats(
        payload.orders,
        payload.ledger_entries,
        payload.range_start,
        payload.range_end,
    )
