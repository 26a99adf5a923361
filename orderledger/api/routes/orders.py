from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from orderledger.api.params import order_filters
from orderledger.core.deps import get_dashboard_service
from orderledger.schemas.orders import OrderFilters, OrderProfitRead
from orderledger.services.stats import DashboardService

# PUBLIC_INTERFACE
router = APIRouter(
    prefix="/orders",
    tags=["Orders"],
)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[OrderProfitRead],
    summary="List order reconciliation",
    description="Adjusted profit and raw-material payment status for each matching order.",
)
async def list_order_profits(
    duration: Optional[str] = Query(None, description="Optional duration tag limiting orders by date"),
    filters: OrderFilters = Depends(order_filters),
    service: DashboardService = Depends(get_dashboard_service),
) -> List[OrderProfitRead]:
    return await service.order_profits(filters, duration)


# PUBLIC_INTERFACE
@router.get(
    "/{order_id}/profit",
    response_model=OrderProfitRead,
    summary="Order profit",
    description="Adjusted profit, adjustment flag and payment status of one order.",
)
async def get_order_profit(
    order_id: str = Path(..., description="Order document id"),
    service: DashboardService = Depends(get_dashboard_service),
) -> OrderProfitRead:
    result = await service.get_order_profit(order_id)
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return result
