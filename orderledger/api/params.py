from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Optional

from fastapi import Query

from orderledger.schemas.orders import OrderFilters


# PUBLIC_INTERFACE
def order_filters(
    party_name: Optional[str] = Query(None, description="Comma-separated party names"),
    material: Optional[str] = Query(None, description="Comma-separated material names or fragments"),
    start_date: Optional[date] = Query(None, description="First order date to include (YYYY-MM-DD)"),
    end_date: Optional[date] = Query(None, description="Last order date to include (YYYY-MM-DD)"),
) -> OrderFilters:
    """
    Collect order filter query parameters.

    Dates cover whole days in UTC: start_date from 00:00, end_date until 23:59:59.999999.
    """
    return OrderFilters(
        party_name=party_name,
        material=material,
        start_date=datetime.combine(start_date, time.min, tzinfo=timezone.utc) if start_date else None,
        end_date=datetime.combine(end_date, time.max, tzinfo=timezone.utc) if end_date else None,
    )
