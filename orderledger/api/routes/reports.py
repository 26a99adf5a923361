from __future__ import annotations

import io
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Tuple

import pandas as pd
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from orderledger.api.params import order_filters
from orderledger.core.deps import get_dashboard_service
from orderledger.repositories.ledger import LedgerRepository
from orderledger.schemas.orders import OrderFilters
from orderledger.services.stats import (
    DEFAULT_DURATION,
    DashboardService,
    get_date_range_for_duration,
)

# PUBLIC_INTERFACE
router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
)

ORDER_STATEMENT_COLUMNS = [
    "order_code",
    "date",
    "party_name",
    "truck_no",
    "profit",
    "adjusted_profit",
    "has_adjustments",
    "raw_material_paid",
    "raw_material_outstanding",
    "payment_status",
]

LEDGER_COLUMNS = [
    "date",
    "type",
    "amount",
    "party_name",
    "supplier",
    "source",
    "note",
]


XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _render_csv(df: pd.DataFrame, title: str) -> Tuple[io.IOBase, str, str]:
    buffer = io.StringIO()
    df.to_csv(buffer, index=False)
    return buffer, "text/csv", "csv"


def _render_xlsx(df: pd.DataFrame, title: str) -> Tuple[io.IOBase, str, str]:
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=title[:31])
    return buffer, XLSX_MEDIA_TYPE, "xlsx"


def _render_pdf(df: pd.DataFrame, title: str) -> Tuple[io.IOBase, str, str]:
    from reportlab.lib import colors
    from reportlab.lib.pagesizes import A4, landscape
    from reportlab.lib.styles import getSampleStyleSheet
    from reportlab.platypus import Paragraph, SimpleDocTemplate, Table, TableStyle

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=landscape(A4), leftMargin=18, rightMargin=18, topMargin=18, bottomMargin=18)
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    heading = Paragraph(f"{title} ({stamp})", getSampleStyleSheet()["Title"])

    rows = [list(df.columns)] + df.fillna("").astype(str).values.tolist()
    table = Table(rows, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 8),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ]
        )
    )
    doc.build([heading, table])
    return buffer, "application/pdf", "pdf"


_RENDERERS: Dict[str, Callable[[pd.DataFrame, str], Tuple[io.IOBase, str, str]]] = {
    "csv": _render_csv,
    "xlsx": _render_xlsx,
    "excel": _render_xlsx,
    "pdf": _render_pdf,
}


def _export_dataframe(df: pd.DataFrame, filename_base: str, export_format: str) -> StreamingResponse:
    """
    Stream a DataFrame as csv, xlsx or pdf; unknown formats fall back to csv.
    """
    render = _RENDERERS.get((export_format or "csv").lower(), _render_csv)
    buffer, media_type, extension = render(df, filename_base.replace("_", " ").title())
    buffer.seek(0)
    headers = {"Content-Disposition": f'attachment; filename="{filename_base}.{extension}"'}
    return StreamingResponse(buffer, media_type=media_type, headers=headers)


# PUBLIC_INTERFACE
@router.get(
    "/order-statement",
    summary="Order statement",
    description="Exports per-order adjusted profit and raw-material payment status for the duration window.",
    response_description="File stream (CSV/XLSX/PDF)",
)
async def order_statement_report(
    duration: str = Query(DEFAULT_DURATION, description="Duration tag selecting the orders"),
    filters: OrderFilters = Depends(order_filters),
    service: DashboardService = Depends(get_dashboard_service),
    format: str = Query("csv", description="Export format: csv | xlsx | pdf"),
):
    """
    Generate an Order Statement.

    One row per order with the stored profit, the adjusted profit, whether any
    adjustment applies, raw-material paid/outstanding and payment status
    (paid within a 250 tolerance, partial, unpaid).
    """
    rows = await service.order_profits(filters, duration)
    data = [
        {
            "order_code": row.order_code,
            "date": row.date.date().isoformat() if row.date else None,
            "party_name": row.party_name,
            "truck_no": row.truck_no,
            "profit": row.profit,
            "adjusted_profit": row.adjusted_profit,
            "has_adjustments": row.has_adjustments,
            "raw_material_paid": row.raw_material_paid,
            "raw_material_outstanding": row.raw_material_outstanding,
            "payment_status": row.payment_status.value,
        }
        for row in rows
    ]
    df = pd.DataFrame(data, columns=ORDER_STATEMENT_COLUMNS)
    return _export_dataframe(df, "order_statement", format)


# PUBLIC_INTERFACE
@router.get(
    "/ledger",
    summary="Ledger report",
    description="Exports the ledger entries inside the duration window, oldest first. Undated entries count as in range and are listed last.",
    response_description="File stream (CSV/XLSX/PDF)",
)
async def ledger_report(
    duration: Optional[str] = Query(DEFAULT_DURATION, description="Duration tag selecting the entries"),
    service: DashboardService = Depends(get_dashboard_service),
    format: str = Query("csv", description="Export format: csv | xlsx | pdf"),
):
    """Generate a Ledger report: credits and debits with their counterparty."""
    window = get_date_range_for_duration(duration)
    entries = await LedgerRepository(service.require_store()).list_entries()
    data = [
        {
            "date": entry.date,
            "type": entry.type,
            "amount": entry.amount,
            "party_name": entry.party_name,
            "supplier": entry.supplier,
            "source": entry.source,
            "note": entry.note,
        }
        for entry in entries
    ]
    df = pd.DataFrame(data, columns=LEDGER_COLUMNS)
    if not df.empty:
        df["date"] = pd.to_datetime(df["date"], utc=True, errors="coerce")
        # undated entries stay in, as they do in the dashboard totals
        in_window = (df["date"] >= window.start) & (df["date"] <= window.end)
        df = df[df["date"].isna() | in_window]
        df = df.sort_values("date", kind="stable", na_position="last")
        df["date"] = df["date"].dt.strftime("%Y-%m-%d").fillna("")
    return _export_dataframe(df, "ledger", format)
