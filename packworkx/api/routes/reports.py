from __future__ import annotations

import io
from datetime import date, datetime, timezone
from typing import Optional
from uuid import UUID

import pandas as pd
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Table, TableStyle
from sqlalchemy.ext.asyncio import AsyncSession

from packworkx.core.deps import get_current_active_user, require_roles
from packworkx.db.session import get_async_session
from packworkx.schemas.reports import DashboardSummary
from packworkx.services.reports import ReportService

# PUBLIC_INTERFACE
router = APIRouter(prefix="/reports", tags=["Reports"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _service(
    user=Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> ReportService:
    return ReportService(session, user.company_id, user.id)


def _attachment(filename: str) -> dict:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


def _render_pdf(df: pd.DataFrame, title: str) -> io.BytesIO:
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=landscape(A4), leftMargin=18, rightMargin=18, topMargin=18, bottomMargin=18
    )
    styles = getSampleStyleSheet()
    stamp = datetime.now(tz=timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    elements: list = [Paragraph(f"{title} ({stamp})", styles["Title"])]

    data = [list(df.columns)] + df.fillna("").astype(str).values.tolist()
    table = Table(data, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.black),
                ("ALIGN", (0, 0), (-1, -1), "LEFT"),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 7),
                ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ]
        )
    )
    elements.append(table)
    doc.build(elements)
    buffer.seek(0)
    return buffer


def _export_dataframe(df: pd.DataFrame, filename_base: str, export_format: str) -> StreamingResponse:
    """
    Convert DataFrame to the requested format and return a StreamingResponse.

    Supported formats:
      - csv (default, also used for unknown values): text/csv
      - xlsx: spreadsheet written with openpyxl
      - pdf: simple tabular rendering with reportlab
    """
    export_format = (export_format or "csv").lower()
    if export_format in ("xlsx", "excel"):
        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Report")
        buffer.seek(0)
        return StreamingResponse(buffer, media_type=XLSX_MEDIA_TYPE, headers=_attachment(f"{filename_base}.xlsx"))

    if export_format == "pdf":
        title = filename_base.replace("_", " ").title()
        return StreamingResponse(
            _render_pdf(df, title), media_type="application/pdf", headers=_attachment(f"{filename_base}.pdf")
        )

    text = io.StringIO()
    df.to_csv(text, index=False)
    text.seek(0)
    return StreamingResponse(text, media_type="text/csv", headers=_attachment(f"{filename_base}.csv"))


# PUBLIC_INTERFACE
@router.get(
    "/dashboard",
    response_model=DashboardSummary,
    summary="Dashboard counters",
    description="Open and awaiting-receipt POs, outstanding receivables, low-stock items and active machines.",
)
async def dashboard(service: ReportService = Depends(_service)) -> DashboardSummary:
    return await service.dashboard()


# PUBLIC_INTERFACE
@router.get(
    "/purchase-orders",
    summary="Purchase order register",
    description="Exports PO headers with supplier, totals, amount paid and receipt status.",
    response_description="File stream (CSV/XLSX/PDF)",
    dependencies=[Depends(require_roles("purchase", "accounts"))],
)
async def purchase_order_report(
    service: ReportService = Depends(_service),
    date_from: Optional[date] = Query(None, description="PO date on or after"),
    date_to: Optional[date] = Query(None, description="PO date on or before"),
    status: Optional[str] = Query(None, description="active (default) | inactive | all"),
    format: str = Query("csv", description="Export format: csv | xlsx | pdf"),
):
    df = await service.purchase_orders_frame(date_from=date_from, date_to=date_to, status=status)
    return _export_dataframe(df, "purchase_orders", format)


# PUBLIC_INTERFACE
@router.get(
    "/grn-receipts",
    summary="Goods receipt register",
    description="Exports active GRN lines with ordered, received, accepted and rejected quantities.",
    response_description="File stream (CSV/XLSX/PDF)",
    dependencies=[Depends(require_roles("store", "purchase"))],
)
async def grn_receipt_report(
    service: ReportService = Depends(_service),
    po_id: Optional[UUID] = Query(None, description="Filter by purchase order"),
    date_from: Optional[date] = Query(None, description="GRN date on or after"),
    date_to: Optional[date] = Query(None, description="GRN date on or before"),
    format: str = Query("csv", description="Export format: csv | xlsx | pdf"),
):
    df = await service.grn_receipts_frame(po_id=po_id, date_from=date_from, date_to=date_to)
    return _export_dataframe(df, "grn_receipts", format)


# PUBLIC_INTERFACE
@router.get(
    "/inventory-stock",
    summary="Stock report",
    description="Exports the per-item stock summary with low-stock and reorder flags.",
    response_description="File stream (CSV/XLSX/PDF)",
    dependencies=[Depends(require_roles("store", "purchase", "production"))],
)
async def inventory_stock_report(
    service: ReportService = Depends(_service),
    low_stock_only: bool = Query(False, description="Only items at or below their minimum or reorder level"),
    format: str = Query("csv", description="Export format: csv | xlsx | pdf"),
):
    df = await service.inventory_stock_frame(low_stock_only=low_stock_only)
    return _export_dataframe(df, "inventory_stock", format)


# PUBLIC_INTERFACE
@router.get(
    "/receivables",
    summary="Receivables report",
    description="Exports active invoices with an open balance and days overdue.",
    response_description="File stream (CSV/XLSX/PDF)",
    dependencies=[Depends(require_roles("sales", "accounts"))],
)
async def receivables_report(
    service: ReportService = Depends(_service),
    client_id: Optional[UUID] = Query(None, description="Filter by client"),
    as_of: Optional[date] = Query(None, description="Date used for days overdue (default today)"),
    format: str = Query("csv", description="Export format: csv | xlsx | pdf"),
):
    df = await service.receivables_frame(client_id=client_id, as_of=as_of)
    return _export_dataframe(df, "receivables", format)
