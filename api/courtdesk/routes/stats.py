"""Statistics routes and their spreadsheet exports. Admin-only.

Every endpoint takes ``type`` = week | month | year; anything else falls
back to the trailing seven days.
"""

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from courtdesk.core.database import get_db
from courtdesk.core.dependencies import require_admin
from courtdesk.models.user import User
from courtdesk.schemas import ClientPeriodStatsOut, FinancialStatsOut
from courtdesk.services.audit import record_action
from courtdesk.services.booking_rules import local_now
from courtdesk.services.export import XLSX_MEDIA_TYPE, clients_workbook, financial_workbook
from courtdesk.services.stats import client_period_stats, financial_stats, income_bookings, summarise_income

router = APIRouter(prefix="/stats", tags=["stats"])

PERIOD_QUERY = Query("week", alias="type", description="week, month or year")


def _xlsx(content: bytes, prefix: str, period_type: str) -> Response:
    filename = f"{prefix}_{period_type}_{local_now().date().isoformat()}.xlsx"
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get("/clients", response_model=list[ClientPeriodStatsOut])
async def get_client_stats(
    period_type: str = PERIOD_QUERY,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    stats = await client_period_stats(db, period_type)
    await record_action(db, admin.name, f"Viewed client statistics ({period_type})")
    return stats


@router.get("/financial", response_model=FinancialStatsOut)
async def get_financial_stats(
    period_type: str = PERIOD_QUERY,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    summary = await financial_stats(db, period_type)
    await record_action(db, admin.name, f"Viewed financial statistics ({period_type})")
    return summary


@router.get("/clients/export")
async def export_client_stats(
    period_type: str = PERIOD_QUERY,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    stats = await client_period_stats(db, period_type)
    await record_action(db, admin.name, f"Exported client statistics ({period_type})")
    return _xlsx(clients_workbook(stats), "clients", period_type)


@router.get("/financial/export")
async def export_financial_stats(
    period_type: str = PERIOD_QUERY,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    rows = await income_bookings(db, period_type)
    await record_action(db, admin.name, f"Exported financial statistics ({period_type})")
    return _xlsx(financial_workbook(rows, summarise_income(rows)), "financial", period_type)
