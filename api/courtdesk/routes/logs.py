"""Audit log reader."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from courtdesk.core.database import get_db
from courtdesk.core.dependencies import require_admin
from courtdesk.models.audit import AuditLog
from courtdesk.models.user import User
from courtdesk.schemas import AuditLogOut

router = APIRouter(prefix="/logs", tags=["logs"])


@router.get("", response_model=list[AuditLogOut])
async def list_logs(
    limit: int = Query(500, ge=1, le=5000),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(AuditLog).order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit))
    return result.scalars().all()
