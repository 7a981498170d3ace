"""Translation of store errors into HTTP responses."""

from fastapi import HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession


def conflict(fields: list[str]) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={"message": f"Already in use: {', '.join(fields)}", "fields": fields},
    )


async def find_conflicts(
    db: AsyncSession,
    model,
    values: dict[str, object],
    exclude_id: int | None = None,
) -> list[str]:
    """Names of unique columns whose value is already taken by another row."""
    checks = {field: value for field, value in values.items() if value is not None}
    if not checks:
        return []

    stmt = select(model).where(or_(*(getattr(model, f) == v for f, v in checks.items())))
    if exclude_id is not None:
        stmt = stmt.where(model.id != exclude_id)
    result = await db.execute(stmt)

    taken: list[str] = []
    for row in result.scalars().all():
        for field, value in checks.items():
            if getattr(row, field) == value and field not in taken:
                taken.append(field)
    return [f for f in values if f in taken]


def conflict_from_integrity_error(exc: IntegrityError, candidates: list[str]) -> HTTPException:
    """Best guess at which unique column a duplicate-key error came from.

    Both SQLite and PostgreSQL name the column or its constraint in the message.
    """
    message = str(exc.orig).lower()
    fields = [f for f in candidates if f in message] or candidates
    return conflict(fields)


async def ensure_unique(
    db: AsyncSession,
    model,
    values: dict[str, object],
    exclude_id: int | None = None,
) -> None:
    taken = await find_conflicts(db, model, values, exclude_id)
    if taken:
        raise conflict(taken)


async def flush_unique(db: AsyncSession, candidates: list[str]) -> None:
    """Flush pending writes, turning a unique-key race into a 409."""
    try:
        await db.flush()
    except IntegrityError as exc:
        raise conflict_from_integrity_error(exc, candidates) from exc
