"""Staff account management. Admin-only."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from courtdesk.core.auth import hash_password
from courtdesk.core.database import get_db
from courtdesk.core.dependencies import require_admin
from courtdesk.core.errors import ensure_unique, flush_unique
from courtdesk.models.user import User
from courtdesk.schemas import UserCreate, UserOut, UserUpdate
from courtdesk.services.audit import record_action

router = APIRouter(prefix="/users", tags=["users"])


async def _get_user(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def create_user(
    body: UserCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await ensure_unique(db, User, {"email": body.email})

    user = User(name=body.name, email=body.email, hashed_password=hash_password(body.password), role=body.role)
    db.add(user)
    await flush_unique(db, ["email"])

    await record_action(db, admin.name, f"Created user {user.email}")
    await db.refresh(user)
    return user


@router.get("", response_model=list[UserOut])
async def list_users(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(User).order_by(User.id))
    return result.scalars().all()


@router.put("/{user_id}", response_model=UserOut)
async def update_user(
    user_id: int,
    body: UserUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await _get_user(db, user_id)

    if body.email and body.email != user.email:
        await ensure_unique(db, User, {"email": body.email}, exclude_id=user.id)
        user.email = body.email
    if body.name:
        user.name = body.name
    if body.password:
        user.hashed_password = hash_password(body.password)
    if body.role is not None:
        user.role = body.role
    if body.is_active is not None:
        user.is_active = body.is_active

    await flush_unique(db, ["email"])
    await record_action(db, admin.name, f"Updated user {user.email}")
    await db.refresh(user)
    return user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Deactivate an account. Its bookings keep pointing at it."""
    user = await _get_user(db, user_id)
    if user.id == admin.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account")

    user.is_active = False
    await record_action(db, admin.name, f"Deleted user {user.email}")
