import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import List, Optional

from designquote.db.session import get_db, commit_or_fail
from designquote.models.user import User
from designquote.models.quote import Quote
from designquote.schemas.user import UserCreate, UserUpdate, ProfileUpdate, UserOut
from designquote.core.security import get_current_user, require_admin, hash_password, verify_password
from designquote.core.audit_log import log_audit
from designquote.core.auth_utils import check_not_found, check_not_self
from designquote.core.enums import AuditAction, UserRole
from designquote.core.response_builders import build_user_response

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["users"])


async def _ensure_username_free(db: AsyncSession, username: str, user_id: Optional[int] = None) -> None:
    res = await db.execute(select(User).where(User.username == username))
    existing = res.scalars().first()
    if existing and existing.id != user_id:
        raise HTTPException(status_code=400, detail="Username already exists")


async def _rename_user(db: AsyncSession, user: User, username: str) -> None:
    """Quotes record their author by username, so ownership follows the rename."""
    await _ensure_username_free(db, username, user.id)
    old_username = user.username
    for column in ("created_by", "updated_by"):
        await db.execute(
            update(Quote)
            .where(getattr(Quote, column) == old_username)
            .values({column: username})
            .execution_options(synchronize_session="fetch")
        )
    user.username = username


@router.get("/", response_model=List[UserOut])
async def list_users(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    res = await db.execute(select(User).order_by(User.id))
    return [build_user_response(user) for user in res.scalars().all()]


@router.post("/", response_model=UserOut, status_code=201)
async def create_user(
    payload: UserCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    await _ensure_username_free(db, payload.username)
    
    user = User(
        username=payload.username,
        password_hash=hash_password(payload.password),
        email=payload.email,
        first_name=payload.first_name,
        last_name=payload.last_name,
        role=UserRole.ADMIN if payload.is_admin else UserRole.SALES,
    )
    db.add(user)
    await log_audit(db, current_user.id, AuditAction.CREATE_USER, {"username": payload.username})
    await commit_or_fail(db, "User creation")
    await db.refresh(user)
    
    return build_user_response(user)


@router.put("/me/profile", response_model=UserOut)
async def update_profile(
    payload: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    if not verify_password(payload.current_password, current_user.password_hash):
        raise HTTPException(status_code=401, detail="Current password is incorrect")
    
    if payload.username and payload.username != current_user.username:
        await _rename_user(db, current_user, payload.username)
    if payload.password:
        current_user.password_hash = hash_password(payload.password)
    for field in ("email", "first_name", "last_name"):
        if field in payload.model_fields_set:
            setattr(current_user, field, getattr(payload, field))
    
    await log_audit(db, current_user.id, AuditAction.UPDATE_USER, {"id": current_user.id}, entity_id=current_user.id)
    await commit_or_fail(db, "Profile update")
    await db.refresh(current_user)
    
    return build_user_response(current_user)


@router.put("/{user_id}", response_model=UserOut)
async def update_user(
    user_id: int,
    payload: UserUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    user = await db.get(User, user_id)
    check_not_found(user, "User", user_id)
    
    data = payload.model_dump(exclude_unset=True)
    if data.get("username") and data["username"] != user.username:
        await _rename_user(db, user, data["username"])
    if data.get("password"):
        user.password_hash = hash_password(data["password"])
    if data.get("is_admin") is not None:
        user.role = UserRole.ADMIN if data["is_admin"] else UserRole.SALES
    for field in ("email", "first_name", "last_name"):
        if field in data:
            setattr(user, field, data[field])
    
    await log_audit(db, current_user.id, AuditAction.UPDATE_USER, {"id": user_id}, entity_id=user_id)
    await commit_or_fail(db, "User update")
    await db.refresh(user)
    
    return build_user_response(user)


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    check_not_self(user_id, current_user)
    
    user = await db.get(User, user_id)
    check_not_found(user, "User", user_id)
    
    await db.delete(user)
    await log_audit(db, current_user.id, AuditAction.DELETE_USER, {"id": user_id}, entity_id=user_id)
    await commit_or_fail(db, "User deletion")
    logger.info(f"User {user_id} deleted by {current_user.username}")
    
    return {"deleted": True}
