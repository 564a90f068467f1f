"""Business name and brand colour settings"""
import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from designquote.db.session import get_db, commit_or_fail
from designquote.models.system_settings import SystemSettings
from designquote.schemas.settings import SystemSettingsOut, BusinessNameIn, BrandColorsIn
from designquote.core.config import settings as app_settings
from designquote.core.security import require_admin
from designquote.core.audit_log import log_audit
from designquote.core.enums import AuditAction

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/settings", tags=["settings"])


async def _load(db: AsyncSession):
    res = await db.execute(select(SystemSettings).order_by(SystemSettings.id).limit(1))
    return res.scalars().first()


async def _load_or_create(db: AsyncSession) -> SystemSettings:
    row = await _load(db)
    if row is None:
        row = SystemSettings(
            light_mode_color=app_settings.DEFAULT_LIGHT_MODE_COLOR,
            dark_mode_color=app_settings.DEFAULT_DARK_MODE_COLOR,
        )
        db.add(row)
    return row


def _to_out(row) -> SystemSettingsOut:
    if row is None:
        return SystemSettingsOut(
            business_name=None,
            light_mode_color=app_settings.DEFAULT_LIGHT_MODE_COLOR,
            dark_mode_color=app_settings.DEFAULT_DARK_MODE_COLOR,
        )
    return SystemSettingsOut(
        business_name=row.business_name,
        light_mode_color=row.light_mode_color or app_settings.DEFAULT_LIGHT_MODE_COLOR,
        dark_mode_color=row.dark_mode_color or app_settings.DEFAULT_DARK_MODE_COLOR,
    )


@router.get("/", response_model=SystemSettingsOut)
async def get_settings(db: AsyncSession = Depends(get_db)):
    return _to_out(await _load(db))


@router.get("/business-name")
async def get_business_name(db: AsyncSession = Depends(get_db)):
    row = await _load(db)
    return {"business_name": row.business_name if row else None}


@router.put("/business-name", response_model=SystemSettingsOut)
async def update_business_name(
    payload: BusinessNameIn,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    name = payload.business_name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Business name is required")

    row = await _load_or_create(db)
    row.business_name = name
    await log_audit(db, current_user.id, AuditAction.UPDATE_SETTINGS, {"business_name": name})
    await commit_or_fail(db, "update business name")
    await db.refresh(row)

    logger.info(f"Business name updated by {current_user.username}")
    return _to_out(row)


@router.put("/brand-colors", response_model=SystemSettingsOut)
async def update_brand_colors(
    payload: BrandColorsIn,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    row = await _load_or_create(db)
    row.light_mode_color = payload.light_mode_color.strip()
    row.dark_mode_color = payload.dark_mode_color.strip()
    await log_audit(db, current_user.id, AuditAction.UPDATE_SETTINGS, payload)
    await commit_or_fail(db, "update brand colors")
    await db.refresh(row)

    logger.info(f"Brand colors updated by {current_user.username}")
    return _to_out(row)
