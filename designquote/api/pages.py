from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from designquote.db.session import get_db, commit_or_fail
from designquote.models.catalog import Page
from designquote.schemas.catalog import PageCreate, PageUpdate, PageOut
from designquote.core.security import get_current_user, require_admin
from designquote.core.audit_log import log_audit
from designquote.core.auth_utils import check_not_found
from designquote.core.enums import AuditAction
from designquote.core.response_builders import build_page_response, build_page_response_list
from designquote.services.catalog import ensure_project_type, list_pages as all_pages, delete_page as remove_page

router = APIRouter(prefix="/pages", tags=["catalog"])

NULLABLE_FIELDS = {"description", "project_type_id"}


@router.get("/", response_model=List[PageOut])
async def list_pages(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    return build_page_response_list(await all_pages(db))


@router.get("/active", response_model=List[PageOut])
async def list_active_pages(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    return build_page_response_list(await all_pages(db, active_only=True))


@router.get("/{page_id}", response_model=PageOut)
async def get_page(
    page_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    page = await db.get(Page, page_id)
    check_not_found(page, "Page", page_id)
    return build_page_response(page)


@router.post("/", response_model=PageOut, status_code=201)
async def create_page(
    payload: PageCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    await ensure_project_type(db, payload.project_type_id)
    page = Page(**payload.model_dump())
    db.add(page)
    await log_audit(db, current_user.id, AuditAction.CREATE_CATALOG_ITEM, payload)
    await commit_or_fail(db, "Page creation")
    await db.refresh(page)
    return build_page_response(page)


@router.put("/{page_id}", response_model=PageOut)
async def update_page(
    page_id: int,
    payload: PageUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    page = await db.get(Page, page_id)
    check_not_found(page, "Page", page_id)
    
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is None and field not in NULLABLE_FIELDS:
            continue
        setattr(page, field, value)
    await ensure_project_type(db, page.project_type_id)
    
    await log_audit(db, current_user.id, AuditAction.UPDATE_CATALOG_ITEM, payload, entity_id=page_id)
    await commit_or_fail(db, "Page update")
    await db.refresh(page)
    return build_page_response(page)


@router.delete("/{page_id}")
async def delete_page(
    page_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    page = await db.get(Page, page_id)
    check_not_found(page, "Page", page_id)
    
    await remove_page(db, page)
    await log_audit(db, current_user.id, AuditAction.DELETE_CATALOG_ITEM, {"page_id": page_id}, entity_id=page_id)
    await commit_or_fail(db, "Page deletion")
    return {"deleted": True}
