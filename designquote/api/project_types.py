from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import List

from designquote.db.session import get_db, commit_or_fail
from designquote.models.catalog import ProjectType
from designquote.schemas.catalog import ProjectTypeCreate, ProjectTypeUpdate, ProjectTypeOut, FeatureOut, PageOut
from designquote.core.security import get_current_user, require_admin
from designquote.core.audit_log import log_audit
from designquote.core.auth_utils import check_not_found
from designquote.core.enums import AuditAction
from designquote.core.response_builders import (
    build_project_type_response, build_feature_response_list, build_page_response_list,
)
from designquote.services.catalog import delete_project_type as remove_project_type
from designquote.services.eligibility import resolve_features_for_project_type, resolve_pages_for_project_type

router = APIRouter(prefix="/project-types", tags=["catalog"])


@router.get("/", response_model=List[ProjectTypeOut])
async def list_project_types(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    res = await db.execute(select(ProjectType).order_by(ProjectType.id))
    return [build_project_type_response(pt) for pt in res.scalars().all()]


@router.get("/{project_type_id}", response_model=ProjectTypeOut)
async def get_project_type(
    project_type_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    project_type = await db.get(ProjectType, project_type_id)
    check_not_found(project_type, "Project type", project_type_id)
    return build_project_type_response(project_type)


@router.get("/{project_type_id}/features", response_model=List[FeatureOut])
async def list_eligible_features(
    project_type_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    features = await resolve_features_for_project_type(db, project_type_id)
    return build_feature_response_list(features)


@router.get("/{project_type_id}/pages", response_model=List[PageOut])
async def list_eligible_pages(
    project_type_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    pages = await resolve_pages_for_project_type(db, project_type_id)
    return build_page_response_list(pages)


@router.post("/", response_model=ProjectTypeOut, status_code=201)
async def create_project_type(
    payload: ProjectTypeCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    project_type = ProjectType(**payload.model_dump())
    db.add(project_type)
    await log_audit(db, current_user.id, AuditAction.CREATE_CATALOG_ITEM, payload)
    await commit_or_fail(db, "Project type creation")
    await db.refresh(project_type)
    return build_project_type_response(project_type)


@router.put("/{project_type_id}", response_model=ProjectTypeOut)
async def update_project_type(
    project_type_id: int,
    payload: ProjectTypeUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    project_type = await db.get(ProjectType, project_type_id)
    check_not_found(project_type, "Project type", project_type_id)
    
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is None and field != "description":
            continue
        setattr(project_type, field, value)
    
    await log_audit(db, current_user.id, AuditAction.UPDATE_CATALOG_ITEM, payload, entity_id=project_type_id)
    await commit_or_fail(db, "Project type update")
    await db.refresh(project_type)
    return build_project_type_response(project_type)


@router.delete("/{project_type_id}")
async def delete_project_type(
    project_type_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    project_type = await db.get(ProjectType, project_type_id)
    check_not_found(project_type, "Project type", project_type_id)
    
    await remove_project_type(db, project_type)
    await log_audit(db, current_user.id, AuditAction.DELETE_CATALOG_ITEM, {"project_type_id": project_type_id}, entity_id=project_type_id)
    await commit_or_fail(db, "Project type deletion")
    return {"deleted": True}
