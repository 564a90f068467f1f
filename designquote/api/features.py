from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from designquote.db.session import get_db, commit_or_fail
from designquote.models.catalog import Feature
from designquote.schemas.catalog import FeatureCreate, FeatureUpdate, FeatureOut
from designquote.core.security import get_current_user, require_admin
from designquote.core.audit_log import log_audit
from designquote.core.auth_utils import check_not_found
from designquote.core.enums import AuditAction
from designquote.core.response_builders import build_feature_response, build_feature_response_list
from designquote.services.catalog import (
    validate_feature_pricing, ensure_project_type, set_feature_project_types, list_features as all_features,
    delete_feature as remove_feature,
)

router = APIRouter(prefix="/features", tags=["catalog"])

NULLABLE_FIELDS = {"description", "category", "flat_price", "hourly_rate", "estimated_hours", "project_type_id"}


@router.get("/", response_model=List[FeatureOut])
async def list_features(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    return build_feature_response_list(await all_features(db))


@router.get("/{feature_id}", response_model=FeatureOut)
async def get_feature(
    feature_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    feature = await db.get(Feature, feature_id)
    check_not_found(feature, "Feature", feature_id)
    return build_feature_response(feature)


@router.post("/", response_model=FeatureOut, status_code=201)
async def create_feature(
    payload: FeatureCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    feature = Feature(**payload.model_dump(exclude={"selected_project_types"}))
    validate_feature_pricing(feature)
    await ensure_project_type(db, feature.project_type_id)
    await set_feature_project_types(db, feature, payload.selected_project_types)
    
    db.add(feature)
    await log_audit(db, current_user.id, AuditAction.CREATE_CATALOG_ITEM, payload)
    await commit_or_fail(db, "Feature creation")
    await db.refresh(feature)
    return build_feature_response(feature)


@router.put("/{feature_id}", response_model=FeatureOut)
async def update_feature(
    feature_id: int,
    payload: FeatureUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    feature = await db.get(Feature, feature_id)
    check_not_found(feature, "Feature", feature_id)
    
    data = payload.model_dump(exclude_unset=True, exclude={"selected_project_types"})
    for field, value in data.items():
        if value is None and field not in NULLABLE_FIELDS:
            continue
        setattr(feature, field, value)
    validate_feature_pricing(feature)
    await ensure_project_type(db, feature.project_type_id)
    
    if payload.selected_project_types is not None or "for_all_project_types" in data:
        selected = payload.selected_project_types
        if selected is None:
            selected = feature.project_type_ids
        await set_feature_project_types(db, feature, selected)
    
    await log_audit(db, current_user.id, AuditAction.UPDATE_CATALOG_ITEM, payload, entity_id=feature_id)
    await commit_or_fail(db, "Feature update")
    await db.refresh(feature)
    return build_feature_response(feature)


@router.delete("/{feature_id}")
async def delete_feature(
    feature_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    feature = await db.get(Feature, feature_id)
    check_not_found(feature, "Feature", feature_id)
    
    await remove_feature(db, feature)
    await log_audit(db, current_user.id, AuditAction.DELETE_CATALOG_ITEM, {"feature_id": feature_id}, entity_id=feature_id)
    await commit_or_fail(db, "Feature deletion")
    return {"deleted": True}
