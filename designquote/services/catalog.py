"""Catalog rules that reach beyond a single row"""
import logging
from typing import Iterable
from fastapi import HTTPException
from sqlalchemy import update, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from designquote.core.auth_utils import check_not_found
from designquote.core.enums import PricingType
from designquote.core.metrics import track_operation
from designquote.models.catalog import ProjectType, Feature, FeatureProjectType, Page
from designquote.models.quote import Quote, QuoteFeature, QuotePage

logger = logging.getLogger(__name__)


def validate_feature_pricing(feature) -> None:
    if feature.pricing_type == PricingType.HOURLY:
        if feature.hourly_rate is None or feature.estimated_hours is None:
            raise HTTPException(
                status_code=400,
                detail="Hourly features need both hourly_rate and estimated_hours"
            )
    elif feature.flat_price is None:
        raise HTTPException(status_code=400, detail="Flat features need a flat_price")


async def ensure_project_type(db: AsyncSession, project_type_id) -> None:
    if project_type_id is None:
        return
    project_type = await db.get(ProjectType, project_type_id)
    check_not_found(project_type, "Project type", project_type_id)


async def set_feature_project_types(
    db: AsyncSession,
    feature: Feature,
    project_type_ids: Iterable[int],
) -> None:
    """Replace the junction rows of ``feature``.

    Features flagged for all project types keep no junction rows. Rows for
    project types that stay selected are reused so the unique pair index is
    never hit by a delete/insert of the same pair.
    """
    wanted = [] if feature.for_all_project_types else list(dict.fromkeys(project_type_ids))
    for project_type_id in wanted:
        await ensure_project_type(db, project_type_id)

    existing = {link.project_type_id: link for link in feature.project_type_links}
    feature.project_type_links = [
        existing.get(project_type_id) or FeatureProjectType(project_type_id=project_type_id)
        for project_type_id in wanted
    ]


@track_operation("delete", "project_types")
async def delete_project_type(db: AsyncSession, project_type: ProjectType) -> None:
    """Delete a project type, detaching everything that pointed at it."""
    project_type_id = project_type.id
    for model in (Feature, Page, Quote):
        await db.execute(
            update(model)
            .where(model.project_type_id == project_type_id)
            .values(project_type_id=None)
            .execution_options(synchronize_session="fetch")
        )
    await db.execute(
        delete(FeatureProjectType)
        .where(FeatureProjectType.project_type_id == project_type_id)
        .execution_options(synchronize_session="fetch")
    )
    await db.delete(project_type)
    logger.info(f"Project type {project_type_id} deleted, references cleared")


@track_operation("delete", "features")
async def delete_feature(db: AsyncSession, feature: Feature) -> None:
    """Delete a feature and the quote lines that used it.

    Quote totals are left as they are; they change on the next recompute.
    """
    res = await db.execute(
        delete(QuoteFeature)
        .where(QuoteFeature.feature_id == feature.id)
        .execution_options(synchronize_session="fetch")
    )
    logger.info(f"Feature {feature.id} deleted, {res.rowcount} quote line(s) removed")
    await db.delete(feature)


@track_operation("delete", "pages")
async def delete_page(db: AsyncSession, page: Page) -> None:
    res = await db.execute(
        delete(QuotePage)
        .where(QuotePage.page_id == page.id)
        .execution_options(synchronize_session="fetch")
    )
    logger.info(f"Page {page.id} deleted, {res.rowcount} quote line(s) removed")
    await db.delete(page)


async def list_features(db: AsyncSession):
    res = await db.execute(select(Feature).order_by(Feature.id))
    return res.scalars().all()


async def list_pages(db: AsyncSession, active_only: bool = False):
    q = select(Page)
    if active_only:
        q = q.where(Page.is_active.is_(True))
    res = await db.execute(q.order_by(Page.id))
    return res.scalars().all()
