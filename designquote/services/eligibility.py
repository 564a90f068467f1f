"""Which catalog features and pages can be offered for a project type.

A feature is eligible through any of three independent routes: it is pinned
to the project type directly, it is flagged for all project types, or a
junction row links it to the project type. Each route is its own query and the
results are merged by id, first route wins the position in the list.
"""
from typing import List
from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from designquote.models.catalog import Feature, FeatureProjectType, Page
from designquote.core.metrics import track_operation


def _feature_routes(project_type_id: int) -> list:
    direct = select(Feature).where(Feature.project_type_id == project_type_id)
    universal = select(Feature).where(Feature.for_all_project_types.is_(True))
    junction = (
        select(Feature)
        .join(FeatureProjectType, FeatureProjectType.feature_id == Feature.id)
        .where(FeatureProjectType.project_type_id == project_type_id)
    )
    return [q.order_by(Feature.id) for q in (direct, universal, junction)]


@track_operation("resolve", "features")
async def resolve_features_for_project_type(db: AsyncSession, project_type_id: int) -> List[Feature]:
    merged = {}
    for query in _feature_routes(project_type_id):
        res = await db.execute(query)
        for feature in res.scalars().all():
            merged.setdefault(feature.id, feature)
    return list(merged.values())


@track_operation("resolve", "pages")
async def resolve_pages_for_project_type(db: AsyncSession, project_type_id: int) -> List[Page]:
    res = await db.execute(
        select(Page)
        .where(
            Page.is_active.is_(True),
            or_(Page.project_type_id == project_type_id, Page.project_type_id.is_(None)),
        )
        .order_by(Page.id)
    )
    return list(res.scalars().all())
