"""Admin reporting endpoints"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from designquote.db.session import get_db
from designquote.core.security import require_admin
from designquote.core.enums import TimeRange
from designquote.schemas.report import FeatureUsageReport, QuoteMetricsReport, SalesPerformanceReport
from designquote.services import reports

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/feature-usage", response_model=FeatureUsageReport)
async def feature_usage_report(
    time_range: TimeRange = Query(TimeRange.ALL),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    return await reports.feature_usage(db, time_range)


@router.get("/quote-metrics", response_model=QuoteMetricsReport)
async def quote_metrics_report(
    time_range: TimeRange = Query(TimeRange.ALL),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    return await reports.quote_metrics(db, time_range)


@router.get("/sales-performance", response_model=SalesPerformanceReport)
async def sales_performance_report(
    time_range: TimeRange = Query(TimeRange.ALL),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    return await reports.sales_performance(db, time_range)
