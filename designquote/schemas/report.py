from pydantic import BaseModel
from typing import List, Dict, Any
from designquote.core.enums import TimeRange


class FeatureUsageItem(BaseModel):
    feature_id: int
    feature_name: str
    count: int
    total_revenue: float


class FeatureUsageReport(BaseModel):
    feature_usage: List[FeatureUsageItem]
    total_quotes: int
    time_range: TimeRange


class StatusBucket(BaseModel):
    status: str
    count: int
    value: float


class QuoteSizeDistribution(BaseModel):
    small: int = 0
    medium: int = 0
    large: int = 0
    enterprise: int = 0


class MonthlyQuoteSize(BaseModel):
    month: str
    count: int
    average_size: float


class QuoteMetricsReport(BaseModel):
    average_quote_size: float
    quote_sizes_by_month: List[MonthlyQuoteSize]
    quote_status_distribution: List[StatusBucket]
    quote_size_distribution: QuoteSizeDistribution
    total_quotes: int
    total_revenue: float
    conversion_rate: float
    won_revenue: float
    potential_revenue: float
    time_range: TimeRange


class SalesPersonPerformance(BaseModel):
    username: str
    name: str
    total_quotes: int = 0
    total_revenue: float = 0.0
    won_quotes: int = 0
    won_revenue: float = 0.0
    lost_quotes: int = 0
    lost_revenue: float = 0.0
    pending_quotes: int = 0
    average_quote_size: float = 0.0
    conversion_rate: float = 0.0


class TeamTotals(BaseModel):
    total_quotes: int
    total_revenue: float
    won_quotes: int
    won_revenue: float
    lost_quotes: int
    pending_quotes: int
    average_quote_size: float
    conversion_rate: float


class SalesPerformanceReport(BaseModel):
    sales_performance: List[SalesPersonPerformance]
    team_totals: TeamTotals
    monthly_performance_chart: List[Dict[str, Any]]
    time_range: TimeRange
