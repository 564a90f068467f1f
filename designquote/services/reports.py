"""Read-side aggregations over quotes and their feature lines"""
from collections import defaultdict
from datetime import timedelta
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from designquote.core.enums import LeadStatus, TimeRange
from designquote.core.metrics import track_operation
from designquote.core.response_builders import UNKNOWN_FEATURE
from designquote.models.base import utcnow
from designquote.models.quote import Quote, QuoteFeature
from designquote.models.user import User

TIME_RANGE_DAYS = {
    TimeRange.PAST_30_DAYS: 30,
    TimeRange.PAST_90_DAYS: 90,
    TimeRange.PAST_YEAR: 365,
}

# Upper bounds of the quote size buckets; anything above is "enterprise".
SIZE_BUCKETS = (("small", 5500.0), ("medium", 10500.0), ("large", 25500.0))


def _is_won(quote: Quote) -> bool:
    return quote.lead_status == LeadStatus.WON.value


def _is_lost(quote: Quote) -> bool:
    return quote.lead_status == LeadStatus.LOST.value


def _month_key(quote: Quote) -> str:
    return quote.created_at.strftime("%Y-%m")


def _ratio(part: float, whole: float) -> float:
    return part / whole if whole else 0.0


def size_bucket(total_price: float) -> str:
    for name, upper in SIZE_BUCKETS:
        if total_price < upper:
            return name
    return "enterprise"


@track_operation("report", "quotes")
async def quotes_in_range(db: AsyncSession, time_range: TimeRange) -> List[Quote]:
    q = select(Quote)
    days: Optional[int] = TIME_RANGE_DAYS.get(time_range)
    if days is not None:
        q = q.where(Quote.created_at >= utcnow() - timedelta(days=days))
    res = await db.execute(q.order_by(Quote.id))
    return res.scalars().all()


async def feature_usage(db: AsyncSession, time_range: TimeRange) -> dict:
    quotes = await quotes_in_range(db, time_range)
    quote_ids = [quote.id for quote in quotes]

    usage = {}
    if quote_ids:
        res = await db.execute(select(QuoteFeature).where(QuoteFeature.quote_id.in_(quote_ids)))
        for line in res.scalars().all():
            entry = usage.setdefault(line.feature_id, {
                "feature_id": line.feature_id,
                "feature_name": line.feature.name if line.feature else UNKNOWN_FEATURE,
                "count": 0,
                "total_revenue": 0.0,
            })
            entry["count"] += 1
            entry["total_revenue"] += line.price

    return {
        "feature_usage": sorted(usage.values(), key=lambda e: (-e["count"], e["feature_id"])),
        "total_quotes": len(quotes),
        "time_range": time_range,
    }


async def quote_metrics(db: AsyncSession, time_range: TimeRange) -> dict:
    quotes = await quotes_in_range(db, time_range)
    total_revenue = sum(q.total_price for q in quotes)

    by_status = {}
    sizes = {"small": 0, "medium": 0, "large": 0, "enterprise": 0}
    by_month = defaultdict(lambda: {"count": 0, "total": 0.0})
    for quote in quotes:
        bucket = by_status.setdefault(quote.lead_status, {"status": quote.lead_status, "count": 0, "value": 0.0})
        bucket["count"] += 1
        bucket["value"] += quote.total_price
        sizes[size_bucket(quote.total_price)] += 1
        month = by_month[_month_key(quote)]
        month["count"] += 1
        month["total"] += quote.total_price

    won = [q for q in quotes if _is_won(q)]
    open_quotes = [q for q in quotes if not _is_won(q) and not _is_lost(q)]

    return {
        "average_quote_size": _ratio(total_revenue, len(quotes)),
        "quote_sizes_by_month": [
            {"month": month, "count": data["count"], "average_size": _ratio(data["total"], data["count"])}
            for month, data in sorted(by_month.items())
        ],
        "quote_status_distribution": list(by_status.values()),
        "quote_size_distribution": sizes,
        "total_quotes": len(quotes),
        "total_revenue": total_revenue,
        "conversion_rate": _ratio(len(won), len(quotes)),
        "won_revenue": sum(q.total_price for q in won),
        "potential_revenue": sum(q.total_price for q in open_quotes),
        "time_range": time_range,
    }


def _blank_performance(username: str, name: str) -> dict:
    return {
        "username": username,
        "name": name,
        "total_quotes": 0,
        "total_revenue": 0.0,
        "won_quotes": 0,
        "won_revenue": 0.0,
        "lost_quotes": 0,
        "lost_revenue": 0.0,
        "pending_quotes": 0,
        "average_quote_size": 0.0,
        "conversion_rate": 0.0,
    }


async def sales_performance(db: AsyncSession, time_range: TimeRange) -> dict:
    quotes = await quotes_in_range(db, time_range)
    res = await db.execute(select(User).order_by(User.id))
    users = res.scalars().all()

    performance = {user.username: _blank_performance(user.username, user.display_name) for user in users}
    monthly = defaultdict(lambda: defaultdict(lambda: {"quotes": 0, "revenue": 0.0}))

    for quote in quotes:
        creator = quote.created_by or "unknown"
        person = performance.setdefault(creator, _blank_performance(creator, creator))
        person["total_quotes"] += 1
        person["total_revenue"] += quote.total_price
        if _is_won(quote):
            person["won_quotes"] += 1
            person["won_revenue"] += quote.total_price
        elif _is_lost(quote):
            person["lost_quotes"] += 1
            person["lost_revenue"] += quote.total_price
        else:
            person["pending_quotes"] += 1

        cell = monthly[_month_key(quote)][creator]
        cell["quotes"] += 1
        cell["revenue"] += quote.total_price

    for person in performance.values():
        person["average_quote_size"] = _ratio(person["total_revenue"], person["total_quotes"])
        person["conversion_rate"] = _ratio(person["won_quotes"], person["total_quotes"])

    won = [q for q in quotes if _is_won(q)]
    lost = [q for q in quotes if _is_lost(q)]
    total_revenue = sum(q.total_price for q in quotes)
    team_totals = {
        "total_quotes": len(quotes),
        "total_revenue": total_revenue,
        "won_quotes": len(won),
        "won_revenue": sum(q.total_price for q in won),
        "lost_quotes": len(lost),
        "pending_quotes": len(quotes) - len(won) - len(lost),
        "average_quote_size": _ratio(total_revenue, len(quotes)),
        "conversion_rate": _ratio(len(won), len(quotes)),
    }

    chart = []
    for month, per_user in sorted(monthly.items()):
        row = {"month": month}
        for username, cell in per_user.items():
            row[f"{username}_quotes"] = cell["quotes"]
            row[f"{username}_revenue"] = cell["revenue"]
        chart.append(row)

    return {
        "sales_performance": sorted(performance.values(), key=lambda p: -p["total_revenue"]),
        "team_totals": team_totals,
        "monthly_performance_chart": chart,
        "time_range": time_range,
    }
