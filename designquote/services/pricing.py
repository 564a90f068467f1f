"""Line item and quote total arithmetic.

Everything here is pure: callers pass catalog rows (or anything with the same
attributes) and get plain floats back. Missing price factors count as zero so
that legacy rows with incomplete pricing never break a calculation.
"""
from typing import Iterable, Optional
from designquote.core.enums import PricingType


def _or_zero(value: Optional[float]) -> float:
    return float(value) if value is not None else 0.0


def feature_unit_price(feature) -> float:
    if feature.pricing_type == PricingType.HOURLY:
        return _or_zero(feature.hourly_rate) * _or_zero(feature.estimated_hours)
    return _or_zero(feature.flat_price)


def feature_line_price(feature, quantity: int) -> float:
    return feature_unit_price(feature) * quantity


def page_line_price(page, quantity: int) -> float:
    return _or_zero(page.price_per_page) * quantity


def price_breakdown(base_price: Optional[float], feature_lines: Iterable, page_lines: Iterable) -> dict:
    return {
        "base_price": _or_zero(base_price),
        "features": sum(_or_zero(line.price) for line in feature_lines),
        "pages": sum(_or_zero(line.price) for line in page_lines),
    }


def quote_total(base_price: Optional[float], feature_lines: Iterable, page_lines: Iterable) -> float:
    return sum(price_breakdown(base_price, feature_lines, page_lines).values())
