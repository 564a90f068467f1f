import pytest
from types import SimpleNamespace

from designquote.services.pricing import (
    feature_unit_price, feature_line_price, page_line_price, price_breakdown, quote_total,
)
from designquote.services.reports import size_bucket
from designquote.core.enums import PricingType


def _feature(pricing_type, flat_price=None, hourly_rate=None, estimated_hours=None):
    return SimpleNamespace(
        pricing_type=pricing_type,
        flat_price=flat_price,
        hourly_rate=hourly_rate,
        estimated_hours=estimated_hours,
    )


def _line(price):
    return SimpleNamespace(price=price)


class TestFeaturePricing:

    def test_flat_feature_uses_flat_price(self):
        feature = _feature(PricingType.FLAT, flat_price=1000.0, hourly_rate=80.0, estimated_hours=5.0)
        assert feature_unit_price(feature) == 1000.0

    def test_hourly_feature_multiplies_rate_and_hours(self):
        feature = _feature(PricingType.HOURLY, hourly_rate=85.0, estimated_hours=12.0)
        assert feature_unit_price(feature) == 1020.0

    @pytest.mark.parametrize("rate,hours", [(None, 10.0), (90.0, None), (None, None)])
    def test_hourly_feature_with_missing_factor_is_free(self, rate, hours):
        feature = _feature(PricingType.HOURLY, hourly_rate=rate, estimated_hours=hours)
        assert feature_unit_price(feature) == 0.0

    def test_flat_feature_without_price_is_free(self):
        assert feature_unit_price(_feature(PricingType.FLAT)) == 0.0

    def test_line_price_scales_with_quantity(self):
        feature = _feature(PricingType.FLAT, flat_price=250.0)
        assert feature_line_price(feature, 4) == 1000.0


class TestPagePricing:

    def test_page_line_price(self):
        page = SimpleNamespace(price_per_page=300.0)
        assert page_line_price(page, 2) == 600.0

    def test_page_without_price(self):
        page = SimpleNamespace(price_per_page=None)
        assert page_line_price(page, 3) == 0.0


class TestQuoteTotal:

    def test_total_is_base_plus_line_prices(self):
        total = quote_total(1000.0, [_line(1000.0)], [_line(600.0)])
        assert total == 2600.0

    def test_total_without_project_type(self):
        assert quote_total(None, [_line(400.0), _line(100.0)], []) == 500.0

    def test_breakdown_parts(self):
        breakdown = price_breakdown(1500.0, [_line(200.0), _line(300.0)], [_line(150.0)])
        assert breakdown == {"base_price": 1500.0, "features": 500.0, "pages": 150.0}

    def test_empty_quote_costs_base_price(self):
        assert quote_total(1200.0, [], []) == 1200.0


class TestSizeBuckets:

    @pytest.mark.parametrize("total,expected", [
        (0.0, "small"),
        (5499.99, "small"),
        (5500.0, "medium"),
        (10500.0, "large"),
        (25499.0, "large"),
        (25500.0, "enterprise"),
        (99000.0, "enterprise"),
    ])
    def test_size_bucket(self, total, expected):
        assert size_bucket(total) == expected
