"""
Reporting and system settings endpoints
"""
import pytest


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def pipeline(
    test_client, create_project_type_factory, create_feature_factory, create_quote_factory,
    sales_token, sales_token_2
):
    """Three quotes: alice wins one and keeps one open, bob loses one."""
    website = await create_project_type_factory("Website", 1000.0)
    form = await create_feature_factory("Contact Form", 500.0)
    seo = await create_feature_factory("SEO", 5000.0)
    
    won = await create_quote_factory(
        sales_token, website["id"],
        features=[{"feature_id": form["id"], "quantity": 2}, {"feature_id": seo["id"]}],
        lead_status="Won",
    )
    open_quote = await create_quote_factory(sales_token, website["id"], features=[{"feature_id": form["id"]}])
    lost = await create_quote_factory(sales_token_2, website["id"], lead_status="Lost")
    return {"form": form, "seo": seo, "won": won, "open": open_quote, "lost": lost}


class TestReports:

    @pytest.mark.asyncio
    async def test_reports_are_admin_only(self, test_client, sales_token):
        for path in ("/reports/feature-usage", "/reports/quote-metrics", "/reports/sales-performance"):
            response = await test_client.get(path, headers=_auth(sales_token))
            assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_feature_usage(self, test_client, pipeline, admin_token):
        response = await test_client.get("/reports/feature-usage", headers=_auth(admin_token))
        assert response.status_code == 200
        data = response.json()
        assert data["total_quotes"] == 3
        assert data["time_range"] == "all"
        
        first, second = data["feature_usage"]
        assert first["feature_id"] == pipeline["form"]["id"]
        assert first["count"] == 2
        # line prices already include quantity: 1000 + 500
        assert first["total_revenue"] == 1500.0
        assert second["feature_name"] == "SEO"
        assert second["total_revenue"] == 5000.0

    @pytest.mark.asyncio
    async def test_quote_metrics(self, test_client, pipeline, admin_token):
        response = await test_client.get("/reports/quote-metrics?time_range=past30days", headers=_auth(admin_token))
        assert response.status_code == 200
        data = response.json()
        assert data["total_quotes"] == 3
        assert data["total_revenue"] == 9500.0
        assert data["won_revenue"] == 7000.0
        assert data["potential_revenue"] == 1500.0
        assert data["conversion_rate"] == pytest.approx(1 / 3)
        assert data["quote_size_distribution"] == {"small": 2, "medium": 1, "large": 0, "enterprise": 0}
        statuses = {b["status"]: b["count"] for b in data["quote_status_distribution"]}
        assert statuses == {"Won": 1, "In Progress": 1, "Lost": 1}

    @pytest.mark.asyncio
    async def test_invalid_time_range(self, test_client, admin_token):
        response = await test_client.get("/reports/quote-metrics?time_range=forever", headers=_auth(admin_token))
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_sales_performance(self, test_client, pipeline, admin_token):
        response = await test_client.get("/reports/sales-performance", headers=_auth(admin_token))
        assert response.status_code == 200
        data = response.json()
        
        people = {p["username"]: p for p in data["sales_performance"]}
        assert people["alice"]["name"] == "Alice Seller"
        assert people["alice"]["total_quotes"] == 2
        assert people["alice"]["won_quotes"] == 1
        assert people["alice"]["pending_quotes"] == 1
        assert people["alice"]["conversion_rate"] == 0.5
        assert people["bob"]["name"] == "bob"
        assert people["bob"]["lost_quotes"] == 1
        assert people["admin"]["total_quotes"] == 0
        
        assert data["team_totals"]["total_quotes"] == 3
        assert data["team_totals"]["won_quotes"] == 1
        assert data["team_totals"]["pending_quotes"] == 1
        
        chart = data["monthly_performance_chart"]
        assert len(chart) == 1
        assert chart[0]["alice_quotes"] == 2
        assert chart[0]["bob_revenue"] == 1000.0


class TestSystemSettings:

    @pytest.mark.asyncio
    async def test_defaults_before_configuration(self, test_client, setup_db):
        response = await test_client.get("/settings/")
        assert response.status_code == 200
        assert response.json() == {
            "business_name": None,
            "light_mode_color": "#1E40AF",
            "dark_mode_color": "#F9B200",
        }

    @pytest.mark.asyncio
    async def test_business_name_is_trimmed(self, test_client, admin_token):
        response = await test_client.put(
            "/settings/business-name",
            json={"business_name": "  Pixel Studio  "},
            headers=_auth(admin_token)
        )
        assert response.status_code == 200
        
        response = await test_client.get("/settings/business-name")
        assert response.json() == {"business_name": "Pixel Studio"}

    @pytest.mark.asyncio
    async def test_blank_business_name_rejected(self, test_client, admin_token):
        response = await test_client.put(
            "/settings/business-name",
            json={"business_name": "   "},
            headers=_auth(admin_token)
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_brand_colors(self, test_client, admin_token, sales_token):
        response = await test_client.put(
            "/settings/brand-colors",
            json={"light_mode_color": "#FFFFFF", "dark_mode_color": "#000000"},
            headers=_auth(sales_token)
        )
        assert response.status_code == 403
        
        response = await test_client.put(
            "/settings/brand-colors",
            json={"light_mode_color": "#FFFFFF", "dark_mode_color": "#000000"},
            headers=_auth(admin_token)
        )
        assert response.status_code == 200
        assert response.json()["light_mode_color"] == "#FFFFFF"
        assert response.json()["business_name"] is None
