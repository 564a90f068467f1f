import pytest


class TestMonitoring:

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["dependencies"]["redis"] == "disconnected"

    @pytest.mark.asyncio
    async def test_metrics_exposed(self, test_client):
        await test_client.get("/health")
        response = await test_client.get("/metrics")
        assert response.status_code == 200
        assert "http_requests_total" in response.text

    @pytest.mark.asyncio
    async def test_root(self, test_client):
        response = await test_client.get("/")
        assert response.json()["message"] == "Design Quote Service"
