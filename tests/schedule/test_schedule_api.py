"""调度 API 集成测试。

使用 httpx.AsyncClient + ASGITransport 调用路由，服务注入到 app.state。
"""

from datetime import datetime, timezone

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from chaff.monitoring import routes as monitoring_routes
from chaff.schedule.api.routes import router
from chaff.schedule.services.schedule_service import ScheduleService


@pytest.fixture
def app(coordinator):
    app = FastAPI()
    app.include_router(router)
    app.include_router(monitoring_routes.router)
    app.state.schedule_service = ScheduleService(coordinator)
    return app


@pytest.fixture
async def async_client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class TestScheduleEndpoints:
    """测试调度状态与启停。"""

    @pytest.mark.asyncio
    async def test_initial_status(self, async_client):
        response = await async_client.get("/api/schedule")

        assert response.status_code == 200
        data = response.json()
        assert data["is_enabled"] is False
        assert data["status_text"] == "Stopped"
        assert data["schedule_text"] == "7:00 - 23:00 Daily"
        assert data["daily_limit"] == 3
        assert data["host_running"] is False

    @pytest.mark.asyncio
    async def test_start_and_stop(self, async_client):
        response = await async_client.post("/api/schedule/start")
        assert response.status_code == 200
        data = response.json()
        assert data["is_enabled"] is True
        assert data["phase"] == "planned"
        assert data["status_text"] == "Active"
        assert data["next_fire_time"] is not None

        response = await async_client.post("/api/schedule/stop")
        data = response.json()
        assert data["is_enabled"] is False
        assert data["next_fire_time"] is None

    @pytest.mark.asyncio
    async def test_status_outside_hours(self, async_client, frozen_clock):
        frozen_clock.set(datetime(2026, 3, 2, 2, 0, tzinfo=timezone.utc))

        data = (await async_client.post("/api/schedule/start")).json()

        assert data["phase"] == "gated"
        assert data["status_text"] == "Outside active hours"

    @pytest.mark.asyncio
    async def test_sync_executes_due_fire_time(self, async_client, coordinator, frozen_clock):
        await async_client.post("/api/schedule/start")
        frozen_clock.set(coordinator.state.schedule.next_fire_time)

        response = await async_client.post("/api/schedule/sync")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "executed"
        assert data["trigger"] == "resume"
        assert data["success"] is True
        assert data["endpoint"]


class TestConfigEndpoints:
    """测试运行时配置。"""

    @pytest.mark.asyncio
    async def test_get_config(self, async_client):
        data = (await async_client.get("/api/config")).json()

        assert data["daily_limit"] == 3
        assert data["active_window"]["start_hour"] == 7
        assert len(data["active_window"]["weekly_schedule"]) == 7
        assert "wikipedia" in data["enabled_api_categories"]

    @pytest.mark.asyncio
    async def test_update_config(self, async_client):
        payload = {
            "active_window": {"use_weekly_schedule": False, "start_hour": 22, "end_hour": 6},
            "daily_limit": 5,
            "enabled_api_categories": ["weather"],
            "enabled_api_languages": ["english"],
            "enabled_topic_categories": ["cooking"],
        }

        response = await async_client.put("/api/config", json=payload)

        assert response.status_code == 200
        assert response.json()["daily_limit"] == 5
        status_data = (await async_client.get("/api/schedule")).json()
        assert status_data["schedule_text"] == "22:00 - 6:00 Daily"

    @pytest.mark.asyncio
    async def test_invalid_config_rejected(self, async_client):
        response = await async_client.put(
            "/api/config",
            json={"daily_limit": -1},
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_category_rejected(self, async_client):
        response = await async_client.put(
            "/api/config",
            json={"enabled_api_categories": ["nonsense"]},
        )
        assert response.status_code == 422


class TestStatsAndSearch:
    """测试统计和手动搜索。"""

    @pytest.mark.asyncio
    async def test_manual_search_then_stats(self, async_client):
        response = await async_client.post("/api/searches/manual", json={"query": "vinyl records"})

        assert response.status_code == 201
        data = response.json()
        assert data["query"] == "vinyl records"
        assert data["url"].startswith("https://www.google.com/search?q=")

        stats = (await async_client.get("/api/stats")).json()
        assert stats["total_count"] == 1
        assert stats["history"][0]["mode"] == "manual"
        assert stats["data_usage"] == "0 B"

    @pytest.mark.asyncio
    async def test_manual_search_without_query(self, async_client):
        response = await async_client.post("/api/searches/manual", json={})

        assert response.status_code == 201
        assert response.json()["query"]

    @pytest.mark.asyncio
    async def test_reset_stats(self, async_client):
        await async_client.post("/api/searches/manual", json={"query": "a"})

        response = await async_client.delete("/api/stats")

        assert response.status_code == 200
        assert response.json()["total_count"] == 0


class TestEndpointCatalog:
    """测试端点目录。"""

    @pytest.mark.asyncio
    async def test_list_endpoints(self, async_client):
        data = (await async_client.get("/api/endpoints")).json()

        assert len(data) == 50
        assert all(item["enabled"] for item in data)
        assert data[0]["category_label"] == "Wikipedia"

    @pytest.mark.asyncio
    async def test_disabled_category_marked(self, async_client, coordinator):
        coordinator.state.config.enabled_api_categories = set()

        data = (await async_client.get("/api/endpoints")).json()

        assert not any(item["enabled"] for item in data)


class TestServiceUnavailable:
    """测试服务未初始化。"""

    @pytest.mark.asyncio
    async def test_returns_503(self):
        app = FastAPI()
        app.include_router(router)
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get("/api/schedule")

        assert response.status_code == 503


class TestMetricsRoute:
    """测试 /metrics。"""

    @pytest.mark.asyncio
    async def test_metrics_exposed(self, async_client, monkeypatch):
        monkeypatch.setenv("CHAFF_PROMETHEUS_ENABLED", "true")

        response = await async_client.get("/metrics")

        assert response.status_code == 200
        assert "chaff_cycles_total" in response.text

    @pytest.mark.asyncio
    async def test_metrics_disabled(self, async_client, monkeypatch):
        monkeypatch.setenv("CHAFF_PROMETHEUS_ENABLED", "false")

        response = await async_client.get("/metrics")

        assert "disabled" in response.text
