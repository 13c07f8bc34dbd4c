"""
Unit tests for the Recipes HTTP API.
"""

import pytest
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient

from service_recipes.app.main import RecipesService
from shared.errors import CacheError, StoreError
from shared.test_helpers import InMemoryListingCache, InMemoryRecipeStore, TestDataFactory


class TestRecipesService:
    """Test cases for RecipesService routes."""

    @pytest.fixture
    def store(self):
        """In-memory store with seed recipes."""
        return InMemoryRecipeStore(TestDataFactory.create_test_recipes())

    @pytest.fixture
    def cache(self):
        """Empty in-memory cache."""
        return InMemoryListingCache()

    @pytest.fixture
    def recipes_service(self, store, cache):
        """Create RecipesService instance with in-memory backends."""
        return RecipesService(store=store, cache=cache)

    @pytest.fixture
    def client(self, recipes_service):
        """Create test client."""
        return TestClient(recipes_service.app)

    def test_root_endpoint(self, client):
        """Test root endpoint."""
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "recipes"
        assert "caching" in data["capabilities"]

    def test_service_initialization(self, recipes_service, store, cache):
        """Injected backends are wired into the recipe service."""
        assert recipes_service.service_name == "recipes"
        assert recipes_service.recipes.store is store
        assert recipes_service.recipes.cache is cache
        assert recipes_service.recipes.listing_key == "recipes"

    def test_default_backends(self):
        """Without injection the PostgreSQL and Redis adapters are used."""
        service = RecipesService()
        assert type(service.store).__name__ == "PostgreSQLRecipeStore"
        assert type(service.cache).__name__ == "RedisListingCache"

    def test_list_recipes(self, client, store):
        """Listing returns every recipe with API field names."""
        response = client.get("/recipes")

        assert response.status_code == 200
        data = response.json()
        assert [r["id"] for r in data] == ["r1", "r2", "r3"]
        assert data[0]["publishedAt"] == "2024-01-01T12:00:00Z"
        assert "published_at" not in data[0]

        client.get("/recipes")
        assert store.calls["find_all"] == 1

    def test_create_recipe(self, client, store, cache):
        """Creating returns the stored recipe and clears the listing."""
        client.get("/recipes")
        assert "recipes" in cache.entries

        response = client.post("/recipes", json=TestDataFactory.create_recipe_payload("Salad"))

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Salad"
        assert data["tags"] == ["side"]
        assert data["id"] in store.records
        assert "publishedAt" in data
        assert "recipes" not in cache.entries

    def test_create_recipe_ignores_supplied_id(self, client):
        """Caller ids are replaced."""
        payload = TestDataFactory.create_recipe_payload(id="mine", publishedAt="2000-01-01T00:00:00Z")

        data = client.post("/recipes", json=payload).json()

        assert data["id"] != "mine"
        assert not data["publishedAt"].startswith("2000")

    def test_create_recipe_invalid_body(self, client, store):
        """Malformed bodies are rejected with 400."""
        response = client.post("/recipes", json={"tags": "not-a-list"})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert store.calls["insert"] == 0

    def test_create_recipe_store_failure(self, client, store):
        """Store failures map to 500."""
        store.fail_with = StoreError("insert failed")

        response = client.post("/recipes", json=TestDataFactory.create_recipe_payload())

        assert response.status_code == 500
        assert response.json()["code"] == "STORE_ERROR"

    def test_create_recipe_invalidation_failure_still_succeeds(self, client, store, cache):
        """A failed cache delete does not fail the create."""
        cache.fail("delete")

        response = client.post("/recipes", json=TestDataFactory.create_recipe_payload())

        assert response.status_code == 200
        assert response.json()["id"] in store.records

    def test_get_recipe(self, client, cache):
        """Single lookups bypass the cache."""
        response = client.get("/recipes/r2")

        assert response.status_code == 200
        assert response.json()["name"] == "Green Salad"
        assert sum(cache.calls.values()) == 0

    def test_get_recipe_not_found(self, client):
        """Unknown ids map to 404."""
        response = client.get("/recipes/missing")

        assert response.status_code == 404
        data = response.json()
        assert data["code"] == "RECIPE_NOT_FOUND"
        assert data["details"]["recipe_id"] == "missing"

    def test_update_recipe(self, client, store):
        """Updates return a confirmation message."""
        response = client.put("/recipes/r1", json={"name": "Lemon Chicken", "ingredients": ["lemon"]})

        assert response.status_code == 200
        assert response.json() == {"message": "Recipe has been updated"}
        assert store.records["r1"].name == "Lemon Chicken"
        assert store.records["r1"].ingredients == ["lemon"]

    def test_update_recipe_not_found(self, client, cache):
        """Updating an unknown id is a 404 and leaves the cache alone."""
        client.get("/recipes")

        response = client.put("/recipes/missing", json={"name": "x"})

        assert response.status_code == 404
        assert "recipes" in cache.entries

    def test_update_recipe_empty_patch(self, client):
        """A patch with nothing to change is a 400."""
        response = client.put("/recipes/r1", json={"id": "r9"})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_delete_recipe(self, client, store):
        """Deletes return a confirmation message."""
        response = client.delete("/recipes/r3")

        assert response.status_code == 200
        assert response.json() == {"message": "Recipe has been deleted"}
        assert "r3" not in store.records

    def test_delete_recipe_not_found(self, client):
        """Deleting an unknown id is a 404."""
        response = client.delete("/recipes/missing")

        assert response.status_code == 404

    def test_cache_outage_is_500(self, client, store, cache):
        """A failing cache is reported, not bypassed."""
        cache.fail("get")

        response = client.get("/recipes")

        assert response.status_code == 500
        assert response.json()["code"] == "CACHE_ERROR"
        assert store.calls["find_all"] == 0

    def test_request_id_propagation(self, client):
        """Request IDs are echoed back and included in error bodies."""
        response = client.get("/recipes/missing", headers={"X-Request-ID": "req-42"})

        assert response.headers["X-Request-ID"] == "req-42"
        assert response.json()["request_id"] == "req-42"

    def test_health_endpoint(self, client):
        """In-memory backends have no health checks to fail."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "recipes"
        assert data["status"] == "ok"

    @patch('service_recipes.app.main.RecipesService._check_dependencies', new_callable=AsyncMock)
    def test_health_with_failing_dependency(self, mock_check_deps, client):
        """A failing dependency turns health into a 503."""
        mock_check_deps.return_value = {"redis": "error", "postgres": "ok"}

        response = client.get("/health")

        assert response.status_code == 503
        assert response.json()["dependencies"]["redis"] == "error"

    @pytest.mark.asyncio
    async def test_check_dependencies_uses_backend_health(self, store, cache):
        """Dependency checks call the backends' health_check."""
        store.health_check = AsyncMock(return_value=True)
        cache.health_check = AsyncMock(side_effect=CacheError("down"))
        service = RecipesService(store=store, cache=cache)

        dependencies = await service._check_dependencies()

        assert dependencies == {"redis": "error", "postgres": "ok"}

    @pytest.mark.asyncio
    async def test_start_and_stop_backends(self, store, cache):
        """Lifecycle hooks start and stop the backends."""
        store.start, store.stop = AsyncMock(), AsyncMock()
        cache.start, cache.stop = AsyncMock(), AsyncMock()
        service = RecipesService(store=store, cache=cache)

        await service.start()
        await service.stop()

        store.start.assert_awaited_once()
        cache.start.assert_awaited_once()
        store.stop.assert_awaited_once()
        cache.stop.assert_awaited_once()

    def test_metrics_endpoint(self, client):
        """Cache counters are exported."""
        client.get("/recipes")
        client.get("/recipes")

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "recipe_cache_hits_total 1.0" in response.text
        assert "recipe_cache_misses_total 1.0" in response.text

    def test_metrics_label_route_template(self, client):
        """Request metrics are labelled by route, not by recipe id."""
        for i in range(50):
            client.get(f"/recipes/id-{i}")

        text = client.get("/metrics").text
        series = [line for line in text.splitlines() if line.startswith("http_requests_total{")]

        assert 'endpoint="/recipes/{recipe_id}"' in text
        assert "/recipes/id-" not in text
        assert len(series) == 1

    def test_unmatched_paths_share_one_label(self, client):
        """Unknown paths do not create a series each."""
        client.get("/nope/1")
        client.get("/nope/2")

        text = client.get("/metrics").text

        assert 'endpoint="unmatched"' in text
        assert "/nope/" not in text

    def test_unhandled_exception_keeps_request_id(self, recipes_service):
        """Unexpected errors still return the request ID in header and body."""
        @recipes_service.app.get("/explode")
        async def explode():
            raise RuntimeError("boom")

        client = TestClient(recipes_service.app, raise_server_exceptions=False)

        response = client.get("/explode", headers={"X-Request-ID": "req-500"})

        assert response.status_code == 500
        assert response.headers["X-Request-ID"] == "req-500"
        data = response.json()
        assert data["request_id"] == "req-500"
        assert data["code"] == "INTERNAL_ERROR"
        assert "boom" not in data["message"]
        assert recipes_service.metrics.get_counter_value(
            "errors_total", error_type="INTERNAL_ERROR", service="recipes"
        ) == 1
