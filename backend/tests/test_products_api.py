"""
Product API - Products Endpoint Tests
=======================================

What:  End-to-end HTTP tests for /products and /products/{id}.
How:   HTTPX AsyncClient over ASGITransport against an app bound to a fresh
       SQLite database per test.

What we test:
    ✅ Create → fetch round trip, 400 on missing fields with nothing stored
    ✅ List filters, pagination envelope, X-Total-Count
    ✅ HEAD on the collection and on single products
    ✅ Full replace, partial update, delete
    ✅ Malformed ids give 400 (never 404), unknown methods give 405
    ✅ Store failures give 500 with a generic message and keep X-Request-ID
    ✅ Page size bounds follow the Settings the app was built with
"""

import asyncio
import logging
import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from product_api.config import Settings
from product_api.main import create_app
from product_api.services.product_service import FULL_OBJECT_MESSAGE
from product_api.stores.sql_store import get_product_store


async def create(client, **values):
    response = await client.post("/products", json=values)
    assert response.status_code == 201, response.text
    return response.json()


async def create_many(client, count, **values):
    created = []
    for i in range(count):
        created.append(await create(client, **{"name": f"Item {i}", **values}))
        await asyncio.sleep(0.002)
    return created


class TestCreate:

    @pytest.mark.asyncio
    async def test_create_then_fetch(self, test_client, sample_product):
        created = await create(test_client, **sample_product)

        assert set(created) == {
            "id", "name", "buyer", "price", "location", "createdAt", "updatedAt",
        }
        fetched = await test_client.get(f"/products/{created['id']}")

        assert fetched.status_code == 200
        assert fetched.json()["name"] == "Laptop"
        assert fetched.json()["price"] == 55000

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["name", "buyer", "price", "location"])
    async def test_missing_field_rejected(self, test_client, sample_product, missing):
        body = {k: v for k, v in sample_product.items() if k != missing}

        response = await test_client.post("/products", json=body)

        assert response.status_code == 400
        payload = response.json()
        assert payload["code"] == "validation_error"
        assert missing in payload["error"]

        listing = await test_client.get("/products")
        assert listing.json()["total"] == 0

    @pytest.mark.asyncio
    async def test_negative_price_rejected(self, test_client, sample_product):
        response = await test_client.post("/products", json={**sample_product, "price": -1})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_empty_name_rejected(self, test_client, sample_product):
        response = await test_client.post("/products", json={**sample_product, "name": ""})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_fields_are_not_stored(self, test_client, sample_product):
        created = await create(test_client, **sample_product, color="red")
        assert "color" not in created


class TestList:

    @pytest.mark.asyncio
    async def test_default_envelope(self, test_client, sample_product):
        await create(test_client, **sample_product)

        response = await test_client.get("/products")

        assert response.status_code == 200
        body = response.json()
        assert body["page"] == 1
        assert body["limit"] == 10
        assert body["total"] == 1
        assert len(body["results"]) == 1
        assert response.headers["X-Total-Count"] == "1"

    @pytest.mark.asyncio
    async def test_pagination_seven_records(self, test_client):
        await create_many(test_client, 7, buyer="Vedant", price=100, location="Delhi")
        await create_many(test_client, 2, buyer="Other", price=100, location="Delhi")

        page1 = (await test_client.get("/products?buyer=Vedant&page=1&limit=5")).json()
        page2 = (await test_client.get("/products?buyer=Vedant&page=2&limit=5")).json()

        assert len(page1["results"]) == 5
        assert len(page2["results"]) == 2
        assert page1["total"] == page2["total"] == 7
        ids = {p["id"] for p in page1["results"]} | {p["id"] for p in page2["results"]}
        assert len(ids) == 7

    @pytest.mark.asyncio
    async def test_newest_first(self, test_client):
        created = await create_many(test_client, 3, buyer="Vedant", price=1, location="Delhi")

        results = (await test_client.get("/products")).json()["results"]

        assert [p["id"] for p in results] == [p["id"] for p in reversed(created)]

    @pytest.mark.asyncio
    async def test_filters_combine(self, test_client):
        await create(test_client, name="A", buyer="Vedant", price=1000, location="Delhi")
        await create(test_client, name="B", buyer="Vedant", price=50000, location="Delhi")
        await create(test_client, name="C", buyer="Vedant", price=60000, location="Mumbai")
        await create(test_client, name="D", buyer="Asha", price=50000, location="Delhi")

        response = await test_client.get(
            "/products",
            params={"buyer": "Vedant", "location": "Delhi", "minPrice": 1000, "maxPrice": 50000},
        )
        body = response.json()

        assert sorted(p["name"] for p in body["results"]) == ["A", "B"]
        assert body["total"] == 2
        for product in body["results"]:
            assert product["buyer"] == "Vedant"
            assert product["location"] == "Delhi"
            assert 1000 <= product["price"] <= 50000

    @pytest.mark.asyncio
    async def test_total_ignores_pagination(self, test_client):
        await create_many(test_client, 4, buyer="Vedant", price=10, location="Delhi")

        body = (await test_client.get("/products?limit=1&page=3")).json()

        assert body["total"] == 4
        assert len(body["results"]) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "query",
        ["page=0", "limit=0", "limit=101", "minPrice=cheap", "page=two"],
    )
    async def test_bad_query_rejected(self, test_client, query):
        response = await test_client.get(f"/products?{query}")

        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"

    @pytest.mark.asyncio
    async def test_empty_filter_values_are_ignored(self, test_client):
        await create_many(test_client, 3, buyer="Vedant", price=10, location="Delhi")

        response = await test_client.get("/products?minPrice=&maxPrice=&buyer=&location=")

        assert response.status_code == 200
        assert response.json()["total"] == 3
        assert response.headers["X-Total-Count"] == "3"

    @pytest.mark.asyncio
    async def test_non_numeric_price_bound_names_the_parameter(self, test_client):
        response = await test_client.get("/products?maxPrice=lots")

        assert response.status_code == 400
        assert response.json()["error"] == "maxPrice must be a number"
        assert response.json()["details"] == {"field": "maxPrice"}

    @pytest.mark.asyncio
    async def test_head_collection_reports_count(self, test_client):
        await create_many(test_client, 3, buyer="Vedant", price=10, location="Delhi")
        await create(test_client, name="X", buyer="Asha", price=10, location="Delhi")

        everything = await test_client.head("/products")
        filtered = await test_client.head("/products?buyer=Vedant")

        assert everything.status_code == 200
        assert everything.headers["X-Total-Count"] == "4"
        assert filtered.headers["X-Total-Count"] == "3"
        assert everything.content == b""


class TestSingleProduct:

    @pytest.mark.asyncio
    async def test_get_unknown_id(self, test_client):
        response = await test_client.get(f"/products/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["code"] == "not_found"

    @pytest.mark.asyncio
    async def test_head_existing_and_missing(self, test_client, sample_product):
        created = await create(test_client, **sample_product)

        assert (await test_client.head(f"/products/{created['id']}")).status_code == 200
        assert (await test_client.head(f"/products/{uuid.uuid4()}")).status_code == 404

    @pytest.mark.asyncio
    async def test_put_replaces_whole_record(self, test_client, sample_product):
        created = await create(test_client, **sample_product)
        replacement = {"name": "Phone", "buyer": "Asha", "price": 999, "location": "Pune", "color": "red"}

        response = await test_client.put(f"/products/{created['id']}", json=replacement)

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == created["id"]
        assert (body["name"], body["buyer"], body["price"], body["location"]) == (
            "Phone", "Asha", 999, "Pune",
        )
        assert "color" not in body
        assert body["createdAt"] == created["createdAt"]

    @pytest.mark.asyncio
    async def test_put_requires_full_object(self, test_client, sample_product):
        created = await create(test_client, **sample_product)

        response = await test_client.put(
            f"/products/{created['id']}", json={"name": "Phone", "buyer": "Asha"}
        )

        assert response.status_code == 400
        assert response.json()["error"] == FULL_OBJECT_MESSAGE
        unchanged = (await test_client.get(f"/products/{created['id']}")).json()
        assert unchanged["name"] == "Laptop"

    @pytest.mark.asyncio
    async def test_put_unknown_id(self, test_client, sample_product):
        response = await test_client.put(f"/products/{uuid.uuid4()}", json=sample_product)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_patch_changes_only_price(self, test_client, sample_product):
        created = await create(test_client, **sample_product)

        response = await test_client.patch(f"/products/{created['id']}", json={"price": 500})

        assert response.status_code == 200
        body = response.json()
        assert body["price"] == 500
        assert body["name"] == created["name"]
        assert body["buyer"] == created["buyer"]
        assert body["location"] == created["location"]

    @pytest.mark.asyncio
    async def test_patch_rejects_unknown_and_null_fields(self, test_client, sample_product):
        created = await create(test_client, **sample_product)

        unknown = await test_client.patch(f"/products/{created['id']}", json={"color": "red"})
        null = await test_client.patch(f"/products/{created['id']}", json={"name": None})

        assert unknown.status_code == 400
        assert null.status_code == 400

    @pytest.mark.asyncio
    async def test_patch_unknown_id(self, test_client):
        response = await test_client.patch(f"/products/{uuid.uuid4()}", json={"price": 1})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_then_get(self, test_client, sample_product):
        created = await create(test_client, **sample_product)

        deleted = await test_client.delete(f"/products/{created['id']}")
        fetched = await test_client.get(f"/products/{created['id']}")
        again = await test_client.delete(f"/products/{created['id']}")

        assert deleted.status_code == 200
        assert deleted.json() == {"message": "Deleted successfully"}
        assert fetched.status_code == 404
        assert again.status_code == 404


class TestInvalidIds:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method, body",
        [
            ("GET", None),
            ("HEAD", None),
            ("PATCH", {"price": 500}),
            ("PUT", {"name": "Phone", "buyer": "Asha", "price": 999, "location": "Pune"}),
            ("DELETE", None),
        ],
    )
    async def test_malformed_id_is_400(self, test_client, method, body):
        response = await test_client.request(method, "/products/not-a-valid-id", json=body)

        assert response.status_code == 400
        if method != "HEAD":
            assert response.json()["error"] == "Invalid ID"


class TestMethodNotAllowed:

    @pytest.mark.asyncio
    async def test_options_on_collection(self, test_client):
        response = await test_client.request("OPTIONS", "/products")

        assert response.status_code == 405
        assert response.json()["code"] == "method_not_allowed"

    @pytest.mark.asyncio
    async def test_post_on_item(self, test_client):
        response = await test_client.post(f"/products/{uuid.uuid4()}", json={})
        assert response.status_code == 405

    @pytest.mark.asyncio
    async def test_delete_on_collection(self, test_client):
        response = await test_client.delete("/products")
        assert response.status_code == 405

    @pytest.mark.asyncio
    async def test_cors_preflight_is_answered(self, test_client):
        response = await test_client.request(
            "OPTIONS",
            "/products",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "POST",
            },
        )
        assert response.status_code == 200


class TestStoreFailures:

    @pytest.mark.asyncio
    async def test_list_store_error_is_500(self, app, test_client, mock_store):
        mock_store.find_page.side_effect = RuntimeError("connection reset by peer")
        app.dependency_overrides[get_product_store] = lambda: mock_store

        response = await test_client.get("/products")

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "server_error"
        assert "connection reset" not in body["error"]

    @pytest.mark.asyncio
    async def test_unexpected_error_keeps_request_id(self, app, test_client, mock_store):
        mock_store.parse_id.side_effect = RuntimeError("boom")
        app.dependency_overrides[get_product_store] = lambda: mock_store

        response = await test_client.get(
            f"/products/{uuid.uuid4()}", headers={"X-Request-ID": "trace-500"}
        )

        assert response.status_code == 500
        assert response.headers["X-Request-ID"] == "trace-500"
        body = response.json()
        assert body["code"] == "internal_server_error"
        assert body["request_id"] == "trace-500"
        assert "boom" not in body["error"]


class TestRequestId:

    @pytest.mark.asyncio
    async def test_generated_request_id(self, test_client):
        response = await test_client.get("/products")
        assert response.headers.get("X-Request-ID")

    @pytest.mark.asyncio
    async def test_client_request_id_is_echoed(self, test_client):
        response = await test_client.get(
            f"/products/{uuid.uuid4()}", headers={"X-Request-ID": "trace-123"}
        )

        assert response.headers["X-Request-ID"] == "trace-123"
        assert response.json()["request_id"] == "trace-123"


class TestConfiguredPageSize:

    @pytest_asyncio.fixture
    async def small_page_client(self, database):
        config = Settings(_env_file=None, default_page_size=2, max_page_size=5)
        app = create_app(config=config, database=database)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            yield client

    @pytest.mark.asyncio
    async def test_default_limit_follows_app_settings(self, small_page_client):
        await create_many(small_page_client, 3, buyer="Vedant", price=1, location="Delhi")

        body = (await small_page_client.get("/products")).json()

        assert body["limit"] == 2
        assert len(body["results"]) == 2
        assert body["total"] == 3

    @pytest.mark.asyncio
    async def test_max_limit_follows_app_settings(self, small_page_client):
        accepted = await small_page_client.get("/products?limit=5")
        rejected = await small_page_client.get("/products?limit=50")

        assert accepted.status_code == 200
        assert rejected.status_code == 400
        assert rejected.json()["error"] == "limit must be between 1 and 5"


class TestAccessLog:

    @pytest.mark.asyncio
    async def test_list_logs_match_count(self, test_client, caplog):
        await create_many(test_client, 2, buyer="Vedant", price=1, location="Delhi")
        caplog.set_level(logging.INFO, logger="product_api.access")

        await test_client.get("/products?buyer=Vedant")

        records = [r for r in caplog.records if r.name == "product_api.access"]
        assert records[-1].total == 2
        assert "total=2" in records[-1].getMessage()
