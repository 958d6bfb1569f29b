import json
import logging
import sys
from datetime import timedelta

import pytest
from bson import ObjectId
from httpx import ASGITransport, AsyncClient

from syllabus_hub import config
from syllabus_hub.catalog import catalog_service
from syllabus_hub.database import serialize_doc, to_object_id
from syllabus_hub.errors import ValidationError
from syllabus_hub.logging_config import JsonLineFormatter
from syllabus_hub.main import app
from syllabus_hub.pagination import PageParams, paginated


class TestHealth:
    async def test_healthz(self, client):
        response = await client.get("/healthz")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    async def test_request_id_echoed(self, client):
        response = await client.get("/healthz", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"

    async def test_unknown_route_uses_error_envelope(self, client):
        response = await client.get("/api/v1/nowhere")

        assert response.status_code == 404
        body = response.json()
        assert body["detail"] == "Not Found"
        assert body["request_id"] == response.headers["X-Request-ID"]


class TestUnhandledErrors:
    @pytest.fixture
    async def failing_client(self, client, monkeypatch):
        async def broken(db):
            raise RuntimeError("kaboom")

        monkeypatch.setattr(catalog_service, "list_branches", broken)
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac

    async def test_500_keeps_request_id_and_cors(self, failing_client):
        response = await failing_client.get(
            "/api/v1/catalog/branches",
            headers={"Origin": config.CORS_ORIGIN, "X-Request-ID": "req-500"}
        )

        assert response.status_code == 500
        assert response.headers["X-Request-ID"] == "req-500"
        assert response.headers["access-control-allow-origin"] == config.CORS_ORIGIN
        assert response.json() == {"detail": "kaboom", "request_id": "req-500"}

    async def test_message_hidden_in_production(self, failing_client, monkeypatch):
        monkeypatch.setattr(config, "ENVIRONMENT", "production")

        response = await failing_client.get("/api/v1/catalog/branches")

        assert response.status_code == 500
        assert response.json()["detail"] == "Internal server error"
        assert "X-Request-ID" in response.headers


class TestSearchValidation:
    @pytest.mark.parametrize("path", ["/api/v1/search", "/api/v1/search/global", "/api/v1/search/resources"])
    async def test_query_required(self, client, path):
        response = await client.get(path)
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "query.q"


class TestDurations:
    @pytest.mark.parametrize("value,expected", [
        ("15m", timedelta(minutes=15)),
        ("7d", timedelta(days=7)),
        ("30s", timedelta(seconds=30)),
        ("2h", timedelta(hours=2)),
    ])
    def test_parse(self, value, expected):
        assert config.parse_duration(value) == expected

    @pytest.mark.parametrize("value", ["", "15", "m15", "1w", "1.5h"])
    def test_rejects(self, value):
        with pytest.raises(ValueError):
            config.parse_duration(value)


class TestPagination:
    def test_page_math(self):
        params = PageParams(page=3, limit=10)
        page = paginated(["x"], params, 21)

        assert params.skip == 20
        assert page["pages"] == 3
        assert page["total"] == 21

    def test_empty_total_has_no_pages(self):
        assert paginated([], PageParams(page=1, limit=20), 0)["pages"] == 0


class TestIds:
    def test_valid_id(self):
        oid = ObjectId()
        assert to_object_id(str(oid), "resource id") == oid

    @pytest.mark.parametrize("value", ["", "123", "zzzzzzzzzzzzzzzzzzzzzzzz", None])
    def test_invalid_id(self, value):
        with pytest.raises(ValidationError) as exc:
            to_object_id(value, "subject id")
        assert exc.value.detail == "Invalid subject id"

    def test_serialize_nested(self):
        oid = ObjectId()
        doc = serialize_doc({"_id": oid, "steps": [{"resources": [oid]}], "meta": {"by": oid}})

        assert doc == {"_id": str(oid), "steps": [{"resources": [str(oid)]}], "meta": {"by": str(oid)}}


def test_json_log_line_carries_exception():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = logging.getLogger("syllabus_hub.test").makeRecord(
            "syllabus_hub.test", logging.ERROR, __file__, 1, "failed %s", ("here",),
            exc_info=sys.exc_info()
        )

    entry = json.loads(JsonLineFormatter().format(record))

    assert entry["level"] == "ERROR"
    assert entry["logger"] == "syllabus_hub.test"
    assert entry["message"] == "failed here"
    assert "RuntimeError: boom" in entry["exception"]
