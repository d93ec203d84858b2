"""
NoteGraph Backend — Health & Middleware Tests
===============================================

What:  Tests for GET /health, request ID propagation and rate limiting.
"""

import logging

import pytest

from notegraph.config import settings


class TestHealth:
    @pytest.mark.asyncio
    async def test_health_reports_database(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"


class TestRequestID:
    @pytest.mark.asyncio
    async def test_generates_request_id(self, test_client):
        response = await test_client.post("/graphql", json={"query": "{ notes { id } }"})
        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_echoes_client_request_id(self, test_client):
        response = await test_client.post(
            "/graphql",
            json={"query": "{ notes { id } }"},
            headers={"X-Request-ID": "abc12345"},
        )
        assert response.headers["X-Request-ID"] == "abc12345"


class TestRateLimit:
    @pytest.mark.asyncio
    async def test_rejects_over_limit_with_graphql_error(self, test_client, monkeypatch):
        monkeypatch.setattr(settings, "rate_limit_requests", 2)
        query = {"query": "{ notes { id } }"}

        for _ in range(2):
            assert (await test_client.post("/graphql", json=query)).status_code == 200
        response = await test_client.post("/graphql", json=query)

        assert response.status_code == 429
        assert int(response.headers["Retry-After"]) > 0
        error = response.json()["errors"][0]
        assert error["extensions"]["code"] == "RATE_LIMITED"

    @pytest.mark.asyncio
    async def test_health_is_never_limited(self, test_client, monkeypatch):
        monkeypatch.setattr(settings, "rate_limit_requests", 1)

        for _ in range(3):
            assert (await test_client.get("/health")).status_code == 200

    @pytest.mark.asyncio
    async def test_client_sees_rate_limit_as_operation_error(self, notes_client, monkeypatch):
        monkeypatch.setattr(settings, "rate_limit_requests", 1)
        await notes_client.use_notes()

        result = await notes_client.use_notes(fetch_policy="network-only")

        assert result.error.code == "RATE_LIMITED"

    @pytest.mark.asyncio
    async def test_graphiql_page_is_not_counted(self, test_client, monkeypatch):
        monkeypatch.setattr(settings, "rate_limit_requests", 1)

        for _ in range(2):
            response = await test_client.get("/graphql", headers={"Accept": "text/html"})
            assert response.status_code == 200
        assert (await test_client.post("/graphql", json={"query": "{ notes { id } }"})).status_code == 200


class TestAccessLog:
    @pytest.mark.asyncio
    async def test_logs_operation_name(self, notes_client, caplog):
        caplog.set_level(logging.INFO, logger="notegraph.access")

        await notes_client.use_notes()

        records = [r for r in caplog.records if r.name == "notegraph.access"]
        assert len(records) == 1
        assert records[0].operation == "GetNotes"
        assert records[0].status == 200
        assert "GetNotes" in records[0].getMessage()

    @pytest.mark.asyncio
    async def test_unnamed_operation_and_health_skipped(self, test_client, caplog):
        caplog.set_level(logging.INFO, logger="notegraph.access")

        await test_client.get("/health")
        await test_client.post("/graphql", json={"query": "{ notes { id } }"})

        records = [r for r in caplog.records if r.name == "notegraph.access"]
        assert [r.operation for r in records] == ["anonymous"]
