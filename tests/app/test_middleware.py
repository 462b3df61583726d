"""Tests for the error-handling middleware."""

from __future__ import annotations

import logging

import pytest
from fastapi.testclient import TestClient

from conftest import TEST_LOGGER
from toolkeeper.app.middleware import (GENERIC_DETAIL, ErrorHandlingMiddleware,
                                       status_for)
from toolkeeper.services.errors import (ConflictError, InvalidOperationError,
                                        NotFoundError, ServiceError)


def _records(caplog) -> list[logging.LogRecord]:
    return [r for r in caplog.records if r.name == TEST_LOGGER]


@pytest.fixture
def failing_client(app) -> TestClient:
    @app.get("/boom")
    def boom():
        raise RuntimeError("kaboom")

    @app.get("/missing")
    def missing():
        raise NotFoundError("Tool", 99)

    return TestClient(app)


def test_unhandled_error_becomes_structured_500(failing_client, caplog):
    with caplog.at_level(logging.DEBUG, logger=TEST_LOGGER):
        response = failing_client.get("/boom")

    assert response.status_code == 500
    body = response.json()
    assert body["status"] == 500
    assert body["title"] == "Internal Server Error"
    assert body["detail"] == GENERIC_DETAIL
    assert body["type"] == "RuntimeError"
    assert len(body["trace_id"]) == 32
    assert "kaboom" not in response.text

    records = _records(caplog)
    assert len(records) == 1
    assert records[0].levelno == logging.ERROR
    assert records[0].exc_info is not None
    assert "kaboom" in records[0].getMessage()


def test_server_keeps_serving_after_a_failure(failing_client):
    assert failing_client.get("/boom").status_code == 500
    assert failing_client.get("/boom").status_code == 500
    assert failing_client.get("/health").json() == {"status": "ok", "service": "toolkeeper"}


def test_service_error_keeps_its_message(failing_client, caplog):
    with caplog.at_level(logging.DEBUG, logger=TEST_LOGGER):
        response = failing_client.get("/missing")

    assert response.status_code == 404
    assert response.json()["detail"] == "Tool 99 not found"
    assert response.json()["title"] == "Not Found"
    records = _records(caplog)
    assert len(records) == 1
    assert records[0].levelno == logging.WARNING


def test_each_failure_gets_its_own_trace_id(failing_client):
    first = failing_client.get("/boom").json()["trace_id"]
    second = failing_client.get("/boom").json()["trace_id"]

    assert first != second


def test_successful_requests_are_not_logged(client, caplog):
    with caplog.at_level(logging.DEBUG, logger=TEST_LOGGER):
        assert client.get("/health").status_code == 200

    assert _records(caplog) == []


def test_error_handler_is_the_outermost_middleware(app):
    assert app.user_middleware[0].cls is ErrorHandlingMiddleware


@pytest.mark.parametrize(
    "exc, status",
    [
        (NotFoundError("Tool", 1), 404),
        (ConflictError("dup"), 409),
        (InvalidOperationError("nope"), 400),
        (ServiceError("generic"), 400),
        (KeyError("x"), 500),
    ],
)
def test_status_for(exc, status):
    assert status_for(exc) == status
