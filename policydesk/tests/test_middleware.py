import logging

import pytest

from policydesk.config import settings

LOGGER = "policydesk.middleware"


def _access_lines(caplog, path: str) -> list[logging.LogRecord]:
    return [r for r in caplog.records if r.name == LOGGER and f" {path} " in r.getMessage()]


@pytest.mark.asyncio
async def test_duration_header(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert float(response.headers["X-Request-Duration-Ms"]) >= 0


@pytest.mark.asyncio
async def test_access_log_names_session_user(admin_client, admin_user, caplog):
    caplog.set_level(logging.INFO, logger=LOGGER)

    response = await admin_client.get("/api/v1/auth/me")
    assert response.status_code == 200

    [record] = _access_lines(caplog, "/api/v1/auth/me")
    assert record.levelno == logging.INFO
    assert "GET /api/v1/auth/me -> 200" in record.getMessage()
    assert record.getMessage().endswith(f"(user={admin_user.id})")


@pytest.mark.asyncio
async def test_access_log_for_anonymous_request(client, caplog):
    caplog.set_level(logging.INFO, logger=LOGGER)

    await client.get("/api/v1/auth/me")

    [record] = _access_lines(caplog, "/api/v1/auth/me")
    assert "-> 401" in record.getMessage()
    assert record.getMessage().endswith("(user=-)")


@pytest.mark.asyncio
async def test_login_request_is_attributed(client, sales_user, user_password, caplog):
    caplog.set_level(logging.INFO, logger=LOGGER)

    await client.post(
        "/api/v1/auth/login", json={"username": "sales_test", "password": user_password}
    )

    [record] = _access_lines(caplog, "/api/v1/auth/login")
    assert record.getMessage().endswith(f"(user={sales_user.id})")


@pytest.mark.asyncio
async def test_slow_request_logged_as_warning(client, caplog, monkeypatch):
    monkeypatch.setattr(settings, "SLOW_REQUEST_MS", 0)
    caplog.set_level(logging.INFO, logger=LOGGER)

    await client.get("/health")

    [record] = _access_lines(caplog, "/health")
    assert record.levelno == logging.WARNING
