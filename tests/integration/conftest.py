"""Fixtures for API tests: an authenticated TestClient with a fake model."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from historian.api.app import app
from historian.config import ACCESS_COOKIE_NAME
from historian.enrichment.client import EnrichmentClient
from historian.enrichment.orchestrator import EnrichmentOrchestrator
from historian.infrastructure import settings
from historian.services import (
    get_enrichment_cache,
    get_learning_store,
    get_orchestrator,
    get_timeline_store,
)

ACCESS_KEY = "test-access-key"


@pytest.fixture
def access_key(monkeypatch) -> str:
    monkeypatch.setattr(settings, "HISTORIAN_ACCESS_KEY", ACCESS_KEY)
    return ACCESS_KEY


@pytest.fixture
def orchestrator(fake_model) -> EnrichmentOrchestrator:
    return EnrichmentOrchestrator(
        cache=get_enrichment_cache(),
        client=EnrichmentClient(model_call=fake_model),
        timeline_store=get_timeline_store(),
        learning_store=get_learning_store(),
    )


@pytest.fixture
def anonymous_client(access_key, orchestrator) -> Iterator[TestClient]:
    """Client without the access cookie."""
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def api(anonymous_client, access_key) -> TestClient:
    """Client carrying a valid access cookie."""
    anonymous_client.cookies.set(ACCESS_COOKIE_NAME, access_key)
    return anonymous_client
