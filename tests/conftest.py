"""
Pytest configuration shared across unit and integration tests.

Every test runs against its own SQLite file, with the connection pool,
service singletons and telemetry counters reset around it.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator

import pytest

from historian.enrichment.client import EnrichmentClient
from historian.infrastructure.database import init_database, reset_pool
from historian.observability.telemetry import reset_telemetry
from historian.services import reset_services
from historian.storage import LocalStorage

EVENT_REPLY = """**Rewritten Description:** The Norman army of William the Conqueror defeated
King Harold II at <span style="background-color: #e6f8ef;">Hastings</span>.

**Historical Analysis:** The battle ended Anglo-Saxon rule in England."""

LEARNING_REPLY = """**Organized Facts:**
- Rome became an empire in 27 BC

**Narrative Story:** Augustus turned a republic into an empire.

**Key Learning Points:**
1. The Senate kept its forms but lost its power

**Chronological Events:**
- 44 BC: Caesar assassinated
- 27 BC: Augustus takes power"""


class FakeModel:
    """Stands in for the Gemini call: records prompts, returns canned replies."""

    def __init__(self, reply: str = EVENT_REPLY, error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []
        self.release: threading.Event | None = None
        self._lock = threading.Lock()

    @property
    def calls(self) -> int:
        return len(self.prompts)

    def block(self) -> threading.Event:
        """Make calls wait until the returned event is set."""
        self.release = threading.Event()
        return self.release

    def __call__(self, prompt: str) -> str:
        with self._lock:
            self.prompts.append(prompt)
        if self.release is not None:
            self.release.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture(autouse=True)
def isolated_db(tmp_path, monkeypatch) -> Iterator[None]:
    """Point the app at a fresh database file for the duration of a test."""
    monkeypatch.setenv("HISTORIAN_DB_PATH", str(tmp_path / "historian.db"))
    reset_pool()
    reset_services()
    reset_telemetry()
    init_database()
    yield
    reset_services()
    reset_pool()


@pytest.fixture
def storage() -> LocalStorage:
    return LocalStorage()


@pytest.fixture
def fake_model() -> FakeModel:
    return FakeModel()


@pytest.fixture
def client_with_fake(fake_model: FakeModel) -> EnrichmentClient:
    return EnrichmentClient(model_call=fake_model)
