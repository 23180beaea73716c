"""Shared-secret access gate with durable credential and cookie mirror."""

from __future__ import annotations

import pytest

from historian.auth import AccessGate
from historian.auth.access_gate import matches_secret
from historian.config import ACCESS_COOKIE_NAME, ACCESS_STORAGE_KEY
from historian.infrastructure import settings

SECRET = "s3cret"


@pytest.fixture
def gate(storage) -> AccessGate:
    return AccessGate(storage=storage, secret=SECRET)


def test_correct_key_authenticates_and_persists(gate, storage):
    assert gate.authenticate(SECRET) is True

    assert storage.get_item(ACCESS_STORAGE_KEY) == SECRET
    assert gate.marker[ACCESS_COOKIE_NAME] == SECRET
    assert gate.is_authenticated()


def test_wrong_key_changes_nothing(gate, storage):
    assert gate.authenticate("wrong") is False

    assert storage.get_item(ACCESS_STORAGE_KEY) is None
    assert ACCESS_COOKIE_NAME not in gate.marker
    assert not gate.is_authenticated()


def test_wrong_key_keeps_earlier_credential(gate, storage):
    gate.authenticate(SECRET)
    gate.authenticate("wrong")
    assert storage.get_item(ACCESS_STORAGE_KEY) == SECRET


def test_empty_secret_never_authenticates(storage):
    gate = AccessGate(storage=storage, secret="")
    assert gate.authenticate("") is False
    assert gate.authenticate("anything") is False


def test_secret_defaults_to_settings(storage, monkeypatch):
    monkeypatch.setattr(settings, "HISTORIAN_ACCESS_KEY", "from-env")
    assert AccessGate(storage=storage).authenticate("from-env")


def test_marker_only_repairs_durable_store(storage):
    gate = AccessGate(storage=storage, secret=SECRET, marker={ACCESS_COOKIE_NAME: SECRET})

    assert gate.is_authenticated()
    assert storage.get_item(ACCESS_STORAGE_KEY) == SECRET


def test_valid_marker_ignores_durable_store(storage):
    storage.set_item(ACCESS_STORAGE_KEY, SECRET)

    assert not AccessGate(storage=storage, secret=SECRET).has_valid_marker()
    assert AccessGate(storage=storage, secret=SECRET, marker={ACCESS_COOKIE_NAME: SECRET}).has_valid_marker()
    assert not AccessGate(storage=storage, secret=SECRET, marker={ACCESS_COOKIE_NAME: "guess"}).has_valid_marker()


def test_stale_credential_after_secret_change(storage):
    AccessGate(storage=storage, secret="old").authenticate("old")
    assert not AccessGate(storage=storage, secret=SECRET).is_authenticated()


def test_logout_clears_both(gate, storage):
    gate.authenticate(SECRET)
    gate.logout()

    assert storage.get_item(ACCESS_STORAGE_KEY) is None
    assert ACCESS_COOKIE_NAME not in gate.marker
    assert not gate.is_authenticated()


@pytest.mark.parametrize(
    ("token", "secret", "expected"),
    [
        ("abc", "abc", True),
        ("abc", "abd", False),
        (None, "abc", False),
        ("", "", False),
        ("abc", "", False),
    ],
)
def test_matches_secret(token, secret, expected):
    assert matches_secret(token, secret) is expected
