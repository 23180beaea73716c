from __future__ import annotations

from historian.utils.error_sanitizer import GENERIC_MESSAGES, sanitize_error_message


def test_form_messages_pass_through():
    message = "Please enter a valid year between 1 and 9999."
    assert sanitize_error_message(message, 400) == message


def test_paths_and_sql_are_hidden():
    assert sanitize_error_message("error in /app/historian/storage.py", 400) == GENERIC_MESSAGES[400]
    assert sanitize_error_message("sqlite3.OperationalError: no such table", 500) == GENERIC_MESSAGES[500]


def test_server_errors_are_generic():
    assert sanitize_error_message("anything at all", 500) == GENERIC_MESSAGES[500]


def test_empty_message_uses_generic():
    assert sanitize_error_message("", 404) == GENERIC_MESSAGES[404]
