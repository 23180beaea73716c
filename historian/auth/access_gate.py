"""
Access gate - one shared secret for the whole deployment.

This is not user authentication: there is exactly one credential, no
rotation and no revocation. A token matching the configured secret is kept
in two places:

- the durable store (local storage key ``historianAccessKey``)
- the mirror marker (a cookie of the same name), which the route gate
  middleware reads before any page is served

The marker jar is any mutable str->str mapping; the HTTP layer passes the
request cookies in and copies changes back onto the response.
"""

from __future__ import annotations

import secrets
from collections.abc import MutableMapping

from historian.config import ACCESS_COOKIE_NAME, ACCESS_STORAGE_KEY
from historian.infrastructure import settings
from historian.observability.logging import get_logger
from historian.observability.telemetry import counter
from historian.storage import LocalStorage

logger = get_logger(__name__)


def matches_secret(token: str | None, secret: str) -> bool:
    """Constant-time comparison; an empty secret never matches."""
    if not secret or not token:
        return False
    return secrets.compare_digest(token.encode(), secret.encode())


class AccessGate:
    """Shared-secret gate consulted before record-backed views are served."""

    def __init__(
        self,
        storage: LocalStorage | None = None,
        secret: str | None = None,
        marker: MutableMapping[str, str] | None = None,
    ) -> None:
        """
        Args:
            storage: Durable credential store
            secret: Configured secret (defaults to HISTORIAN_ACCESS_KEY)
            marker: Mirror marker jar (cookies); a private dict if omitted
        """
        self.storage = storage or LocalStorage()
        self.secret = settings.HISTORIAN_ACCESS_KEY if secret is None else secret
        self.marker: MutableMapping[str, str] = {} if marker is None else marker

    def authenticate(self, token: str) -> bool:
        """
        Accept token iff it equals the configured (non-empty) secret.

        Side Effects:
            - On success: persists the credential and sets the mirror marker
            - On failure: changes nothing
        """
        if not matches_secret(token, self.secret):
            counter("access.rejected")
            logger.warning("Access key rejected")
            return False

        self.storage.set_item(ACCESS_STORAGE_KEY, token)
        self.marker[ACCESS_COOKIE_NAME] = token
        counter("access.granted")
        logger.info("Access key accepted")
        return True

    def is_authenticated(self) -> bool:
        """
        True iff a stored credential equals the secret.

        The durable store wins; when only the marker is valid the durable store
        is repaired from it.
        """
        if matches_secret(self.storage.get_item(ACCESS_STORAGE_KEY), self.secret):
            return True

        mirrored = self.marker.get(ACCESS_COOKIE_NAME)
        if matches_secret(mirrored, self.secret):
            self.storage.set_item(ACCESS_STORAGE_KEY, mirrored)
            counter("access.repaired_from_marker")
            logger.info("Restored stored access key from cookie")
            return True

        return False

    def has_valid_marker(self) -> bool:
        """True iff the mirror marker alone carries the secret."""
        return matches_secret(self.marker.get(ACCESS_COOKIE_NAME), self.secret)

    def logout(self) -> None:
        """Clear both the durable credential and the mirror marker."""
        self.storage.remove_item(ACCESS_STORAGE_KEY)
        self.marker.pop(ACCESS_COOKIE_NAME, None)
        logger.info("Access key cleared")
