"""Storage - local key/value persistence"""

from __future__ import annotations

from historian.storage.local_storage import LocalStorage

__all__ = ["LocalStorage"]
