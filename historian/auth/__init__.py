"""Auth - shared-secret access gate"""

from __future__ import annotations

from historian.auth.access_gate import AccessGate

__all__ = ["AccessGate"]
