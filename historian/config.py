"""Centralized configuration for the Historian backend.

Re-exports everything from historian.infrastructure.settings so existing imports
continue to work, then adds typed constants for database, LLM, storage keys,
and access-gate settings. Environment variable overrides use safe defaults so
the app starts without extra env configuration.
"""

from __future__ import annotations

import os

from historian.infrastructure.settings import *  # noqa: F401, F403

# --- App ---
APP_VERSION: str = "1.0.0"

# --- Database ---
DB_POOL_SIZE: int = int(os.getenv("HISTORIAN_DB_POOL_SIZE", "5"))
DB_POOL_TIMEOUT: float = float(os.getenv("HISTORIAN_DB_POOL_TIMEOUT", "5.0"))
DB_CONNECT_TIMEOUT: float = float(os.getenv("HISTORIAN_DB_CONNECT_TIMEOUT", "30.0"))
DB_RETRY_MAX: int = int(os.getenv("HISTORIAN_DB_RETRY_MAX", "5"))
DB_RETRY_BASE_DELAY: float = float(os.getenv("HISTORIAN_DB_RETRY_BASE_DELAY", "0.1"))
DB_RETRY_MAX_DELAY: float = float(os.getenv("HISTORIAN_DB_RETRY_MAX_DELAY", "2.0"))
DB_RETRY_JITTER: float = float(os.getenv("HISTORIAN_DB_RETRY_JITTER", "0.1"))

# --- Storage keys ---
TIMELINE_STORAGE_KEY: str = "timelineEntries"
LEARNING_STORAGE_KEY: str = "historyClasses"
ENRICHMENT_STORAGE_KEY: str = "ai_summaries"
ACCESS_STORAGE_KEY: str = "historianAccessKey"

# --- Records ---
YEAR_MIN: int = 1
YEAR_MAX: int = 9999

# --- LLM ---
LLM_TIMEOUT_SECONDS: float = float(os.getenv("HISTORIAN_LLM_TIMEOUT", "30"))
LLM_MAX_RETRIES: int = int(os.getenv("HISTORIAN_LLM_MAX_RETRIES", "3"))
PANEL_SESSION_MAX: int = int(os.getenv("HISTORIAN_PANEL_SESSION_MAX", "500"))

# --- Access gate ---
ACCESS_COOKIE_NAME: str = "historianAccessKey"
ACCESS_COOKIE_MAX_AGE: int = int(os.getenv("HISTORIAN_ACCESS_COOKIE_MAX_AGE", "31536000"))
ACCESS_PAGE_PATH: str = "/access"
