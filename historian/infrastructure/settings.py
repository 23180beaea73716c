"""Environment-derived settings shared by the LLM client and the access gate.

Values are read once at import time. Tests that need different values patch
the module attributes (or the environment and reload) rather than mutating
os.environ after import.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load environment variables from .env file before anything is read
load_dotenv()

# --- Gemini ---
GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.0-flash-exp")
GEMINI_LOCATION: str = os.getenv("GEMINI_LOCATION", "us-central1")
GOOGLE_CLOUD_PROJECT: str = os.getenv("GOOGLE_CLOUD_PROJECT", "")
GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY", "")

# --- Access gate ---
HISTORIAN_ACCESS_KEY: str = os.getenv("HISTORIAN_ACCESS_KEY", "")

# --- Environment ---
HISTORIAN_ENV: str = os.getenv("HISTORIAN_ENV", "development")
