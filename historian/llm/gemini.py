"""
Gemini Model Manager - Singleton for shared model instance.

Supports two backends:
  1. Vertex AI SDK (deployed): uses GOOGLE_CLOUD_PROJECT + service account
  2. google-generativeai (local dev): uses GEMINI_API_KEY / GOOGLE_API_KEY
"""

from __future__ import annotations

from functools import lru_cache

from historian.infrastructure import settings
from historian.observability.logging import get_logger

logger = get_logger(__name__)

MISSING_CREDENTIAL_MESSAGE = (
    "Gemini API key not configured. "
    "Please add GEMINI_API_KEY (or GOOGLE_CLOUD_PROJECT) to your environment variables."
)


class GeminiInitializationError(RuntimeError):
    """Raised when Gemini model cannot be initialized."""


def llm_credentials_configured() -> bool:
    """True when either backend has what it needs to authenticate."""
    return bool(settings.GEMINI_API_KEY or settings.GOOGLE_CLOUD_PROJECT)


@lru_cache(maxsize=1)
def get_gemini_model():
    """
    Get or create shared Gemini model instance.

    Tries Vertex AI first when a Cloud project is configured, then falls back
    to google-generativeai with an API key.

    Returns:
        GenerativeModel: Shared Gemini model

    Raises:
        GeminiInitializationError: If model cannot be initialized
    """
    if settings.GOOGLE_CLOUD_PROJECT:
        try:
            import vertexai
            from vertexai.generative_models import GenerativeModel

            vertexai.init(project=settings.GOOGLE_CLOUD_PROJECT, location=settings.GEMINI_LOCATION)
            model = GenerativeModel(settings.GEMINI_MODEL)

            logger.info(
                "Initialized Gemini model (Vertex AI): project=%s, location=%s, model=%s",
                settings.GOOGLE_CLOUD_PROJECT,
                settings.GEMINI_LOCATION,
                settings.GEMINI_MODEL,
            )
            return model

        except ImportError:
            logger.info("Vertex AI SDK not installed, trying google-generativeai fallback")

    try:
        import google.generativeai as genai

        if not settings.GEMINI_API_KEY:
            raise GeminiInitializationError(MISSING_CREDENTIAL_MESSAGE)

        genai.configure(api_key=settings.GEMINI_API_KEY)
        model = genai.GenerativeModel(settings.GEMINI_MODEL)

        logger.info("Initialized Gemini model (google-generativeai): model=%s", settings.GEMINI_MODEL)
        return model

    except GeminiInitializationError:
        raise
    except ImportError as e:
        raise GeminiInitializationError(
            "No Gemini SDK available. Install google-cloud-aiplatform or google-generativeai."
        ) from e
    except Exception as e:
        logger.error("Failed to initialize Gemini model: %s", e)
        raise GeminiInitializationError(f"Failed to initialize Gemini: {e}") from e


def clear_model_cache() -> None:
    """
    Clear the cached model instance.

    Call after the credential changes so the next request re-initializes.
    """
    get_gemini_model.cache_clear()
    logger.info("Cleared Gemini model cache")
