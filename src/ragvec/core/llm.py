from functools import lru_cache

from google import genai

from ragvec.core.config import get_settings


@lru_cache
def _client_for_key(api_key: str) -> genai.Client:
    return genai.Client(api_key=api_key)


def get_gemini_client() -> genai.Client:
    """Return the shared Gemini client for the configured API key."""
    return _client_for_key(get_settings().google_ai_api_key)
