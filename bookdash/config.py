"""Configuration management."""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _optional_int(name: str):
    value = os.getenv(name)
    return int(value) if value else None


class Config:
    """Application configuration."""

    # API
    OPENLIBRARY_BASE_URL = os.getenv("OPENLIBRARY_BASE_URL", "https://openlibrary.org")
    SEARCH_QUERY = os.getenv("SEARCH_QUERY", "books")
    SEARCH_LIMIT = _optional_int("SEARCH_LIMIT")

    # HTTP resilience
    DEFAULT_TIMEOUT = int(os.getenv("DEFAULT_TIMEOUT", "10"))
    DEFAULT_MAX_RETRIES = int(os.getenv("DEFAULT_MAX_RETRIES", "3"))
    DEFAULT_BACKOFF = float(os.getenv("DEFAULT_BACKOFF", "1.0"))
    MAX_CONCURRENT = int(os.getenv("MAX_CONCURRENT", "10"))

    # View
    DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
    SEARCH_DEBOUNCE_SECONDS = float(os.getenv("SEARCH_DEBOUNCE_SECONDS", "0.3"))

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
