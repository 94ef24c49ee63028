"""
Configuration settings for the KGQA search layer
Only infrastructure settings live here; rules and knowledge bases are in the YAML config tree
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings with environment variable support

    Philosophy:
    - Infrastructure settings here (connections, timeouts, paths)
    - Rule sets and per-knowledge-base settings in the config tree (CONFIG_FILE)
    """

    # =============================================================================
    # LOGGING
    # =============================================================================
    LOG_LEVEL: str = "INFO"

    # =============================================================================
    # CONFIG TREE (rules.*, kb.*, distributional-service.*)
    # =============================================================================
    CONFIG_FILE: Optional[str] = None    # None = bundled config/reference.yaml
    DEFAULT_LANGUAGE: str = "en"

    # =============================================================================
    # SEARCH BACKEND (Elasticsearch-compatible REST endpoint)
    # =============================================================================
    SEARCH_BACKEND_URL: str = "http://localhost:9200"
    SEARCH_BACKEND_TIMEOUT: int = 30
    SEARCH_MAX_RESULTS: int = 50

    # =============================================================================
    # DISTRIBUTIONAL SERVICE (overrides distributional-service.* when set)
    # =============================================================================
    DISTRIBUTIONAL_SERVICE_URL: Optional[str] = None
    DISTRIBUTIONAL_SERVICE_CORPUS: Optional[str] = None
    DISTRIBUTIONAL_SERVICE_TIMEOUT: int = 60

    class Config:
        env_file = ".env"
        case_sensitive = True


# Create settings instance
settings = Settings()
