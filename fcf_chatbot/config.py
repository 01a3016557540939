"""
Configuration for the FCF chatbot.
Environment-driven, one class per deployment flavour.
"""
from __future__ import annotations

import os
from pathlib import Path

from .utils.helpers import env_flag

BASE_DIR = Path(__file__).resolve().parent
DEFAULT_TREE_PATH = BASE_DIR / "data" / "chatbot-data.json"


class BaseConfig:
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret-change-me")
    JSON_SORT_KEYS: bool = False

    # Decision tree (local path or http(s) URL), fetched once at startup
    DECISION_TREE_SOURCE: str = os.getenv("DECISION_TREE_SOURCE", str(DEFAULT_TREE_PATH))
    DECISION_TREE_TIMEOUT_SECONDS: float = float(os.getenv("DECISION_TREE_TIMEOUT_SECONDS", "10"))
    ENTRY_POINT: str = os.getenv("ENTRY_POINT", "language_select")

    # Conversation
    TYPING_DELAY_MS: int = int(os.getenv("TYPING_DELAY_MS", "300"))
    BOT_AVATAR: str = os.getenv("BOT_AVATAR", "🤖")
    AVATAR_IMAGE_URL: str = os.getenv("AVATAR_IMAGE_URL", "/static/robot.gif")
    AVATAR_ALT: str = os.getenv("AVATAR_ALT", "FCF Buddy Robot")
    LOAD_ERROR_MESSAGE: str = os.getenv(
        "LOAD_ERROR_MESSAGE",
        "⚠️ Unable to load chatbot data. Please refresh the page or contact support.",
    )

    # Sessions (in-memory only)
    SESSION_TTL_SECONDS: int = int(os.getenv("SESSION_TTL_SECONDS", "3600"))
    MAX_SESSIONS: int = int(os.getenv("MAX_SESSIONS", "1000"))

    # Read-only inspection endpoints (/api/chat/debug/*)
    ENABLE_DEBUG_ENDPOINTS: bool = env_flag(os.getenv("ENABLE_DEBUG_ENDPOINTS"), default=True)

    # Comma-separated; empty means "*"
    CORS_ALLOW_ORIGINS: str = os.getenv("CORS_ALLOW_ORIGINS", "")

    LOG_LEVEL: str = os.getenv("BOT_LOG_LEVEL", "STANDARD")


class DevelopmentConfig(BaseConfig):
    DEBUG: bool = True


class ProductionConfig(BaseConfig):
    DEBUG: bool = False
    ENABLE_DEBUG_ENDPOINTS: bool = env_flag(os.getenv("ENABLE_DEBUG_ENDPOINTS"), default=False)


class TestingConfig(BaseConfig):
    TESTING: bool = True
    TYPING_DELAY_MS: int = 0
    ENABLE_DEBUG_ENDPOINTS: bool = True


def get_config(env: str | None = None) -> BaseConfig:
    """Get configuration instance directly - no complex manager."""
    env = (env or os.getenv("APP_ENV", os.getenv("FLASK_ENV", "development"))).lower()
    mapping = {
        "development": DevelopmentConfig,
        "production": ProductionConfig,
        "testing": TestingConfig,
        "test": TestingConfig,
    }
    config_class = mapping.get(env, DevelopmentConfig)
    return config_class()
