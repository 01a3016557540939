"""
Utility helpers
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict

_TRUTHY = {"1", "true", "yes", "on"}


def iso_now() -> str:
    return datetime.now().isoformat()


def env_flag(value: str | None, default: bool = False) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in _TRUTHY


def json_body(data: Any) -> Dict[str, Any]:
    """Request bodies we accept are JSON objects; anything else counts as empty."""
    return data if isinstance(data, dict) else {}
