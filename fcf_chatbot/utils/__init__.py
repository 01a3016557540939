# fcf_chatbot/utils/__init__.py
"""
Expose helpers at package-level for convenience:

    from fcf_chatbot.utils import iso_now
"""

from .helpers import (  # noqa: F401
    env_flag,
    iso_now,
    json_body,
)

__all__ = [
    "env_flag",
    "iso_now",
    "json_body",
]
