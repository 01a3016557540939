# fcf_chatbot/routes/__init__.py
"""
Blueprint auto-registration.

Put any flask.Blueprint in `fcf_chatbot/routes/<name>.py`
with the variable name **bp** and it will be discovered &
registered when `register_routes(app)` is called.

The app factory (fcf_chatbot.__init__.py) stores shared
objects like `controller` and `sessions` into `app.extensions`
so the individual route modules can access them via
`from flask import current_app`.
"""

from __future__ import annotations

import importlib
import logging
import pkgutil
from types import ModuleType
from typing import List

from flask import Blueprint, Flask

log = logging.getLogger(__name__)


def register_routes(app: Flask) -> List[str]:
    registered: List[str] = []
    for _finder, name, _ in sorted(pkgutil.iter_modules(__path__), key=lambda m: m.name):
        module: ModuleType = importlib.import_module(f"{__name__}.{name}")
        bp: Blueprint | None = getattr(module, "bp", None)
        if isinstance(bp, Blueprint):
            app.register_blueprint(bp)
            registered.append(bp.name)
            log.info("REGISTER_ROUTES | blueprint=%s", bp.name)
    return registered
