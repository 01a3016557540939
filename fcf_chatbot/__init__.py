"""
FCF Chatbot Application Factory
===============================

A guided chat driven by a static decision tree:
- tree_store.py (one-shot load + validation)
- render.py (pure StateNode -> transcript entries)
- conversation.py (sessions, option selection, reset)
- routes/ (chat API, UI page, health, debug)
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from flask import Flask
from flask_cors import CORS

from .config import get_config
from .conversation import ConversationController
from .routes import register_routes
from .scheduler import Scheduler, scheduler_for
from .session_registry import SessionRegistry
from .tree_store import DecisionTreeLoadError, DecisionTreeStore, load_decision_tree
from .utils.smart_logger import get_smart_logger

log = logging.getLogger(__name__)
smart_log = get_smart_logger("app")

__version__ = "1.0.0"


def _load_store(app: Flask) -> Optional[DecisionTreeStore]:
    source = app.config["DECISION_TREE_SOURCE"]
    try:
        store = load_decision_tree(source, timeout=app.config["DECISION_TREE_TIMEOUT_SECONDS"])
    except DecisionTreeLoadError as e:
        smart_log.tree_load_failed(e.source, e.reason)
        app.extensions["tree_load_error"] = str(e)
        return None

    dangling = store.dangling_references()
    for state_id, target in dangling:
        smart_log.warning(None, "dangling option", details=f"{state_id} -> {target}")
    if app.config["ENTRY_POINT"] not in store:
        smart_log.warning(None, "entry point missing", details=app.config["ENTRY_POINT"])
    smart_log.tree_loaded(source, len(store), len(dangling))
    return store


def create_app(
    config_name: Optional[str] = None,
    *,
    store: Optional[DecisionTreeStore] = None,
    scheduler: Optional[Scheduler] = None,
    **overrides: Any,
) -> Flask:
    """
    App factory.

    INITIALIZATION ORDER:
    1. Config (environment class + keyword overrides)
    2. Decision tree (loaded once; a failure leaves the chat in its error state)
    3. Controller + in-memory session registry
    4. Routes and error handlers

    Args:
        config_name: 'development', 'production' or 'testing' (defaults to APP_ENV)
        store: an already built tree, skipping the load step
        scheduler: delayed-render scheduler; chosen from TYPING_DELAY_MS if omitted
        overrides: config keys to override (e.g. DECISION_TREE_SOURCE=...)
    """
    app = Flask(__name__)

    # ────────────────────────────────────────────────────────
    # STEP 1: Config
    # ────────────────────────────────────────────────────────
    cfg = get_config(config_name)
    app.config.from_object(cfg)
    app.config.update(overrides)

    cors_origins = app.config.get("CORS_ALLOW_ORIGINS", "").strip()
    allowed_origins = [o.strip() for o in cors_origins.split(",") if o.strip()] or ["*"]
    CORS(
        app,
        resources={r"/api/*": {
            "origins": allowed_origins,
            "methods": ["GET", "POST", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type"],
        }},
        supports_credentials=False,
    )

    # ────────────────────────────────────────────────────────
    # STEP 2: Decision tree
    # ────────────────────────────────────────────────────────
    app.extensions["tree_load_error"] = None
    if store is None:
        store = _load_store(app)

    # ────────────────────────────────────────────────────────
    # STEP 3: Controller + sessions
    # ────────────────────────────────────────────────────────
    delay_ms = int(app.config["TYPING_DELAY_MS"])
    app.extensions["controller"] = ConversationController(
        store,
        entry_point=app.config["ENTRY_POINT"],
        typing_delay_ms=delay_ms,
        scheduler=scheduler or scheduler_for(delay_ms),
        avatar=app.config["BOT_AVATAR"],
        avatar_image_url=app.config["AVATAR_IMAGE_URL"],
        avatar_alt=app.config["AVATAR_ALT"],
        load_error_message=app.config["LOAD_ERROR_MESSAGE"],
    )
    app.extensions["sessions"] = SessionRegistry(
        ttl_seconds=int(app.config["SESSION_TTL_SECONDS"]),
        max_sessions=int(app.config["MAX_SESSIONS"]),
    )

    # ────────────────────────────────────────────────────────
    # STEP 4: Routes and error handlers
    # ────────────────────────────────────────────────────────
    blueprints = register_routes(app)
    log.info("REGISTER_ROUTES_SUCCESS | blueprints=%s", blueprints)

    @app.errorhandler(500)
    def handle_internal_error(error):
        log.error(f"INTERNAL_ERROR | error={error}", exc_info=True)
        return {
            "error": "Internal server error",
            "timestamp": datetime.now().isoformat(),
            "details": str(error) if app.debug else "Contact support",
        }, 500

    @app.errorhandler(404)
    def handle_not_found(error):
        return {
            "error": "Endpoint not found",
            "timestamp": datetime.now().isoformat(),
        }, 404

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return {
            "error": "Method not allowed",
            "timestamp": datetime.now().isoformat(),
        }, 405

    log.info(f"APP_INIT_COMPLETE | tree_ready={store is not None} | typing_delay_ms={delay_ms}")
    app.version = __version__
    return app
