# fcf_chatbot/routes/debug.py
"""
Read-only inspection surface for manual debugging.

GET /api/chat/debug/tree          the whole loaded decision tree
GET /api/chat/debug/<session_id>  current state id, its node, and the tree

Disabled (404) unless ENABLE_DEBUG_ENDPOINTS is on.
"""

from __future__ import annotations

import logging

from flask import Blueprint, abort, current_app, jsonify

from ..fe_payload import build_debug_payload
from ..utils.helpers import iso_now

log = logging.getLogger(__name__)
bp = Blueprint("debug", __name__, url_prefix="/api/chat/debug")


@bp.before_request
def _require_enabled():
    if not current_app.config.get("ENABLE_DEBUG_ENDPOINTS", False):
        abort(404)


def _tree_dict():
    store = current_app.extensions["controller"].store
    return store.to_dict() if store is not None else None


@bp.get("/tree")
def get_tree():
    return jsonify({"tree": _tree_dict(), "timestamp": iso_now()}), 200


@bp.get("/<session_id>")
def get_session_state(session_id: str):
    session = current_app.extensions["sessions"].get(session_id)
    if session is None:
        return jsonify({"error": "Unknown session", "session_id": session_id, "timestamp": iso_now()}), 404
    describe = current_app.extensions["controller"].describe(session)
    log.info("Current State: %s", describe["current_state"])
    return jsonify(build_debug_payload(describe, _tree_dict())), 200
