# fcf_chatbot/routes/health.py
"""
Simple readiness/liveness probe.

Returns HTTP 200 if:
• Flask is running
• the decision tree was loaded

Otherwise 503, with the load error so operators know why the chat shows
its error message instead of a greeting.
"""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify

bp = Blueprint("health", __name__)


@bp.get("/health")
def health_check():
    controller = current_app.extensions["controller"]
    sessions = current_app.extensions["sessions"]
    if controller.ready:
        return jsonify({
            "status": "healthy",
            "tree": "loaded",
            "states": len(controller.store),
            "sessions": len(sessions),
            "service": "fcf-chatbot",
        }), 200
    return jsonify({
        "status": "unhealthy",
        "tree": "unavailable",
        "error": current_app.extensions.get("tree_load_error"),
        "service": "fcf-chatbot",
    }), 503
