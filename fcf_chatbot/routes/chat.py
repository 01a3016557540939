# fcf_chatbot/routes/chat.py
"""
Chat API – one in-memory conversation per browser visit.

POST   /api/chat/session                 start a conversation
GET    /api/chat/session/<id>            current transcript
POST   /api/chat/session/<id>/select     {"index": 0}
POST   /api/chat/session/<id>/reset      clear and restart at the entry point
DELETE /api/chat/session/<id>            forget the session
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Tuple

from flask import Blueprint, current_app, jsonify, request

from ..conversation import (
    ConversationController,
    ConversationNotStarted,
    ConversationSession,
    InvalidOption,
    NoOptionsAvailable,
)
from ..fe_payload import build_envelope
from ..session_registry import SessionRegistry
from ..utils.helpers import iso_now, json_body

log = logging.getLogger(__name__)
bp = Blueprint("chat", __name__, url_prefix="/api/chat")


def _controller() -> ConversationController:
    return current_app.extensions["controller"]


def _sessions() -> SessionRegistry:
    return current_app.extensions["sessions"]


def _error(message: str, status: int, **extra: Any) -> Tuple[Any, int]:
    return jsonify({"error": message, "timestamp": iso_now(), **extra}), status


def _lookup(session_id: str) -> ConversationSession | None:
    return _sessions().get(session_id)


@bp.post("/session")
def create_session():
    controller = _controller()
    session = _sessions().add(controller.start())
    envelope = build_envelope(session)
    return jsonify(envelope), (201 if controller.ready else 503)


@bp.get("/session/<session_id>")
def get_session(session_id: str):
    session = _lookup(session_id)
    if session is None:
        return _error("Unknown session", 404, session_id=session_id)
    return jsonify(build_envelope(session)), 200


@bp.post("/session/<session_id>/select")
def select_option(session_id: str):
    session = _lookup(session_id)
    if session is None:
        return _error("Unknown session", 404, session_id=session_id)

    data: Dict[str, Any] = json_body(request.get_json(silent=True))
    if "index" not in data:
        return _error("Missing option index", 400)

    try:
        result = _controller().select_option(session, data["index"])
    except (ConversationNotStarted, NoOptionsAvailable) as exc:
        return _error(str(exc), 409, envelope=build_envelope(session))
    except InvalidOption as exc:
        return _error(str(exc), 400, available=exc.available)

    return jsonify(build_envelope(session, selection=result)), 200


@bp.post("/session/<session_id>/reset")
def reset_session(session_id: str):
    session = _lookup(session_id)
    if session is None:
        return _error("Unknown session", 404, session_id=session_id)
    _controller().reset(session)
    return jsonify(build_envelope(session)), 200


@bp.delete("/session/<session_id>")
def delete_session(session_id: str):
    if not _sessions().remove(session_id):
        return _error("Unknown session", 404, session_id=session_id)
    return jsonify({"message": "Session removed", "session_id": session_id}), 200
