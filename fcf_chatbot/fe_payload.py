from __future__ import annotations

from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .conversation import ConversationSession, SelectionResult
from .utils.helpers import iso_now


def _to_json_safe(obj: Any) -> Any:
    if isinstance(obj, Enum):
        return obj.value
    if hasattr(obj, "to_dict"):
        return _to_json_safe(obj.to_dict())
    if is_dataclass(obj) and not isinstance(obj, type):
        return _to_json_safe(asdict(obj))
    if isinstance(obj, dict):
        return {k: _to_json_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set)):
        return [_to_json_safe(v) for v in obj]
    if hasattr(obj, "isoformat"):
        return obj.isoformat()
    return obj


def serialize_entries(session: ConversationSession) -> list[Dict[str, Any]]:
    """Transcript entries in order, each tagged with its position."""
    out = []
    for seq, entry in enumerate(session.transcript):
        item = _to_json_safe(entry)
        item["seq"] = seq
        out.append(item)
    return out


def build_envelope(session: ConversationSession, selection: Optional[SelectionResult] = None) -> Dict[str, Any]:
    """
    Snapshot a session for the chat UI. The UI redraws the whole transcript
    from ``entries`` and, while ``pending`` is set, fetches the session again
    after ``pending.delay_ms``.
    """
    with session.lock:
        envelope: Dict[str, Any] = {
            "session_id": session.session_id,
            "status": session.status.value,
            "current_state": session.current,
            "entries": serialize_entries(session),
            "awaiting_selection": session.awaiting_selection,
            "pending": session.pending.to_dict() if session.pending else None,
            "timestamp": iso_now(),
        }
    if selection is not None:
        envelope["outcome"] = selection.outcome.value
        envelope["selected"] = {"label": selection.label, "next": selection.target}
    return envelope


def build_debug_payload(describe: Dict[str, Any], tree: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return _to_json_safe({**describe, "tree": tree, "timestamp": iso_now()})
