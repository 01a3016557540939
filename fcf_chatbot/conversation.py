# fcf_chatbot/conversation.py
"""
Conversation Controller
=======================

Owns every session's ``current`` pointer and transcript. Two triggers move a
session forward: an option selection and a reset. A selection whose target
exists commits ``current`` right away and renders the target after the typing
delay; the delayed render only lands if the session's generation and
``current`` still match what was captured when it was scheduled.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, List, Optional

from .enums import SelectionOutcome, SessionStatus
from .models import OptionsEntry, PendingTransition, TranscriptEntry, UserEntry
from .render import (
    DEFAULT_AVATAR,
    render_avatar_header,
    render_load_error,
    render_state,
)
from .scheduler import ImmediateScheduler, Scheduler
from .tree_store import DecisionTreeStore
from .utils.smart_logger import get_smart_logger

log = logging.getLogger(__name__)
smart_log = get_smart_logger("conversation")

DEFAULT_ENTRY_POINT = "language_select"
DEFAULT_LOAD_ERROR = "⚠️ Unable to load chatbot data. Please refresh the page or contact support."


# ─────────────────────────────────────────────────────────────
# Errors surfaced to the HTTP layer
# ─────────────────────────────────────────────────────────────
class ConversationError(Exception):
    """Base class for selection/reset misuse."""


class ConversationNotStarted(ConversationError):
    """The decision tree is unavailable, so there is nothing to select."""


class NoOptionsAvailable(ConversationError):
    """No live option controls (leaf state, stalled, or a render is pending)."""


class InvalidOption(ConversationError):
    def __init__(self, index: Any, available: int):
        self.index = index
        self.available = available
        super().__init__(f"Option index {index!r} out of range (0..{available - 1})")


# ─────────────────────────────────────────────────────────────
# Session
# ─────────────────────────────────────────────────────────────
@dataclass
class ConversationSession:
    session_id: str
    status: SessionStatus = SessionStatus.READY
    current: Optional[str] = None
    transcript: List[TranscriptEntry] = field(default_factory=list)
    generation: int = 0
    pending: Optional[PendingTransition] = None
    created_at: datetime = field(default_factory=datetime.now)
    lock: Any = field(default_factory=threading.RLock, repr=False, compare=False)

    @property
    def live_options(self) -> Optional[OptionsEntry]:
        for entry in reversed(self.transcript):
            if isinstance(entry, OptionsEntry):
                return entry
        return None

    @property
    def awaiting_selection(self) -> bool:
        return self.live_options is not None

    def remove_options(self) -> int:
        before = len(self.transcript)
        self.transcript[:] = [e for e in self.transcript if not isinstance(e, OptionsEntry)]
        return before - len(self.transcript)


@dataclass(frozen=True)
class SelectionResult:
    outcome: SelectionOutcome
    label: str
    target: str
    pending: Optional[PendingTransition] = None


# ─────────────────────────────────────────────────────────────
# Controller
# ─────────────────────────────────────────────────────────────
class ConversationController:
    def __init__(
        self,
        store: Optional[DecisionTreeStore],
        *,
        entry_point: str = DEFAULT_ENTRY_POINT,
        typing_delay_ms: int = 300,
        scheduler: Optional[Scheduler] = None,
        avatar: str = DEFAULT_AVATAR,
        avatar_image_url: str = "/static/robot.gif",
        avatar_alt: str = "FCF Buddy Robot",
        load_error_message: str = DEFAULT_LOAD_ERROR,
    ) -> None:
        self.store = store
        self.entry_point = entry_point
        self.typing_delay_ms = max(0, int(typing_delay_ms))
        self.scheduler = scheduler or ImmediateScheduler()
        self.avatar = avatar
        self.avatar_image_url = avatar_image_url
        self.avatar_alt = avatar_alt
        self.load_error_message = load_error_message

    @property
    def ready(self) -> bool:
        return self.store is not None

    # ---------------------------------------------------------
    # Initial render (shared by start and reset)
    # ---------------------------------------------------------
    def _initial_transcript(self, session: ConversationSession) -> None:
        session.transcript.clear()
        session.pending = None

        if self.store is None:
            session.status = SessionStatus.UNAVAILABLE
            session.current = None
            session.transcript.append(render_load_error(self.load_error_message, self.avatar))
            return

        session.status = SessionStatus.READY
        session.transcript.append(render_avatar_header(self.avatar_image_url, self.avatar_alt))

        node = self.store.get(self.entry_point)
        if node is None:
            session.current = None
            smart_log.warning(session.session_id, "entry point missing", details=self.entry_point)
            return

        session.current = self.entry_point
        session.transcript.extend(render_state(node, self.avatar))

    def start(self, session_id: Optional[str] = None) -> ConversationSession:
        session = ConversationSession(session_id=session_id or uuid.uuid4().hex)
        with session.lock:
            self._initial_transcript(session)
        smart_log.session_started(session.session_id, session.current, self.ready)
        return session

    # ---------------------------------------------------------
    # Option selection
    # ---------------------------------------------------------
    def select_option(self, session: ConversationSession, index: int) -> SelectionResult:
        if self.store is None:
            raise ConversationNotStarted("Chatbot data is unavailable")

        with session.lock:
            live = session.live_options
            if live is None:
                raise NoOptionsAvailable("No options are awaiting a selection")
            if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(live.options):
                raise InvalidOption(index, len(live.options))

            control = live.options[index]
            smart_log.option_selected(session.session_id, control.text, session.current, control.next)

            session.transcript.append(UserEntry(text=control.text))
            session.remove_options()

            if control.next not in self.store:
                smart_log.warning(session.session_id, "dangling option", details=control.next)
                smart_log.flow_decision(session.session_id, "stalled", state=control.next,
                                        reason="target missing from tree")
                return SelectionResult(SelectionOutcome.STALLED, control.text, control.next)

            session.current = control.next
            generation = session.generation
            session.pending = PendingTransition(
                state_id=control.next, generation=generation, delay_ms=self.typing_delay_ms
            )
            pending = session.pending
            smart_log.flow_decision(session.session_id, "scheduled", state=control.next)

            handle = self.scheduler.call_later(
                self.typing_delay_ms / 1000.0,
                lambda: self._complete_transition(session, control.next, generation),
            )
            # An immediate scheduler has already cleared pending by now
            if session.pending is pending:
                session.pending = replace(pending, handle=handle)
                pending = session.pending
            else:
                pending = None

            return SelectionResult(SelectionOutcome.SCHEDULED, control.text, control.next, pending)

    def _complete_transition(self, session: ConversationSession, state_id: str, generation: int) -> None:
        try:
            with session.lock:
                pending = session.pending
                if (
                    pending is None
                    or session.generation != generation
                    or pending.generation != generation
                    or session.current != state_id
                ):
                    smart_log.flow_decision(session.session_id, "discarded", state=state_id,
                                            reason=f"generation {generation} superseded")
                    return

                session.pending = None
                node = self.store[state_id]
                session.transcript.extend(render_state(node, self.avatar))
                smart_log.flow_decision(session.session_id, "rendered", state=state_id)
                smart_log.transcript_change(session.session_id, "append", len(session.transcript))
        except Exception as e:  # noqa: BLE001
            smart_log.error_occurred(session.session_id, type(e).__name__, "complete_transition", str(e))
            log.exception("delayed render failed")

    # ---------------------------------------------------------
    # Reset
    # ---------------------------------------------------------
    def reset(self, session: ConversationSession) -> ConversationSession:
        with session.lock:
            session.generation += 1
            cancelled = False
            if session.pending is not None:
                if session.pending.handle is not None:
                    session.pending.handle.cancel()
                cancelled = True
            self._initial_transcript(session)
            smart_log.session_reset(session.session_id, session.generation, cancelled)
            smart_log.transcript_change(session.session_id, "reset", len(session.transcript))
        return session

    # ---------------------------------------------------------
    # Inspection
    # ---------------------------------------------------------
    def describe(self, session: ConversationSession) -> Dict[str, Any]:
        with session.lock:
            current = session.current
            node = self.store.get(current) if (self.store is not None and current) else None
            data = {
                "session_id": session.session_id,
                "current_state": current,
                "state_data": node.to_dict() if node is not None else None,
                "generation": session.generation,
                "pending": session.pending.to_dict() if session.pending else None,
            }
        smart_log.debug_state(session.session_id, current, {"transcript": session.transcript})
        return data
