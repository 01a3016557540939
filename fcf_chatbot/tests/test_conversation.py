from __future__ import annotations

import pytest

from fcf_chatbot.conversation import (
    ConversationController,
    ConversationNotStarted,
    InvalidOption,
    NoOptionsAvailable,
)
from fcf_chatbot.enums import EntryType, SelectionOutcome, SessionStatus
from fcf_chatbot.models import BotEntry, OptionsEntry, UserEntry
from fcf_chatbot.scheduler import ImmediateScheduler
from fcf_chatbot.tree_store import DecisionTreeStore

from conftest import ManualScheduler, two_products


def types(session):
    return [e.type for e in session.transcript]


def test_start_renders_entry_point(controller):
    session = controller.start()
    assert session.status is SessionStatus.READY
    assert session.current == "language_select"
    assert types(session) == [EntryType.AVATAR, EntryType.BOT, EntryType.OPTIONS]
    assert session.transcript[1].html == "Hi<br>Pick one"
    assert [o.next for o in session.live_options.options] == ["en_menu", "catalog", "missing_state"]


def test_start_uses_given_session_id(controller):
    assert controller.start("abc123").session_id == "abc123"
    assert controller.start().session_id != controller.start().session_id


def test_language_select_scenario():
    store = DecisionTreeStore.from_payload({
        "language_select": {"message": "Hi", "options": [{"label": "English", "next": "en_menu"}]},
        "en_menu": {"message": "Menu", "products": []},
    })
    scheduler = ManualScheduler()
    controller = ConversationController(store, typing_delay_ms=300, scheduler=scheduler)
    session = controller.start()

    options = session.live_options.options
    assert [o.text for o in options] == ["English"]

    result = controller.select_option(session, 0)
    assert result.outcome is SelectionOutcome.SCHEDULED
    assert session.current == "en_menu"
    # echo appended, control removed, reply not yet rendered
    assert types(session) == [EntryType.AVATAR, EntryType.BOT, EntryType.USER]
    assert session.transcript[-1] == UserEntry(text="English")
    assert scheduler.handles[0].delay == pytest.approx(0.3)

    assert scheduler.fire_all() == 1
    assert types(session) == [EntryType.AVATAR, EntryType.BOT, EntryType.USER, EntryType.BOT]
    assert session.transcript[-1].html == "Menu"
    assert session.live_options is None
    assert session.pending is None


def test_missing_target_stalls(controller, scheduler):
    session = controller.start()
    result = controller.select_option(session, 2)

    assert result.outcome is SelectionOutcome.STALLED
    assert result.target == "missing_state"
    assert session.current == "language_select"
    assert session.transcript[-1] == UserEntry(text="Mystery & more")
    assert session.live_options is None
    assert scheduler.handles == []

    with pytest.raises(NoOptionsAvailable):
        controller.select_option(session, 0)


def test_echo_uses_visible_text_of_label(controller, scheduler):
    session = controller.start()
    controller.select_option(session, 1)
    assert session.transcript[-1].text == "🛍️ Catalog"


def test_echo_precedes_bot_reply(controller, scheduler):
    session = controller.start()
    controller.select_option(session, 1)
    scheduler.fire_all()

    user_idx = max(i for i, e in enumerate(session.transcript) if isinstance(e, UserEntry))
    bot_after = [e for e in session.transcript[user_idx + 1:] if isinstance(e, BotEntry)]
    assert len(bot_after) == 1
    assert bot_after[0].html == "Our <i>picks</i>"
    assert [p.title for p in bot_after[0].products] == [p["title"] for p in two_products()]
    assert session.live_options.options[0].next == "language_select"


def test_selection_blocked_while_render_pending(controller, scheduler):
    session = controller.start()
    controller.select_option(session, 0)
    assert session.pending is not None
    with pytest.raises(NoOptionsAvailable):
        controller.select_option(session, 0)


@pytest.mark.parametrize("index", [-1, 3, 99, "0", None, True, 1.0])
def test_invalid_index(controller, index):
    session = controller.start()
    before = list(session.transcript)
    with pytest.raises(InvalidOption):
        controller.select_option(session, index)
    assert session.transcript == before


def test_reset_restores_initial_transcript(controller, scheduler):
    session = controller.start()
    initial = list(session.transcript)

    controller.select_option(session, 1)
    scheduler.fire_all()
    controller.select_option(session, 0)
    scheduler.fire_all()
    assert session.transcript != initial

    controller.reset(session)
    assert session.transcript == initial
    assert session.current == "language_select"


def test_reset_twice_equals_once(controller, scheduler):
    session = controller.start()
    controller.select_option(session, 0)
    scheduler.fire_all()

    controller.reset(session)
    once = list(session.transcript)
    controller.reset(session)
    assert session.transcript == once


def test_reset_cancels_pending_transition(controller, scheduler):
    session = controller.start()
    controller.select_option(session, 1)
    handle = scheduler.handles[0]

    controller.reset(session)
    assert handle.cancelled
    assert session.pending is None

    # even if a timer fires after cancellation, the stale render is discarded
    scheduler.fire_all(include_cancelled=True)
    assert types(session) == [EntryType.AVATAR, EntryType.BOT, EntryType.OPTIONS]
    assert session.current == "language_select"


def test_stale_render_after_reset_and_new_selection(controller, scheduler):
    session = controller.start()
    controller.select_option(session, 1)          # -> catalog, generation 0
    controller.reset(session)
    controller.select_option(session, 0)          # -> en_menu, generation 1

    stale, fresh = scheduler.handles
    stale.callback()
    assert session.pending is not None
    assert not any(isinstance(e, BotEntry) and e.html == "Our <i>picks</i>" for e in session.transcript)

    fresh.callback()
    assert session.transcript[-1].html == "Menu"
    assert session.pending is None


def test_immediate_scheduler_renders_synchronously(store):
    controller = ConversationController(store, typing_delay_ms=0, scheduler=ImmediateScheduler())
    session = controller.start()
    result = controller.select_option(session, 0)

    assert result.outcome is SelectionOutcome.SCHEDULED
    assert result.pending is None
    assert session.pending is None
    assert session.transcript[-1].html == "Menu"


def test_missing_entry_point_renders_nothing(store):
    controller = ConversationController(store, entry_point="nowhere")
    session = controller.start()
    assert session.current is None
    assert types(session) == [EntryType.AVATAR]
    with pytest.raises(NoOptionsAvailable):
        controller.select_option(session, 0)


def test_unavailable_store_shows_single_error():
    controller = ConversationController(None, load_error_message="Unable to load")
    session = controller.start()
    assert session.status is SessionStatus.UNAVAILABLE
    assert session.current is None
    assert types(session) == [EntryType.ERROR]
    assert session.transcript[0].text == "Unable to load"

    with pytest.raises(ConversationNotStarted):
        controller.select_option(session, 0)

    controller.reset(session)
    assert types(session) == [EntryType.ERROR]


def test_sessions_are_independent(controller, scheduler):
    first = controller.start()
    second = controller.start()
    controller.select_option(first, 0)
    scheduler.fire_all()

    assert first.current == "en_menu"
    assert second.current == "language_select"
    assert isinstance(second.transcript[-1], OptionsEntry)


def test_describe(controller, scheduler):
    session = controller.start()
    controller.select_option(session, 0)
    info = controller.describe(session)
    assert info["current_state"] == "en_menu"
    assert info["state_data"] == {"message": "Menu"}
    assert info["pending"] == {"state": "en_menu", "delay_ms": 300}
