from __future__ import annotations

import json
from typing import Any, Callable, Dict, List

import pytest

from fcf_chatbot import create_app
from fcf_chatbot.conversation import ConversationController
from fcf_chatbot.tree_store import DecisionTreeStore


class ManualHandle:
    def __init__(self, delay: float, callback: Callable[[], None]):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Queues delayed callbacks until the test fires them."""

    def __init__(self) -> None:
        self.handles: List[ManualHandle] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(delay, callback)
        self.handles.append(handle)
        return handle

    def fire_all(self, include_cancelled: bool = False) -> int:
        fired = 0
        for handle in list(self.handles):
            if handle.fired or (handle.cancelled and not include_cancelled):
                continue
            handle.fired = True
            handle.callback()
            fired += 1
        return fired


def two_products() -> List[Dict[str, Any]]:
    return [
        {
            "title": "Classic Tee",
            "description": "Soft cotton t-shirt",
            "images": ["img/tee-front.jpg", "img/tee-back.jpg"],
            "price": "$19.99",
        },
        {
            "title": "Canvas Tote",
            "description": "Everyday tote bag",
            "images": ["img/tote-1.jpg", "img/tote-2.jpg"],
            "price": "$19.99",
        },
    ]


@pytest.fixture()
def tree_payload() -> Dict[str, Any]:
    return {
        "language_select": {
            "message": "Hi\nPick one",
            "options": [
                {"label": "English", "next": "en_menu"},
                {"label": "🛍️ <b>Catalog</b>", "next": "catalog"},
                {"label": "Mystery &amp; more", "next": "missing_state"},
            ],
        },
        "en_menu": {"message": "Menu", "products": []},
        "catalog": {
            "message": "Our <i>picks</i>",
            "products": two_products(),
            "options": [{"label": "Back", "next": "language_select"}],
        },
    }


@pytest.fixture()
def store(tree_payload) -> DecisionTreeStore:
    return DecisionTreeStore.from_payload(tree_payload)


@pytest.fixture()
def tree_file(tmp_path, tree_payload):
    path = tmp_path / "chatbot-data.json"
    path.write_text(json.dumps(tree_payload), encoding="utf-8")
    return path


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def controller(store, scheduler) -> ConversationController:
    return ConversationController(store, entry_point="language_select", typing_delay_ms=300, scheduler=scheduler)


@pytest.fixture()
def app(store):
    app = create_app("testing", store=store)
    app.config.update(TESTING=True)
    return app


@pytest.fixture()
def client(app):
    return app.test_client()
