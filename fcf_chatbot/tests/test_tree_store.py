from __future__ import annotations

import json

import pytest
import requests

from fcf_chatbot.models import Option, Product, StateNode
from fcf_chatbot.tree_store import DecisionTreeLoadError, DecisionTreeStore, load_decision_tree


class FakeResponse:
    def __init__(self, status_code=200, payload=None, json_error=None):
        self.status_code = status_code
        self._payload = payload
        self._json_error = json_error

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        if self._json_error is not None:
            raise self._json_error
        return self._payload


def test_load_from_file(tree_file):
    store = load_decision_tree(tree_file)
    assert set(store) == {"language_select", "en_menu", "catalog"}
    node = store["catalog"]
    assert isinstance(node, StateNode)
    assert [p.title for p in node.products] == ["Classic Tee", "Canvas Tote"]
    assert node.products[0].images == ("img/tee-front.jpg", "img/tee-back.jpg")
    assert node.options == (Option(label="Back", next="language_select"),)


def test_load_from_url(monkeypatch, tree_payload):
    calls = {}

    def fake_get(url, timeout, headers):
        calls["url"] = url
        calls["timeout"] = timeout
        return FakeResponse(payload=tree_payload)

    monkeypatch.setattr(requests, "get", fake_get)
    store = load_decision_tree("https://cdn.example.com/chatbot-data.json", timeout=3)
    assert calls == {"url": "https://cdn.example.com/chatbot-data.json", "timeout": 3}
    assert len(store) == 3
    assert store.source == "https://cdn.example.com/chatbot-data.json"


@pytest.mark.parametrize(
    "response,reason",
    [
        (FakeResponse(status_code=404), "HTTP error! status: 404"),
        (FakeResponse(status_code=500), "HTTP error! status: 500"),
        (FakeResponse(json_error=ValueError("Expecting value")), "invalid JSON"),
    ],
)
def test_url_failures_raise_load_error(monkeypatch, response, reason):
    monkeypatch.setattr(requests, "get", lambda url, timeout, headers: response)
    with pytest.raises(DecisionTreeLoadError) as excinfo:
        load_decision_tree("http://example.com/tree.json")
    assert reason in excinfo.value.reason


def test_network_error_raises_load_error(monkeypatch):
    def boom(url, timeout, headers):
        raise requests.exceptions.ConnectionError("connection refused")

    monkeypatch.setattr(requests, "get", boom)
    with pytest.raises(DecisionTreeLoadError, match="request failed"):
        load_decision_tree("http://example.com/tree.json")


def test_timeout_raises_load_error(monkeypatch):
    def slow(url, timeout, headers):
        raise requests.exceptions.Timeout()

    monkeypatch.setattr(requests, "get", slow)
    with pytest.raises(DecisionTreeLoadError, match="timed out"):
        load_decision_tree("http://example.com/tree.json", timeout=1)


def test_missing_file_raises_load_error(tmp_path):
    with pytest.raises(DecisionTreeLoadError, match="cannot read file"):
        load_decision_tree(tmp_path / "nope.json")


def test_invalid_json_file_raises_load_error(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(DecisionTreeLoadError, match="invalid JSON"):
        load_decision_tree(path)


@pytest.mark.parametrize(
    "payload,fragment",
    [
        ([], "top-level payload must be an object"),
        ({"start": "hello"}, "start must be an object"),
        ({"start": {}}, "start.message must be a string"),
        ({"start": {"message": "x", "products": {}}}, "start.products must be a list"),
        ({"start": {"message": "x", "options": [{"label": "Go"}]}}, "start.options[0].next must be a string"),
        (
            {"start": {"message": "x", "products": [{"title": "T", "description": "D", "price": 9.99}]}},
            "start.products[0].price must be a string",
        ),
        (
            {"start": {"message": "x", "products": [
                {"title": "T", "description": "D", "price": "$1", "images": [1]}
            ]}},
            "start.products[0].images[0] must be a string",
        ),
    ],
)
def test_malformed_tree_fails_fast(tmp_path, payload, fragment):
    path = tmp_path / "tree.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    with pytest.raises(DecisionTreeLoadError) as excinfo:
        load_decision_tree(path)
    assert "malformed tree" in excinfo.value.reason
    assert fragment in excinfo.value.reason


def test_optional_fields_default_to_empty():
    store = DecisionTreeStore.from_payload({
        "leaf": {"message": "Bye"},
        "nulls": {"message": "x", "products": None, "options": None},
        "no_images": {"message": "x", "products": [{"title": "T", "description": "D", "price": "$1"}]},
    })
    assert store["leaf"].is_leaf
    assert store["leaf"].products == ()
    assert store["nulls"].options == ()
    assert store["no_images"].products == (Product(title="T", description="D", price="$1"),)


def test_store_is_read_only(store):
    with pytest.raises(TypeError):
        store["new_state"] = StateNode(message="nope")  # type: ignore[index]
    with pytest.raises(TypeError):
        store._nodes["new_state"] = StateNode(message="nope")


def test_dangling_references(store):
    assert store.dangling_references() == [("language_select", "missing_state")]


def test_to_dict_round_trips_the_shape(store, tree_payload):
    data = store.to_dict()
    assert data["catalog"] == tree_payload["catalog"]
    # empty products are dropped from the debug view
    assert data["en_menu"] == {"message": "Menu"}
