# fcf_chatbot/tree_store.py
"""
Decision Tree Store
───────────────────
• One-shot load from a local JSON file or an http(s) URL
• Fail-fast shape validation of every node
• Read-only after load (frozen nodes behind a mapping proxy)
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Tuple

import requests

from .models import StateNode
from .utils.smart_logger import get_smart_logger

smart_log = get_smart_logger("tree_store")

DEFAULT_TIMEOUT = 10


class DecisionTreeLoadError(RuntimeError):
    """The decision tree could not be fetched, parsed or validated."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Unable to load decision tree from {source}: {reason}")


class DecisionTreeStore(Mapping):
    """Immutable mapping of state id -> StateNode."""

    def __init__(self, nodes: Dict[str, StateNode], source: str = "<memory>"):
        self._nodes = MappingProxyType(dict(nodes))
        self.source = source

    def __getitem__(self, state_id: str) -> StateNode:
        return self._nodes[state_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"DecisionTreeStore(states={len(self)}, source={self.source!r})"

    @classmethod
    def from_payload(cls, payload: Any, source: str = "<memory>") -> "DecisionTreeStore":
        """Validate a decoded JSON payload and build the store."""
        if not isinstance(payload, dict):
            raise ValueError(f"top-level payload must be an object, got {type(payload).__name__}")
        nodes = {str(state_id): StateNode.from_dict(raw, str(state_id)) for state_id, raw in payload.items()}
        return cls(nodes, source=source)

    def dangling_references(self) -> List[Tuple[str, str]]:
        """(state_id, next) pairs whose target is not in the tree."""
        return [
            (state_id, opt.next)
            for state_id, node in self._nodes.items()
            for opt in node.options
            if opt.next not in self._nodes
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {state_id: node.to_dict() for state_id, node in self._nodes.items()}


def _is_url(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


def _fetch_payload(source: str, timeout: float) -> Any:
    if _is_url(source):
        resp = requests.get(source, timeout=timeout, headers={"Accept": "application/json"})
        resp.raise_for_status()
        return resp.json()
    with Path(source).open(encoding="utf-8") as fh:
        return json.load(fh)


def load_decision_tree(source: str | Path, timeout: float = DEFAULT_TIMEOUT) -> DecisionTreeStore:
    """
    Fetch and validate the decision tree. No retry: any failure raises
    DecisionTreeLoadError and the caller decides what the user sees.
    """
    source = str(source)
    smart_log.api_call("load", source, status="started")
    try:
        payload = _fetch_payload(source, timeout)
    except requests.exceptions.Timeout as e:
        raise DecisionTreeLoadError(source, f"timed out after {timeout}s") from e
    except requests.exceptions.HTTPError as e:
        status = getattr(e.response, "status_code", "unknown")
        raise DecisionTreeLoadError(source, f"HTTP error! status: {status}") from e
    # requests' JSONDecodeError is both a ValueError and a RequestException
    except ValueError as e:
        raise DecisionTreeLoadError(source, f"invalid JSON: {e}") from e
    except requests.exceptions.RequestException as e:
        raise DecisionTreeLoadError(source, f"request failed: {e}") from e
    except OSError as e:
        raise DecisionTreeLoadError(source, f"cannot read file: {e}") from e

    try:
        store = DecisionTreeStore.from_payload(payload, source=source)
    except ValueError as e:
        raise DecisionTreeLoadError(source, f"malformed tree: {e}") from e

    smart_log.api_call("load", source, status="success")
    return store
