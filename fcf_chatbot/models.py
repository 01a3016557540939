"""
Dataclass models for the decision tree and the transcript it renders into.

Tree models (StateNode, Product, Option) are frozen and built from the raw
JSON payload through ``from_dict``, which validates shapes and raises
``ValueError`` naming the offending field. Transcript entries are frozen too;
sessions only ever append, drop or replace whole entries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from .enums import EntryType


def _require_str(raw: Dict[str, Any], key: str, where: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str):
        raise ValueError(f"{where}.{key} must be a string, got {type(value).__name__}")
    return value


def _optional_list(raw: Dict[str, Any], key: str, where: str) -> List[Any]:
    value = raw.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{where}.{key} must be a list, got {type(value).__name__}")
    return value


def _require_object(raw: Any, where: str) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        raise ValueError(f"{where} must be an object, got {type(raw).__name__}")
    return raw


# ─────────────────────────────────────────────────────────────
# Decision tree
# ─────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Product:
    title: str
    description: str
    price: str                          # Pre-formatted, never parsed
    images: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, raw: Any, where: str = "product") -> "Product":
        raw = _require_object(raw, where)
        images = _optional_list(raw, "images", where)
        for i, img in enumerate(images):
            if not isinstance(img, str):
                raise ValueError(f"{where}.images[{i}] must be a string")
        return cls(
            title=_require_str(raw, "title", where),
            description=_require_str(raw, "description", where),
            price=_require_str(raw, "price", where),
            images=tuple(images),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "images": list(self.images),
            "price": self.price,
        }


@dataclass(frozen=True)
class Option:
    label: str                          # May contain inline markup
    next: str                           # Target state id, may not exist

    @classmethod
    def from_dict(cls, raw: Any, where: str = "option") -> "Option":
        raw = _require_object(raw, where)
        return cls(label=_require_str(raw, "label", where), next=_require_str(raw, "next", where))

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "next": self.next}


@dataclass(frozen=True)
class StateNode:
    message: str
    products: Tuple[Product, ...] = ()
    options: Tuple[Option, ...] = ()

    @property
    def is_leaf(self) -> bool:
        return not self.options

    @classmethod
    def from_dict(cls, raw: Any, state_id: str = "state") -> "StateNode":
        raw = _require_object(raw, state_id)
        products = tuple(
            Product.from_dict(p, f"{state_id}.products[{i}]")
            for i, p in enumerate(_optional_list(raw, "products", state_id))
        )
        options = tuple(
            Option.from_dict(o, f"{state_id}.options[{i}]")
            for i, o in enumerate(_optional_list(raw, "options", state_id))
        )
        return cls(message=_require_str(raw, "message", state_id), products=products, options=options)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"message": self.message}
        if self.products:
            out["products"] = [p.to_dict() for p in self.products]
        if self.options:
            out["options"] = [o.to_dict() for o in self.options]
        return out


# ─────────────────────────────────────────────────────────────
# Transcript entries
# ─────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class ProductCard:
    title: str
    description: str
    images: Tuple[str, ...]
    price: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "images": list(self.images),
            "price": self.price,
        }


@dataclass(frozen=True)
class OptionControl:
    label_html: str                     # Rendered as markup inside the button
    text: str                           # What the button visibly shows
    next: str

    def to_dict(self) -> Dict[str, Any]:
        return {"label_html": self.label_html, "text": self.text, "next": self.next}


@dataclass(frozen=True)
class TranscriptEntry:
    """Base for everything a session appends to its transcript."""
    type: ClassVar[EntryType]

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value}


@dataclass(frozen=True)
class AvatarEntry(TranscriptEntry):
    image_url: str
    alt: str
    type: ClassVar[EntryType] = EntryType.AVATAR

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "image_url": self.image_url, "alt": self.alt}


@dataclass(frozen=True)
class BotEntry(TranscriptEntry):
    avatar: str
    html: str
    products: Tuple[ProductCard, ...] = ()
    type: ClassVar[EntryType] = EntryType.BOT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "avatar": self.avatar,
            "html": self.html,
            "products": [p.to_dict() for p in self.products],
        }


@dataclass(frozen=True)
class OptionsEntry(TranscriptEntry):
    options: Tuple[OptionControl, ...]
    type: ClassVar[EntryType] = EntryType.OPTIONS

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "options": [o.to_dict() for o in self.options]}


@dataclass(frozen=True)
class UserEntry(TranscriptEntry):
    text: str
    type: ClassVar[EntryType] = EntryType.USER

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "text": self.text}


@dataclass(frozen=True)
class ErrorEntry(TranscriptEntry):
    avatar: str
    text: str
    type: ClassVar[EntryType] = EntryType.ERROR

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "avatar": self.avatar, "text": self.text}


@dataclass(frozen=True)
class PendingTransition:
    """The one delayed render a session may have in flight."""
    state_id: str
    generation: int
    delay_ms: int
    handle: Optional[Any] = field(default=None, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"state": self.state_id, "delay_ms": self.delay_ms}
