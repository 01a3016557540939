# fcf_chatbot/render.py
"""
Render engine: StateNode -> transcript entries.

Everything here is a pure function of its arguments. Nothing reads the
decision tree or a session; the controller decides what to render and where
the entries go.
"""

from __future__ import annotations

from html.parser import HTMLParser
from typing import List

from .models import (
    AvatarEntry,
    BotEntry,
    ErrorEntry,
    OptionControl,
    OptionsEntry,
    Product,
    ProductCard,
    StateNode,
    TranscriptEntry,
)

DEFAULT_AVATAR = "🤖"
LINE_BREAK = "<br>"


class _TextExtractor(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.parts: List[str] = []

    def handle_data(self, data: str) -> None:
        self.parts.append(data)


def visible_text(markup: str) -> str:
    """What a browser shows for ``markup``: tags dropped, entities decoded."""
    if "<" not in markup and "&" not in markup:
        return markup
    parser = _TextExtractor()
    parser.feed(markup)
    parser.close()
    return "".join(parser.parts)


def message_to_html(message: str) -> str:
    # Markup in messages is trusted and passed through untouched
    return message.replace("\n", LINE_BREAK)


def render_product(product: Product) -> ProductCard:
    return ProductCard(
        title=product.title,
        description=product.description,
        images=tuple(product.images),
        price=product.price,
    )


def render_options(node: StateNode) -> OptionsEntry | None:
    if not node.options:
        return None
    return OptionsEntry(
        options=tuple(
            OptionControl(label_html=opt.label, text=visible_text(opt.label), next=opt.next)
            for opt in node.options
        )
    )


def render_state(node: StateNode, avatar: str = DEFAULT_AVATAR) -> List[TranscriptEntry]:
    """
    One bot entry (message plus product cards in order), followed by one
    options entry when the node has options. Leaves produce no options entry.
    """
    entries: List[TranscriptEntry] = [
        BotEntry(
            avatar=avatar,
            html=message_to_html(node.message),
            products=tuple(render_product(p) for p in node.products),
        )
    ]
    options = render_options(node)
    if options is not None:
        entries.append(options)
    return entries


def render_avatar_header(image_url: str, alt: str) -> AvatarEntry:
    return AvatarEntry(image_url=image_url, alt=alt)


def render_load_error(message: str, avatar: str = DEFAULT_AVATAR) -> ErrorEntry:
    return ErrorEntry(avatar=avatar, text=message)
