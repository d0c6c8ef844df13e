"""Decoding of LLM message payloads.

Chat APIs do not agree on the shape of a reply's ``content``: a plain
string, an object carrying a ``content`` (or ``text``) field, or a list of
typed parts.  Every provider funnels the raw value through
:func:`decode_message_payload`, which names each accepted shape explicitly
instead of probing types at each call site.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class StringPayload:
    """The reply was already a string."""

    value: str

    @property
    def text(self) -> str:
        return self.value


@dataclass(frozen=True)
class ObjectPayload:
    """The reply was an object (or list of parts) wrapping text content."""

    content: str

    @property
    def text(self) -> str:
        return self.content


@dataclass(frozen=True)
class UnknownPayload:
    """Anything else; kept as its JSON (or ``str``) rendering."""

    raw: Any

    @property
    def text(self) -> str:
        if self.raw is None:
            return ""
        try:
            return json.dumps(self.raw)
        except (TypeError, ValueError):
            return str(self.raw)


MessagePayload = Union[StringPayload, ObjectPayload, UnknownPayload]


def _part_text(part: Any) -> str | None:
    """Return the text of one content part (dict or SDK object), if any."""
    if isinstance(part, str):
        return part
    if isinstance(part, dict):
        value = part.get("text", part.get("content"))
    else:
        value = getattr(part, "text", None)
    return value if isinstance(value, str) else None


def decode_message_payload(raw: Any) -> MessagePayload:
    """Classify a raw reply ``content`` value into one of the payload shapes.

    * ``str`` -> :class:`StringPayload`
    * ``{"content": "..."}`` / ``{"text": "..."}`` -> :class:`ObjectPayload`
    * list of parts with text -> :class:`ObjectPayload` (parts joined)
    * anything else, including ``None`` -> :class:`UnknownPayload`
    """
    if isinstance(raw, str):
        return StringPayload(raw)

    if isinstance(raw, dict):
        inner = raw.get("content", raw.get("text"))
        if isinstance(inner, str):
            return ObjectPayload(inner)
        return UnknownPayload(raw)

    if isinstance(raw, (list, tuple)):
        texts = [t for t in (_part_text(p) for p in raw) if t]
        if texts:
            return ObjectPayload("".join(texts))

    return UnknownPayload(raw)
