"""Recognises requests to list pending scheduled messages."""

import re
from dataclasses import dataclass
from enum import Enum


class ViewRequestError(str, Enum):
    EMPTY = "EMPTY"
    SUSPICIOUS = "SUSPICIOUS"
    UNRECOGNIZED = "UNRECOGNIZED"


_LIST_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"ver\s+mensajes",
        r"mostrar\s+mensajes",
        r"mu[ée]strame\s+(mis\s+)?mensajes",
        r"qu[ée]\s+mensajes\s+tengo",
        r"cu[áa]les\s+mensajes\s+tengo",
        r"mis\s+mensajes",
        r"mensajes\s+programados",
        r"ver\s+programados",
        r"mostrar\s+programados",
    )
]

_MORE_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"ver\s+m[áa]s",
        r"mostrar\s+m[áa]s",
        r"m[áa]s\s+mensajes",
        r"siguientes",
        r"continuar",
    )
]

# Injection-looking payloads are rejected outright.
_DENYLIST = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"select\s+.*\s+from",
        r"insert\s+into",
        r"update\s+.*\s+set",
        r"delete\s+from",
        r"<script",
        r"javascript:",
        r"\{\{.*\}\}",
    )
]


@dataclass(frozen=True)
class ViewRequest:
    is_list_request: bool
    is_more_request: bool
    error: ViewRequestError | None = None

    @property
    def valid(self) -> bool:
        return self.error is None


def is_suspicious(text: str) -> bool:
    return any(p.search(text) for p in _DENYLIST)


def classify_view_request(text: str | None) -> ViewRequest:
    """
    Decide whether text asks to list pending messages or to see the next page.

    A text matching both pattern groups is a "more" request.
    """
    if not text or not text.strip():
        return ViewRequest(False, False, ViewRequestError.EMPTY)

    if is_suspicious(text):
        return ViewRequest(False, False, ViewRequestError.SUSPICIOUS)

    normalized = text.strip().lower()
    is_more = any(p.search(normalized) for p in _MORE_PATTERNS)
    is_list = not is_more and any(p.search(normalized) for p in _LIST_PATTERNS)

    if not (is_list or is_more):
        return ViewRequest(False, False, ViewRequestError.UNRECOGNIZED)

    return ViewRequest(is_list_request=is_list, is_more_request=is_more)
