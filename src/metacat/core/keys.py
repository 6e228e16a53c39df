"""Name decomposition and lookup-key helpers shared by the rule engines."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any


def split_parts(name: Any) -> list[str]:
    """Split a compound name on ``_``; trim each part and drop empties.

    >>> split_parts(" 사용자__이름 ")
    ['사용자', '이름']
    """
    if name is None:
        return []
    return [p.strip() for p in str(name).split("_") if p.strip()]


def normalize_key(value: Any, *, empty_like_dash: bool = True) -> str:
    """Trim and lower-case a key component; ``-`` counts as empty."""
    if value is None:
        return ""
    text = str(value).strip()
    if empty_like_dash and text == "-":
        return ""
    return text.lower()


def build_composite_key(parts: Iterable[Any]) -> str:
    """Join normalized parts with ``|``; empty string if any part is empty."""
    normalized = [normalize_key(p) for p in parts]
    if any(not p for p in normalized):
        return ""
    return "|".join(normalized)


def text(value: Any) -> str:
    """Stringify and trim, mapping ``None`` to ``""``."""
    if value is None:
        return ""
    return str(value).strip()
