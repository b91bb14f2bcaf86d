"""Serialization of token streams back into HTML text."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any


def to_html(tokens: Iterable[Any]) -> str:
    """Join tokens back into markup.

    Tags, comments and doctypes are written as they appeared in the source
    (minus any removed attributes). Text escapes `<`, raw-text bodies do not.
    """
    return "".join([token.to_html() for token in tokens])
