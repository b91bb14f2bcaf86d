"""Server-side processing helpers.

`HTMLProcessor` is a long-lived processor (one per application, middleware or
worker) bound to one sanitizer. `ShadowRootProcessor` is a per-session,
ShadowRoot-like sink holding a single HTML slot.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .policy import Policy, SanitizerConfig
from .sanitizer import Sanitizer, resolve_sanitizer
from .tokenizer import tokenize
from .tokens import Tag
from .validate import StructureReport, check_structure

PolicyLike = Policy | SanitizerConfig | Mapping[str, Any] | None


@dataclass(frozen=True, slots=True)
class SanitizationResult:
    """What `process_with_metadata()` did to one input.

    `removed_elements`/`removed_attributes` list, in policy order, the blocked
    names that occurred in the input and no longer occur in the output.
    """

    cleaned_html: str
    was_modified: bool
    removed_elements: tuple[str, ...] = ()
    removed_attributes: tuple[str, ...] = ()


def _names_in(html: str) -> tuple[set[str], set[str]]:
    elements: set[str] = set()
    attributes: set[str] = set()
    for token in tokenize(html):
        if type(token) is not Tag:
            continue
        elements.add(token.name)
        if token.kind == Tag.START:
            attributes.update(attr.name for attr in token.attrs)
    return elements, attributes


class HTMLProcessor:
    """Sanitize HTML on the server with one fixed policy."""

    __slots__ = ("sanitizer",)

    def __init__(self, config: PolicyLike | Sanitizer = None) -> None:
        self.sanitizer = config if isinstance(config, Sanitizer) else Sanitizer(config)

    def process(self, html: Any) -> str:
        return self.sanitizer.sanitize(html)

    def process_with_metadata(self, html: Any) -> SanitizationResult:
        cleaned = self.sanitizer.sanitize(html)
        if not isinstance(html, str):
            return SanitizationResult(cleaned_html=cleaned, was_modified=False)

        policy = self.sanitizer.policy
        elements_before, attributes_before = _names_in(html)
        elements_after, attributes_after = _names_in(cleaned)

        removed_elements = tuple(
            name for name in policy.blocked_elements if name in elements_before and name not in elements_after
        )
        removed_attributes = tuple(
            name
            for name in policy.blocked_attributes
            if name in attributes_before and name not in attributes_after
        )
        return SanitizationResult(
            cleaned_html=cleaned,
            was_modified=cleaned != html,
            removed_elements=removed_elements,
            removed_attributes=removed_attributes,
        )

    def check_structure(self, html: Any) -> StructureReport:
        return check_structure(html)


def process_server_html(html: Any, policy: PolicyLike = None) -> str:
    return HTMLProcessor(policy).process(html)


def process_with_metadata(html: Any, policy: PolicyLike = None) -> SanitizationResult:
    """Sanitize `html` and report which blocked names were actually removed."""
    return HTMLProcessor(policy).process_with_metadata(html)


class ShadowRootProcessor:
    """A ShadowRoot-like holder for one piece of sanitized markup.

    `set_html()` and `set_html_unsafe()` overwrite the slot, `clear()` empties
    it. One instance belongs to one session; it is not safe for concurrent
    writers.
    """

    __slots__ = ("_content", "_sanitizer")

    def __init__(self, config: PolicyLike | Sanitizer = None) -> None:
        self._content = ""
        self._sanitizer = config if isinstance(config, Sanitizer) else Sanitizer(config)

    def set_html(self, html: Any, *, sanitizer: Any = None) -> None:
        if not isinstance(html, str):
            return
        # The safety floor applies whatever sanitizer is selected.
        self._content = resolve_sanitizer(sanitizer, self._sanitizer).remove_unsafe(html)

    def set_html_unsafe(self, html: Any, *, sanitizer: Any = None) -> None:
        if not isinstance(html, str):
            return
        self._content = resolve_sanitizer(sanitizer, self._sanitizer).sanitize(html)

    def get_html(self) -> str:
        return self._content

    def clear(self) -> None:
        self._content = ""
