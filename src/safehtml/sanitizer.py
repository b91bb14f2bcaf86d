"""The HTML rewriter.

`Sanitizer.sanitize()` applies a `Policy` to an HTML fragment through a fixed
sequence of passes over the token stream:

1. drop doctypes (`strip_doctype`)
2. drop comments (`strip_comments`)
3. remove blocked elements together with their content
4. remove blocked attributes
5. neutralize `href`/`src` values that fail the URL check (to `#`)
6. collapse elements that step 3 left holding only whitespace
7. trim surrounding whitespace

Only the block-lists are enforced. The allow-lists are exposed through
`is_element_allowed()`/`is_attribute_allowed()` for callers that want them.

`Sanitizer.remove_unsafe()` ignores the policy and applies the fixed safety
floor: script-capable elements, event-handler attributes and
`javascript:`/`data:` URLs are always removed. Everything that promises a
safe result (`set_html()`) goes through it.

Bad input never raises: anything that is not a non-empty string sanitizes to
the empty string.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

from .constants import (
    RAWTEXT_ELEMENT_SET,
    UNSAFE_ATTRIBUTES,
    UNSAFE_ELEMENTS,
    URL_ATTRIBUTE_SET,
    VOID_ELEMENT_SET,
)
from .policy import Policy, SanitizerConfig, as_policy
from .serialize import to_html
from .tokenizer import tokenize
from .tokens import REMOVED, CharacterTokens, CommentToken, DoctypeToken, Tag
from .urls import check_url, is_unsafe_url

logger = logging.getLogger(__name__)

_UNSAFE_ELEMENT_SET = frozenset(UNSAFE_ELEMENTS)
_UNSAFE_ATTRIBUTE_SET = frozenset(UNSAFE_ATTRIBUTES)


class HTMLSink(Protocol):
    """Anything that renders markup assigned to `inner_html` verbatim."""

    inner_html: str


# -----------
# Token passes
# -----------


def _match_ends(tokens: list[Any], names: frozenset[str]) -> dict[int, int]:
    """Map the index of each start tag named in `names` to the index of its end tag.

    Same-name tags nest; start tags left open at the end are absent.
    """
    ends: dict[int, int] = {}
    open_tags: dict[str, list[int]] = {}
    for index, token in enumerate(tokens):
        if type(token) is not Tag or token.name not in names or token.name in VOID_ELEMENT_SET:
            continue
        stack = open_tags.setdefault(token.name, [])
        if token.kind == Tag.START:
            stack.append(index)
        elif stack:
            ends[stack.pop()] = index
    return ends


def _drop_elements(tokens: list[Any], names: frozenset[str]) -> tuple[list[Any], int]:
    if not names:
        return tokens, 0
    ends = _match_ends(tokens, names)
    out: list[Any] = []
    removed = 0
    i = 0
    n = len(tokens)
    while i < n:
        token = tokens[i]
        if type(token) is not Tag or token.name not in names:
            out.append(token)
            i += 1
            continue

        out.append(REMOVED)
        removed += 1
        if token.kind == Tag.END or token.name in VOID_ELEMENT_SET:
            i += 1
            continue

        end = ends.get(i)
        if end is not None:
            i = end + 1
        elif token.name in RAWTEXT_ELEMENT_SET:
            # An unclosed raw-text element owns the rest of the input.
            break
        else:
            i += 1
    return out, removed


def _drop_attributes(tokens: list[Any], names: frozenset[str]) -> tuple[list[Any], int]:
    if not names:
        return tokens, 0
    out: list[Any] = []
    removed = 0
    for token in tokens:
        if type(token) is Tag and token.attrs:
            kept = [attr for attr in token.attrs if attr.name not in names]
            if len(kept) != len(token.attrs):
                removed += len(token.attrs) - len(kept)
                token = token.replace_attrs(kept)
        out.append(token)
    return out, removed


def _rewrite_urls(tokens: list[Any], is_bad) -> tuple[list[Any], int]:
    out: list[Any] = []
    rewritten = 0
    for token in tokens:
        if type(token) is Tag and token.attrs:
            attrs = token.attrs
            changed = False
            for index, attr in enumerate(attrs):
                if attr.name in URL_ATTRIBUTE_SET and attr.value is not None and is_bad(attr.value):
                    if not changed:
                        attrs = list(attrs)
                        changed = True
                    attrs[index] = attr.with_value("#")
                    rewritten += 1
            if changed:
                token = token.replace_attrs(attrs)
        out.append(token)
    return out, rewritten


def _collapse_emptied(tokens: list[Any]) -> list[Any]:
    """Remove element pairs emptied by element removal.

    An open/close pair collapses when removal markers sit between them and
    nothing else but whitespace does. A collapsed pair counts as a removal
    inside its parent, so emptiness propagates outwards.
    """
    out: list[Any] = []
    # Each frame: [index of the start tag in out, name, had removal, has content]
    stack: list[list[Any]] = []
    for token in tokens:
        if token is REMOVED:
            if stack:
                stack[-1][2] = True
            continue

        kind = type(token)
        if kind is CharacterTokens:
            if stack and (token.raw or token.data.strip()):
                stack[-1][3] = True
            out.append(token)
            continue

        if kind is Tag and token.kind == Tag.START and token.name not in VOID_ELEMENT_SET:
            stack.append([len(out), token.name, False, False])
            out.append(token)
            continue

        if kind is Tag and token.kind == Tag.END and stack and stack[-1][1] == token.name:
            start, _, emptied, has_content = stack.pop()
            if emptied and not has_content:
                del out[start:]
                if stack:
                    stack[-1][2] = True
                continue

        if stack:
            stack[-1][3] = True
        out.append(token)
    return out


# ---------
# Sanitizer
# ---------


class Sanitizer:
    """A sanitization engine bound to one immutable `Policy`.

    `config` may be a `Policy`, a `SanitizerConfig`, a mapping in either
    vocabulary, or None for the default policy.
    """

    __slots__ = ("_policy",)

    def __init__(self, config: Policy | SanitizerConfig | Mapping[str, Any] | None = None) -> None:
        self._policy = as_policy(config)

    @property
    def policy(self) -> Policy:
        return self._policy

    def is_element_allowed(self, name: str) -> bool:
        return self._policy.is_element_allowed(name)

    def is_attribute_allowed(self, name: str) -> bool:
        return self._policy.is_attribute_allowed(name)

    def sanitize(self, html: Any) -> str:
        if not isinstance(html, str) or not html:
            return ""

        policy = self._policy
        tokens = tokenize(html)

        if policy.strip_doctype:
            tokens = [token for token in tokens if type(token) is not DoctypeToken]
        if policy.strip_comments:
            tokens = [token for token in tokens if type(token) is not CommentToken]

        tokens, elements = _drop_elements(tokens, frozenset(policy.blocked_elements))
        tokens, attributes = _drop_attributes(tokens, frozenset(policy.blocked_attributes))

        def is_bad_url(value: str) -> bool:
            return not check_url(
                value,
                allowed_protocols=policy.allowed_protocols,
                allow_data_urls=policy.allow_data_urls,
                allow_relative=policy.allow_relative_urls,
            )

        tokens, urls = _rewrite_urls(tokens, is_bad_url)
        if elements:
            tokens = _collapse_emptied(tokens)

        if elements or attributes or urls:
            logger.debug(
                "sanitize removed %d element(s), %d attribute(s), neutralized %d URL(s)",
                elements,
                attributes,
                urls,
            )
        return to_html(tokens).strip()

    def remove_unsafe(self, html: Any) -> str:
        if not isinstance(html, str) or not html:
            return ""

        tokens = tokenize(html)
        tokens, elements = _drop_elements(tokens, _UNSAFE_ELEMENT_SET)
        tokens, attributes = _drop_attributes(tokens, _UNSAFE_ATTRIBUTE_SET)
        tokens, urls = _rewrite_urls(tokens, is_unsafe_url)

        if elements or attributes or urls:
            logger.debug(
                "remove_unsafe removed %d element(s), %d attribute(s), neutralized %d URL(s)",
                elements,
                attributes,
                urls,
            )
        return to_html(tokens).strip()

    def __repr__(self) -> str:
        return f"Sanitizer({self._policy!r})"


def create_sanitizer(config: Policy | SanitizerConfig | Mapping[str, Any] | None = None) -> Sanitizer:
    return Sanitizer(config)


def sanitize(html: Any, policy: Policy | SanitizerConfig | Mapping[str, Any] | None = None) -> str:
    """Sanitize `html` with `policy` (the default policy when omitted)."""
    return Sanitizer(policy).sanitize(html)


def remove_unsafe(html: Any) -> str:
    """Apply the policy-independent safety floor to `html`."""
    return Sanitizer().remove_unsafe(html)


def resolve_sanitizer(option: Any, default: Sanitizer | None = None) -> Sanitizer:
    """Turn a `sanitizer=` option into an engine.

    None or `"default"` selects `default` (a fresh default engine when not
    given); an engine is used as is; anything else is treated as a policy or
    configuration and built on the spot.
    """
    if option is None or (isinstance(option, str) and option == "default"):
        return default if default is not None else Sanitizer()
    if isinstance(option, Sanitizer):
        return option
    return Sanitizer(option)


def set_html(sink: HTMLSink | None, html: Any, *, sanitizer: Any = None) -> None:
    """Assign `html` to `sink.inner_html` after the safety floor.

    The configured policy cannot weaken the result: whatever `sanitizer`
    says, the markup goes through `remove_unsafe()`.
    """
    if sink is None or not isinstance(html, str):
        return
    sink.inner_html = resolve_sanitizer(sanitizer).remove_unsafe(html)


def set_html_unsafe(sink: HTMLSink | None, html: Any, *, sanitizer: Any = None) -> None:
    """Assign `html` to `sink.inner_html` after the policy-driven `sanitize()` only.

    The result is exactly as safe as the policy in use.
    """
    if sink is None or not isinstance(html, str):
        return
    sink.inner_html = resolve_sanitizer(sanitizer).sanitize(html)
