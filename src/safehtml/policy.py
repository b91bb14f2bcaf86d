"""Sanitization policy.

Callers describe a policy with a `SanitizerConfig`: every field is optional
and element rules can be written in either of two vocabularies, the
MDN-style `elements`/`remove_elements` pair or the older
`allowed_elements`/`disallowed_elements` pair. `Policy.from_config()` turns
that record into the single canonical `Policy` the rewriter reads.

Resolution is a two-stage build on top of `DEFAULT_CONFIG`:

1. MDN stage: `elements` fills the element allow-list and `remove_elements`
   the element block-list.
2. Legacy stage: `allowed_elements`/`disallowed_elements`, when given,
   overwrite the result of stage 1 for the same field.

A name on a block-list is never allowed, whatever an allow-list says.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable, Mapping
from dataclasses import dataclass, fields
from typing import Any

from .constants import (
    DEFAULT_ALLOWED_ATTRIBUTES,
    DEFAULT_ALLOWED_ELEMENTS,
    DEFAULT_ALLOWED_PROTOCOLS,
    DEFAULT_BLOCKED_ATTRIBUTES,
    DEFAULT_BLOCKED_ELEMENTS,
)

logger = logging.getLogger(__name__)

# camelCase spellings accepted by SanitizerConfig.from_mapping()
_CAMEL_CASE_KEYS = {
    "removeElements": "remove_elements",
    "allowedElements": "allowed_elements",
    "disallowedElements": "disallowed_elements",
    "allowedAttributes": "allowed_attributes",
    "disallowedAttributes": "disallowed_attributes",
    "allowedProtocols": "allowed_protocols",
    "allowDataUrls": "allow_data_urls",
    "allowRelativeUrls": "allow_relative_urls",
    "stripComments": "strip_comments",
    "stripDoctype": "strip_doctype",
}


def _names(values: Iterable[str] | str) -> tuple[str, ...]:
    # A bare string is one name, not a sequence of one-letter names.
    if isinstance(values, str):
        values = (values,)
    seen: dict[str, None] = {}
    for value in values:
        name = str(value).strip().lower()
        if name:
            seen.setdefault(name, None)
    return tuple(seen)


def _protocols(values: Iterable[str] | str) -> tuple[str, ...]:
    return tuple(name if name.endswith(":") else name + ":" for name in _names(values))


def _is_name_list(value: Any) -> bool:
    if isinstance(value, str):
        return True
    return isinstance(value, Iterable) and not isinstance(value, (bytes, bytearray, Mapping))


_CONFIG_NAME_FIELDS = (
    "elements",
    "remove_elements",
    "allowed_elements",
    "disallowed_elements",
    "allowed_attributes",
    "disallowed_attributes",
    "allowed_protocols",
)
_POLICY_NAME_FIELDS = (
    "allowed_elements",
    "blocked_elements",
    "allowed_attributes",
    "blocked_attributes",
    "allowed_protocols",
)
_TOGGLES = ("allow_data_urls", "allow_relative_urls", "strip_comments", "strip_doctype")

# What a malformed Policy field falls back to
_POLICY_FALLBACKS: dict[str, Any] = {
    "allowed_elements": DEFAULT_ALLOWED_ELEMENTS,
    "blocked_elements": DEFAULT_BLOCKED_ELEMENTS,
    "allowed_attributes": DEFAULT_ALLOWED_ATTRIBUTES,
    "blocked_attributes": DEFAULT_BLOCKED_ATTRIBUTES,
    "allowed_protocols": DEFAULT_ALLOWED_PROTOCOLS,
    "allow_data_urls": False,
    "allow_relative_urls": False,
    "strip_comments": True,
    "strip_doctype": True,
}


@dataclass(frozen=True, slots=True)
class SanitizerConfig:
    """A partial sanitizer configuration, as written by callers.

    `None` means "not supplied": the field falls back to `DEFAULT_CONFIG`.
    """

    # MDN-compatible element rules
    elements: Collection[str] | None = None
    remove_elements: Collection[str] | None = None

    # Legacy element rules; these win over the MDN pair
    allowed_elements: Collection[str] | None = None
    disallowed_elements: Collection[str] | None = None

    allowed_attributes: Collection[str] | None = None
    disallowed_attributes: Collection[str] | None = None

    allowed_protocols: Collection[str] | None = None
    allow_data_urls: bool | None = None
    allow_relative_urls: bool | None = None

    strip_comments: bool | None = None
    strip_doctype: bool | None = None

    def __post_init__(self) -> None:
        # Accept lists/sets/strings from user code, normalize for internal use.
        # A malformed value counts as not supplied, so the default applies.
        for name in _CONFIG_NAME_FIELDS:
            value = getattr(self, name)
            if value is None:
                continue
            if not _is_name_list(value):
                logger.warning("Ignoring sanitizer config %s=%r: expected a list of names", name, value)
                value = None
            elif name == "allowed_protocols":
                value = _protocols(value)
            else:
                value = _names(value)
            object.__setattr__(self, name, value)
        for name in _TOGGLES:
            value = getattr(self, name)
            if value is not None and not isinstance(value, bool):
                logger.warning("Ignoring sanitizer config %s=%r: expected true or false", name, value)
                object.__setattr__(self, name, None)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> SanitizerConfig:
        """Build a config from a plain mapping (e.g. decoded JSON).

        Keys may use the camelCase names of the browser API or the
        snake_case field names. Unknown keys are ignored with a warning.
        """
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            name = _CAMEL_CASE_KEYS.get(key, key)
            if name not in known:
                logger.warning("Ignoring unknown sanitizer config key %r", key)
                continue
            kwargs[name] = value
        return cls(**kwargs)


DEFAULT_CONFIG: SanitizerConfig = SanitizerConfig(
    elements=DEFAULT_ALLOWED_ELEMENTS,
    remove_elements=DEFAULT_BLOCKED_ELEMENTS,
    allowed_elements=DEFAULT_ALLOWED_ELEMENTS,
    disallowed_elements=DEFAULT_BLOCKED_ELEMENTS,
    allowed_attributes=DEFAULT_ALLOWED_ATTRIBUTES,
    disallowed_attributes=DEFAULT_BLOCKED_ATTRIBUTES,
    allowed_protocols=DEFAULT_ALLOWED_PROTOCOLS,
    allow_data_urls=False,
    allow_relative_urls=False,
    strip_comments=True,
    strip_doctype=True,
)


def _pick(value: Any, default: Any) -> Any:
    return default if value is None else value


@dataclass(frozen=True, slots=True)
class Policy:
    """The canonical, immutable rule set the rewriter applies.

    - `allowed_elements`/`allowed_attributes` are allow-lists; `None` means
      "no allow-list: allow unless blocked".
    - `blocked_elements`/`blocked_attributes` always take precedence.
    - `allowed_protocols` lists URL protocols with their colon (`"https:"`);
      `None` means any protocol.

    Names are ASCII-lowercased tuples in first-seen order. Instances can be
    shared freely between threads.
    """

    allowed_elements: Collection[str] | None = None
    blocked_elements: Collection[str] = ()
    allowed_attributes: Collection[str] | None = None
    blocked_attributes: Collection[str] = ()
    allowed_protocols: Collection[str] | None = None
    allow_data_urls: bool = False
    allow_relative_urls: bool = False
    strip_comments: bool = True
    strip_doctype: bool = True

    def __post_init__(self) -> None:
        for name in _POLICY_NAME_FIELDS:
            value = getattr(self, name)
            if value is None and name.startswith("allowed_"):
                continue
            if value is None or not _is_name_list(value):
                logger.warning("Invalid policy field %s=%r, using the default", name, value)
                value = _POLICY_FALLBACKS[name]
            object.__setattr__(self, name, _protocols(value) if name == "allowed_protocols" else _names(value))
        for name in _TOGGLES:
            value = getattr(self, name)
            if not isinstance(value, bool):
                logger.warning("Invalid policy field %s=%r, using the default", name, value)
                object.__setattr__(self, name, _POLICY_FALLBACKS[name])

    @classmethod
    def from_config(cls, config: SanitizerConfig | Mapping[str, Any] | None = None) -> Policy:
        if config is None:
            config = SanitizerConfig()
        elif isinstance(config, Mapping):
            config = SanitizerConfig.from_mapping(config)
        elif not isinstance(config, SanitizerConfig):
            raise TypeError(f"Expected SanitizerConfig or mapping, got {type(config).__name__}")

        base = DEFAULT_CONFIG
        allowed_elements = base.allowed_elements
        blocked_elements = base.disallowed_elements

        # MDN stage
        if config.elements is not None:
            allowed_elements = config.elements
        if config.remove_elements is not None:
            blocked_elements = config.remove_elements

        # Legacy stage: explicit legacy lists have the final say
        if config.allowed_elements is not None:
            allowed_elements = config.allowed_elements
        if config.disallowed_elements is not None:
            blocked_elements = config.disallowed_elements

        return cls(
            allowed_elements=allowed_elements,
            blocked_elements=blocked_elements,
            allowed_attributes=_pick(config.allowed_attributes, base.allowed_attributes),
            blocked_attributes=_pick(config.disallowed_attributes, base.disallowed_attributes),
            allowed_protocols=_pick(config.allowed_protocols, base.allowed_protocols),
            allow_data_urls=_pick(config.allow_data_urls, base.allow_data_urls),
            allow_relative_urls=_pick(config.allow_relative_urls, base.allow_relative_urls),
            strip_comments=_pick(config.strip_comments, base.strip_comments),
            strip_doctype=_pick(config.strip_doctype, base.strip_doctype),
        )

    def is_element_allowed(self, name: str) -> bool:
        name = name.lower()
        if name in self.blocked_elements:
            return False
        if self.allowed_elements is not None:
            return name in self.allowed_elements
        return True

    def is_attribute_allowed(self, name: str) -> bool:
        name = name.lower()
        if name in self.blocked_attributes:
            return False
        if self.allowed_attributes is not None:
            return name in self.allowed_attributes
        return True


DEFAULT_POLICY: Policy = Policy.from_config(DEFAULT_CONFIG)


def as_policy(config: Policy | SanitizerConfig | Mapping[str, Any] | None) -> Policy:
    """Coerce any accepted policy description into a `Policy`."""
    if config is None:
        return DEFAULT_POLICY
    if isinstance(config, Policy):
        return config
    return Policy.from_config(config)
