"""URL checks for URL-valued attributes.

Values are normalized the way a browser normalizes them before resolving a
link: character references are decoded, leading/trailing C0 controls and
spaces are stripped, and tab/newline characters are removed. Only then is
the scheme examined, so `jav&#x09;ascript:` and `\\njavascript:` are caught.
"""

from __future__ import annotations

import html
import re
from collections.abc import Collection
from urllib.parse import urlsplit

from .constants import SPECIAL_SCHEMES, UNSAFE_URL_PREFIXES

_SCHEME_PATTERN = re.compile(r"([A-Za-z][A-Za-z0-9+.\-]*):")
_TAB_NEWLINE_PATTERN = re.compile(r"[\t\n\r]")
_FORBIDDEN_HOST_PATTERN = re.compile(r"[\x00-\x20\"<>^|]")
_C0_CONTROL_OR_SPACE = "".join(chr(code) for code in range(0x21))
_SPECIAL_SCHEMES = frozenset(SPECIAL_SCHEMES)


def normalize_url(value: str) -> str:
    value = html.unescape(value)
    value = value.strip(_C0_CONTROL_OR_SPACE)
    return _TAB_NEWLINE_PATTERN.sub("", value)


def url_protocol(value: str) -> str | None:
    """Return the protocol (`"https:"`) of an absolute URL.

    Returns None when `value` does not parse as an absolute URL: it has no
    scheme, or it uses a special scheme (http, https, ...) without a usable
    host or port.
    """
    url = normalize_url(value)
    match = _SCHEME_PATTERN.match(url)
    if match is None:
        return None

    scheme = match.group(1).lower()
    if scheme in _SPECIAL_SCHEMES:
        rest = url[match.end() :].replace("\\", "/").lstrip("/")
        try:
            parts = urlsplit(f"{scheme}://{rest}")
            _ = parts.port
        except ValueError:
            return None
        host = parts.hostname
        if not host or _FORBIDDEN_HOST_PATTERN.search(host):
            return None

    return scheme + ":"


def is_protocol_relative(value: str) -> bool:
    url = normalize_url(value)
    return url[:2] in {"//", "\\\\", "/\\", "\\/"}


def check_url(
    value: str,
    *,
    allowed_protocols: Collection[str] | None,
    allow_data_urls: bool,
    allow_relative: bool = False,
) -> bool:
    """Return True when a URL attribute value may stay as written.

    Anything that does not parse as an absolute URL fails, except for
    scheme-less relative references when `allow_relative` is set. `data:`
    URLs are governed by `allow_data_urls` alone; every other scheme must be
    listed in `allowed_protocols` (None means any scheme).
    """
    if not value:
        return True

    protocol = url_protocol(value)
    if protocol is None:
        if not allow_relative:
            return False
        url = normalize_url(value)
        if not url or _SCHEME_PATTERN.match(url):
            return False
        return not is_protocol_relative(value)

    if protocol == "data:":
        return allow_data_urls
    return allowed_protocols is None or protocol in allowed_protocols


def is_unsafe_url(value: str) -> bool:
    """True for script-capable URLs (`javascript:`, `data:`)."""
    return normalize_url(value).lower().startswith(UNSAFE_URL_PREFIXES)
