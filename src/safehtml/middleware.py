"""WSGI middleware that sanitizes outgoing HTML.

Responses whose Content-Type is `text/html` are buffered, passed through
`HTMLProcessor.process()` and then the `remove_unsafe()` safety floor, and
re-sent with a corrected Content-Length. HEAD requests and every other
response stream through untouched.
"""

from __future__ import annotations

import codecs
import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any

from .policy import Policy, SanitizerConfig
from .processor import HTMLProcessor
from .sanitizer import Sanitizer

logger = logging.getLogger(__name__)

_NOTHING = object()


def _header(headers: list[tuple[str, str]], name: str) -> str | None:
    name = name.lower()
    for key, value in headers:
        if key.lower() == name:
            return value
    return None


def _is_html(headers: list[tuple[str, str]]) -> bool:
    content_type = _header(headers, "content-type")
    return content_type is not None and content_type.split(";", 1)[0].strip().lower() == "text/html"


def _charset(headers: list[tuple[str, str]]) -> str:
    content_type = _header(headers, "content-type") or ""
    for param in content_type.split(";")[1:]:
        key, _, value = param.partition("=")
        if key.strip().lower() == "charset" and value.strip():
            return value.strip().strip("\"'")
    return "utf-8"


def _close(app_iter: Iterable[bytes]) -> None:
    close = getattr(app_iter, "close", None)
    if close is not None:
        close()


def _passthrough(first: Any, iterator: Iterator[bytes], app_iter: Iterable[bytes]) -> Iterator[bytes]:
    try:
        if first is not _NOTHING:
            yield first
        yield from iterator
    finally:
        _close(app_iter)


class SanitizationMiddleware:
    """Wrap a WSGI application so its HTML responses are sanitized.

    Args:
        app: The WSGI application.
        config: Policy, config record, mapping or `Sanitizer` to apply.
    """

    def __init__(
        self,
        app: Callable[..., Iterable[bytes]],
        config: Policy | SanitizerConfig | Mapping[str, Any] | Sanitizer | None = None,
    ) -> None:
        self.app = app
        self.processor = HTMLProcessor(config)

    def __call__(self, environ: dict[str, Any], start_response: Callable[..., Any]) -> Iterable[bytes]:
        if environ.get("REQUEST_METHOD") == "HEAD":
            # No body to clean; Content-Length describes the GET body.
            return self.app(environ, start_response)

        state: dict[str, Any] = {}
        written: list[bytes] = []

        def capture(status: str, headers: list[tuple[str, str]], exc_info: Any = None) -> Callable[[bytes], Any]:
            state["response"] = (status, headers, exc_info)
            state["html"] = _is_html(headers)
            if not state["html"]:
                return start_response(status, headers, exc_info)
            return written.append

        app_iter = self.app(environ, capture)
        iterator = iter(app_iter)
        try:
            # Generator applications only call start_response on first iteration.
            first = next(iterator, _NOTHING)
        except BaseException:
            _close(app_iter)
            raise

        if not state.get("html"):
            return _passthrough(first, iterator, app_iter)

        try:
            chunks = list(written)
            if first is not _NOTHING:
                chunks.append(first)
            chunks.extend(iterator)
        finally:
            _close(app_iter)

        status, headers, exc_info = state["response"]
        charset = _charset(headers)
        try:
            codecs.lookup(charset)
        except LookupError:
            logger.warning("Unknown response charset %r, decoding as utf-8", charset)
            charset = "utf-8"
        text = b"".join(chunks).decode(charset, errors="replace")
        # The configured policy may be narrower than the safety floor.
        cleaned_text = self.processor.sanitizer.remove_unsafe(self.processor.process(text))
        if cleaned_text != text:
            logger.debug("Sanitized HTML response for %s", environ.get("PATH_INFO", ""))
        cleaned = cleaned_text.encode(charset, errors="xmlcharrefreplace")

        headers = [(key, value) for key, value in headers if key.lower() != "content-length"]
        headers.append(("Content-Length", str(len(cleaned))))
        start_response(status, headers, exc_info)
        return [cleaned]
