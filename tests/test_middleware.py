from __future__ import annotations

import unittest

from safehtml.middleware import SanitizationMiddleware


class ClosingBody:
    def __init__(self, chunks: list[bytes]) -> None:
        self.chunks = chunks
        self.closed = False

    def __iter__(self):
        return iter(self.chunks)

    def close(self) -> None:
        self.closed = True


def make_app(content_type: str, chunks: list[bytes], body: ClosingBody | None = None):
    def app(environ, start_response):
        start_response("200 OK", [("Content-Type", content_type), ("Content-Length", "999")])
        return body if body is not None else chunks

    return app


def call(app, environ=None):
    responses = []

    def start_response(status, headers, exc_info=None):
        responses.append((status, headers))
        return lambda data: None

    body = b"".join(app(environ or {"PATH_INFO": "/"}, start_response))
    assert len(responses) == 1
    return responses[0][0], dict(responses[0][1]), body


class TestSanitizationMiddleware(unittest.TestCase):
    def test_html_responses_are_sanitized(self) -> None:
        app = make_app("text/html; charset=utf-8", [b"<p>a</p>", b"<script>x</script>"])
        status, headers, body = call(SanitizationMiddleware(app))
        assert status == "200 OK"
        assert body == b"<p>a</p>"
        assert headers["Content-Length"] == "8"

    def test_other_responses_pass_through(self) -> None:
        payload = b'{"html": "<script>x</script>"}'
        app = make_app("application/json", [payload])
        _, headers, body = call(SanitizationMiddleware(app))
        assert body == payload
        assert headers["Content-Length"] == "999"

    def test_generator_apps(self) -> None:
        def app(environ, start_response):
            start_response("200 OK", [("content-type", "TEXT/HTML")])
            yield b"<p onclick='x'>"
            yield b"hi</p>"

        _, headers, body = call(SanitizationMiddleware(app))
        assert body == b"<p>hi</p>"
        assert headers["Content-Length"] == "9"

    def test_app_iterable_is_closed(self) -> None:
        for content_type in ("text/html", "text/plain"):
            closing = ClosingBody([b"<p>a</p>"])
            call(SanitizationMiddleware(make_app(content_type, [], closing)))
            assert closing.closed, content_type

    def test_charset_is_respected(self) -> None:
        text = "<p>café</p><script>x</script>"
        app = make_app("text/html; charset=latin-1", [text.encode("latin-1")])
        _, _, body = call(SanitizationMiddleware(app))
        assert body == "<p>café</p>".encode("latin-1")

    def test_unknown_charset_falls_back_to_utf8(self) -> None:
        app = make_app("text/html; charset=no-such-codec", ["<p>é</p>".encode()])
        with self.assertLogs("safehtml.middleware", level="WARNING"):
            _, _, body = call(SanitizationMiddleware(app))
        assert body == "<p>é</p>".encode()

    def test_narrow_policy_still_gets_the_safety_floor(self) -> None:
        app = make_app(
            "text/html",
            [b'<p>a</p><object data="javascript:alert(1)"></object><script>x</script><a href="javascript:y">z</a>'],
        )
        _, headers, body = call(SanitizationMiddleware(app, {"disallowedElements": ["iframe"]}))
        assert body == b'<p>a</p><a href="#">z</a>'
        assert headers["Content-Length"] == str(len(body))

    def test_head_requests_pass_through(self) -> None:
        app = make_app("text/html", [])
        status, headers, body = call(SanitizationMiddleware(app), {"REQUEST_METHOD": "HEAD", "PATH_INFO": "/"})
        assert status == "200 OK"
        assert body == b""
        assert headers["Content-Length"] == "999"

    def test_config(self) -> None:
        app = make_app("text/html", [b"<p><em>a</em>b</p>"])
        _, _, body = call(SanitizationMiddleware(app, {"disallowedElements": ["em"]}))
        assert body == b"<p>b</p>"
