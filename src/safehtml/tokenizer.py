"""A small HTML fragment lexer.

This is not an HTML5 tree builder. It splits markup into a flat stream of
tags, text, comments and doctypes, following the WHATWG tokenizer closely
enough that the boundaries it finds are the boundaries a browser finds:
quoted attribute values may contain `>`, raw-text elements (script, style,
textarea...) swallow markup up to their end tag, and an unterminated tag at
the end of input is dropped instead of being passed through as text.
"""

import re

from .constants import RAWTEXT_ELEMENT_SET
from .tokens import Attribute, CharacterTokens, CommentToken, DoctypeToken, Tag

_ASCII_LETTERS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ")

_TAG_NAME_PATTERN = re.compile(r"[^\t\n\f\r />]*")
_ATTR_NAME_PATTERN = re.compile(r"[^\t\n\f\r />=]*")
_UNQUOTED_VALUE_PATTERN = re.compile(r"[^\t\n\f\r >]*")
_WHITESPACE_PATTERN = re.compile(r"[\t\n\f\r ]*")
_SEPARATOR_PATTERN = re.compile(r"[\t\n\f\r /]*")
_COMMENT_END_PATTERN = re.compile(r"--!?>")

_RAWTEXT_END_PATTERNS = {
    name: re.compile(r"</" + name + r"(?=[\t\n\f\r />]|$)", re.IGNORECASE) for name in RAWTEXT_ELEMENT_SET
}

# Returned by the markup readers for input that produces no token at all.
_DROP = object()


class Tokenizer:
    __slots__ = ("html", "length", "tokens")

    def __init__(self, html):
        self.html = html
        self.length = len(html)
        self.tokens = []

    def run(self):
        html = self.html
        pos = 0
        text_start = 0
        while True:
            lt = html.find("<", pos)
            if lt == -1:
                break
            token, end = self._markup_at(lt)
            if token is None:
                pos = lt + 1
                continue

            self._flush_text(text_start, lt)
            if token is not _DROP:
                self.tokens.append(token)
            pos = text_start = end

            if type(token) is Tag and token.kind == Tag.START and token.name in RAWTEXT_ELEMENT_SET:
                match = _RAWTEXT_END_PATTERNS[token.name].search(html, pos)
                close = match.start() if match else self.length
                if close > pos:
                    self.tokens.append(CharacterTokens(html[pos:close], raw=True))
                pos = text_start = close

        self._flush_text(text_start, self.length)
        return self.tokens

    def _flush_text(self, start, end):
        if end > start:
            self.tokens.append(CharacterTokens(self.html[start:end]))

    def _markup_at(self, i):
        """Read the markup starting at `html[i] == "<"`.

        Returns `(token, end)`; `token` is None when the `<` is plain text.
        """
        html = self.html
        nxt = html[i + 1 : i + 2]

        if nxt and nxt in _ASCII_LETTERS:
            return self._tag(i + 1, Tag.START)

        if nxt == "!":
            if html.startswith("<!--", i):
                return self._comment(i)
            if html[i + 2 : i + 9].lower() == "doctype":
                end = self._find_close(i + 9)
                return DoctypeToken(html[i:end]), end
            end = self._find_close(i + 2)
            return CommentToken(html[i:end]), end

        if nxt == "?":
            end = self._find_close(i + 2)
            return CommentToken(html[i:end]), end

        if nxt == "/":
            after = html[i + 2 : i + 3]
            if after and after in _ASCII_LETTERS:
                return self._tag(i + 2, Tag.END)
            if after == ">":
                # "</>" is ignored entirely by browsers
                return _DROP, i + 3
            if not after:
                return None, i + 1
            end = self._find_close(i + 2)
            return CommentToken(html[i:end]), end

        return None, i + 1

    def _find_close(self, start):
        close = self.html.find(">", start)
        return self.length if close == -1 else close + 1

    def _comment(self, i):
        html = self.html
        body = i + 4
        if html.startswith(">", body):
            end = body + 1
        elif html.startswith("->", body):
            end = body + 2
        else:
            match = _COMMENT_END_PATTERN.search(html, body)
            end = match.end() if match else self.length
        return CommentToken(html[i:end]), end

    def _tag(self, start, kind):
        html = self.html
        length = self.length
        name_match = _TAG_NAME_PATTERN.match(html, start)
        raw_name = name_match.group()
        pos = name_match.end()
        attrs = []

        while True:
            sep_end = _SEPARATOR_PATTERN.match(html, pos).end()
            if sep_end >= length:
                return _DROP, length

            if html[sep_end] == ">":
                tail = html[pos : sep_end + 1]
                return Tag(kind, raw_name, attrs, tail.endswith("/>"), raw_name, tail), sep_end + 1

            name_start = sep_end
            if html[name_start] == "=":
                name_end = _ATTR_NAME_PATTERN.match(html, name_start + 1).end()
            else:
                name_end = _ATTR_NAME_PATTERN.match(html, name_start).end()
            attr_name = html[name_start:name_end]

            after_name = _WHITESPACE_PATTERN.match(html, name_end).end()
            value = None
            quote = None
            end = name_end
            if html.startswith("=", after_name):
                value_start = _WHITESPACE_PATTERN.match(html, after_name + 1).end()
                if value_start >= length:
                    return _DROP, length
                ch = html[value_start]
                if ch in "\"'":
                    close = html.find(ch, value_start + 1)
                    if close == -1:
                        return _DROP, length
                    value = html[value_start + 1 : close]
                    quote = ch
                    end = close + 1
                elif ch == ">":
                    value = ""
                    quote = ""
                    end = value_start
                else:
                    value_match = _UNQUOTED_VALUE_PATTERN.match(html, value_start)
                    value = value_match.group()
                    quote = ""
                    end = value_match.end()

            attrs.append(
                Attribute(
                    attr_name,
                    value,
                    quote,
                    lead=html[pos:name_start],
                    raw_name=attr_name,
                    raw=html[pos:end],
                )
            )
            pos = end


def tokenize(html):
    """Split an HTML fragment into a flat list of tokens."""
    return Tokenizer(html).run()
