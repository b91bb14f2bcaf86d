from __future__ import annotations

import time
import unittest

from safehtml.serialize import to_html
from safehtml.tokenizer import tokenize
from safehtml.tokens import REMOVED, Attribute, CharacterTokens, CommentToken, DoctypeToken, Tag


def _kinds(tokens):
    return [type(token).__name__ for token in tokens]


class TestTokenizer(unittest.TestCase):
    def test_tags_and_text(self) -> None:
        tokens = tokenize('<p class="a">Hi</p>')
        assert _kinds(tokens) == ["Tag", "CharacterTokens", "Tag"]
        assert tokens[0].is_start and tokens[0].name == "p"
        assert tokens[0].attrs[0].name == "class"
        assert tokens[0].attrs[0].value == "a"
        assert tokens[1].data == "Hi"
        assert tokens[2].is_end

    def test_unchanged_markup_round_trips(self) -> None:
        html = "<DIV Class='x' data-y=1 hidden>t</DIV><br/><!-- c --><!DOCTYPE html>"
        assert to_html(tokenize(html)) == html

    def test_names_are_lowercased_but_spelling_is_kept(self) -> None:
        tag = tokenize("<SPAN ID=x>")[0]
        assert tag.name == "span"
        assert tag.raw_name == "SPAN"
        assert tag.attrs[0].name == "id"
        assert tag.attrs[0].raw == " ID=x"

    def test_quoted_value_may_contain_gt(self) -> None:
        tokens = tokenize('<a href="x>y">t</a>')
        assert len(tokens) == 3
        assert tokens[0].attrs[0].value == "x>y"

    def test_single_quoted_and_valueless_attributes(self) -> None:
        attrs = tokenize("<input value='a b' disabled>")[0].attrs
        assert [(a.name, a.value, a.quote) for a in attrs] == [("value", "a b", "'"), ("disabled", None, None)]

    def test_slash_separates_attributes(self) -> None:
        tag = tokenize("<svg/onload=alert(1)>")[0]
        assert tag.name == "svg"
        assert [a.name for a in tag.attrs] == ["onload"]
        assert tag.attrs[0].value == "alert(1)"

    def test_unquoted_value_keeps_slash(self) -> None:
        tag = tokenize("<img/src=x/onerror=y>")[0]
        assert [(a.name, a.value) for a in tag.attrs] == [("src", "x/onerror=y")]

    def test_self_closing_flag(self) -> None:
        assert tokenize("<div/>")[0].self_closing
        assert not tokenize("<div>")[0].self_closing

    def test_raw_text_body_is_one_token(self) -> None:
        tokens = tokenize("<script><b>x</b></script>after")
        assert _kinds(tokens) == ["Tag", "CharacterTokens", "Tag", "CharacterTokens"]
        assert tokens[1].raw
        assert tokens[1].data == "<b>x</b>"
        assert to_html(tokens) == "<script><b>x</b></script>after"

    def test_raw_text_end_tag_is_case_insensitive(self) -> None:
        tokens = tokenize("<style>a</STYLE >b")
        assert tokens[1].data == "a"
        assert tokens[2].is_end and tokens[2].name == "style"

    def test_raw_text_ignores_lookalike_end_tags(self) -> None:
        tokens = tokenize("<script>x</scripty></script>")
        assert tokens[1].data == "x</scripty>"

    def test_unterminated_raw_text_runs_to_end(self) -> None:
        tokens = tokenize("<script>alert(1)")
        assert _kinds(tokens) == ["Tag", "CharacterTokens"]
        assert tokens[1].data == "alert(1)"

    def test_unterminated_tag_is_dropped(self) -> None:
        assert to_html(tokenize('<p>ok</p><img src="x')) == "<p>ok</p>"
        assert to_html(tokenize("<p>ok</p><img src=x")) == "<p>ok</p>"
        assert to_html(tokenize("ok<div")) == "ok"

    def test_lone_lt_is_text(self) -> None:
        tokens = tokenize("a < b <3 </")
        assert _kinds(tokens) == ["CharacterTokens"]
        assert to_html(tokens) == "a &lt; b &lt;3 &lt;/"

    def test_comments(self) -> None:
        tokens = tokenize("<!-- a --><!-->x<!--->y<!-- b --!>z")
        assert _kinds(tokens) == [
            "CommentToken",
            "CommentToken",
            "CharacterTokens",
            "CommentToken",
            "CharacterTokens",
            "CommentToken",
            "CharacterTokens",
        ]
        assert tokens[1].source == "<!-->"
        assert tokens[3].source == "<!--->"
        assert tokens[5].source == "<!-- b --!>"

    def test_comment_end_is_the_first_terminator(self) -> None:
        tokens = tokenize("<!-- a ---->b<!-- c --!>d")
        assert tokens[0].source == "<!-- a ---->"
        assert tokens[2].source == "<!-- c --!>"

    def test_many_comments_take_linear_time(self) -> None:
        html = "<!--a-->" * 80000
        start = time.perf_counter()
        tokens = tokenize(html)
        elapsed = time.perf_counter() - start
        assert len(tokens) == 80000
        assert elapsed < 5.0

    def test_unterminated_comment_runs_to_end(self) -> None:
        tokens = tokenize("a<!-- <script>x</script>")
        assert _kinds(tokens) == ["CharacterTokens", "CommentToken"]

    def test_bogus_comments(self) -> None:
        for html in ("<?php echo 1 ?>", "<!ELEMENT x>", "</ p>"):
            tokens = tokenize(html)
            assert _kinds(tokens) == ["CommentToken"], html

    def test_doctype_is_case_insensitive(self) -> None:
        tokens = tokenize("<!DocType html><p>")
        assert type(tokens[0]) is DoctypeToken
        assert tokens[0].source == "<!DocType html>"

    def test_empty_end_tag_is_dropped(self) -> None:
        tokens = tokenize("a</>b")
        assert _kinds(tokens) == ["CharacterTokens", "CharacterTokens"]
        assert to_html(tokens) == "ab"


class TestTokens(unittest.TestCase):
    def test_with_value_double_quotes(self) -> None:
        attr = Attribute("HREF", "javascript:x", "'", lead="\n", raw_name="HREF", raw="\nHREF='javascript:x'")
        assert attr.with_value("#").raw == '\nHREF="#"'

    def test_replace_attrs_keeps_tail(self) -> None:
        tag = tokenize('<img onerror="x" alt=a />')[0]
        kept = [a for a in tag.attrs if a.name != "onerror"]
        assert tag.replace_attrs(kept).to_html() == "<img alt=a />"

    def test_end_tag_serialization(self) -> None:
        assert Tag(Tag.END, "P").to_html() == "</P>"

    def test_raw_text_is_not_escaped(self) -> None:
        assert CharacterTokens("a<b", raw=True).to_html() == "a<b"
        assert CharacterTokens("a<b").to_html() == "a&lt;b"

    def test_removed_marker_is_empty(self) -> None:
        assert to_html([CommentToken("<!--x-->"), REMOVED]) == "<!--x-->"
