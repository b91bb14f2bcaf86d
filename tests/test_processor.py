from __future__ import annotations

import unittest

from safehtml import (
    HTMLProcessor,
    SanitizationResult,
    Sanitizer,
    ShadowRootProcessor,
    process_server_html,
    process_with_metadata,
)


class TestHTMLProcessor(unittest.TestCase):
    def test_process_uses_the_policy(self) -> None:
        processor = HTMLProcessor({"disallowedElements": ["em"]})
        assert processor.process("<p><em>a</em>b</p>") == "<p>b</p>"

    def test_accepts_a_prebuilt_sanitizer(self) -> None:
        engine = Sanitizer()
        assert HTMLProcessor(engine).sanitizer is engine

    def test_process_server_html(self) -> None:
        assert process_server_html("<p>a</p><script>b</script>") == "<p>a</p>"
        assert process_server_html(None) == ""

    def test_metadata_reports_removed_names(self) -> None:
        result = process_with_metadata('<p onclick="x">a</p><script>b</script><iframe src="y"></iframe>')
        assert result.cleaned_html == "<p>a</p>"
        assert result.was_modified
        assert "script" in result.removed_elements
        assert result.removed_elements == ("script", "iframe")
        assert result.removed_attributes == ("onclick",)

    def test_metadata_for_clean_input(self) -> None:
        result = process_with_metadata("<p>a</p>")
        assert result == SanitizationResult(cleaned_html="<p>a</p>", was_modified=False)
        assert result.removed_elements == ()
        assert result.removed_attributes == ()

    def test_metadata_only_counts_blocked_names(self) -> None:
        result = process_with_metadata('<a href="javascript:x">y</a>')
        assert result.cleaned_html == '<a href="#">y</a>'
        assert result.was_modified
        assert result.removed_elements == ()
        assert result.removed_attributes == ()

    def test_metadata_with_custom_policy(self) -> None:
        result = process_with_metadata("<p><em>a</em> b</p>", {"removeElements": ["em"], "disallowedElements": None})
        assert result.cleaned_html == "<p> b</p>"
        assert result.removed_elements == ("em",)

    def test_metadata_for_bad_input(self) -> None:
        result = process_with_metadata(None)
        assert result.cleaned_html == ""
        assert not result.was_modified

    def test_check_structure(self) -> None:
        processor = HTMLProcessor()
        assert processor.check_structure("<p>a</p>").is_valid
        assert not processor.check_structure("<p>a</div>").is_valid


class TestShadowRootProcessor(unittest.TestCase):
    def test_starts_empty(self) -> None:
        assert ShadowRootProcessor().get_html() == ""

    def test_set_html_applies_the_floor(self) -> None:
        root = ShadowRootProcessor()
        root.set_html('<p onclick="x">a</p><script>b</script><form>c</form>')
        assert root.get_html() == "<p>a</p><form>c</form>"

    def test_set_html_unsafe_follows_the_policy(self) -> None:
        root = ShadowRootProcessor({"disallowedElements": ["em"]})
        root.set_html_unsafe("<p><em>x</em>y</p><script>z</script>")
        assert root.get_html() == "<p>y</p><script>z</script>"

    def test_default_option_means_the_session_engine(self) -> None:
        root = ShadowRootProcessor({"disallowedElements": []})
        root.set_html_unsafe("<form>x</form>", sanitizer="default")
        assert root.get_html() == "<form>x</form>"
        root.set_html_unsafe("<form>x</form>", sanitizer={"disallowedElements": ["form"]})
        assert root.get_html() == ""

    def test_writes_overwrite_and_clear_resets(self) -> None:
        root = ShadowRootProcessor()
        root.set_html("<p>one</p>")
        root.set_html("<p>two</p>")
        assert root.get_html() == "<p>two</p>"
        root.clear()
        assert root.get_html() == ""

    def test_non_string_input_keeps_content(self) -> None:
        root = ShadowRootProcessor()
        root.set_html("<p>keep</p>")
        root.set_html(None)
        root.set_html_unsafe(42)
        assert root.get_html() == "<p>keep</p>"
