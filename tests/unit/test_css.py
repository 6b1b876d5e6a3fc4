"""Unit tests for the CSS minifier."""

from __future__ import annotations

import pytest

from bento.core.css import minify_css, strip_comments


class TestMinifyCss:

    def test_reference_example(self):
        source = ".a {  color: red;  }\n/* note */\n.b{margin:0;}"
        assert minify_css(source) == ".a{color:red}.b{margin:0}"

    def test_strips_comments_spanning_lines(self):
        assert minify_css("/* a\n b */.x{top:0}") == ".x{top:0}"

    def test_collapses_whitespace_in_selectors(self):
        assert minify_css(".a   .b\n\t.c { color : blue ; }") == ".a .b .c{color:blue}"

    def test_removes_space_after_commas(self):
        assert minify_css("h1 , h2 ,h3 { margin : 0 }") == "h1,h2,h3{margin:0}"

    def test_squeezes_repeated_semicolons(self):
        assert minify_css("a{b:c; ;}") == "a{b:c}"
        assert minify_css("a{b:c;;;d:e;}") == "a{b:c;d:e}"

    def test_empty_input(self):
        assert minify_css("") == ""
        assert minify_css("   /* only a comment */  ") == ""

    def test_unterminated_comment_is_left(self):
        assert minify_css(".a{top:0} /* open") == ".a{top:0}/* open"

    @pytest.mark.parametrize(
        "source",
        [
            ".a {  color: red;  }\n/* note */\n.b{margin:0;}",
            "a{b:c; ;}",
            "@media (max-width: 600px) { .x { display : none ; } }",
            "//**/*x*/.y{z:1}",
            "  ; ;  ",
            ".a{content:' ; '}",
        ],
    )
    def test_idempotent(self, source):
        once = minify_css(source)
        assert minify_css(once) == once


class TestStripComments:

    def test_nested_looking_comment_is_stable(self):
        stripped = strip_comments("//**/*x*/")
        assert strip_comments(stripped) == stripped
        assert stripped == "/"

    def test_keeps_non_comment_text(self):
        assert strip_comments("a /* b */ c") == "a  c"
