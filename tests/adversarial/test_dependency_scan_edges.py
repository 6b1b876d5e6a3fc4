"""Adversarial tests — dependency scan on awkward and hostile script text.

These tests pin down the heuristic's known behaviour:
1. References inside comments and strings are still reported
2. Local paths never leak into the install list
3. Malformed or huge input does not hang or raise
"""

from __future__ import annotations

import pytest

from bento.core.dependencies import extract


class TestKnownHeuristicBehaviour:

    def test_reference_in_comment_is_reported(self):
        assert extract("// var x = require('commented-out');") == {"commented-out"}

    def test_reference_in_string_is_reported(self):
        assert extract("var s = \"require('in-string')\";") == {"in-string"}

    def test_template_literal_require_is_ignored(self):
        assert extract("require(`tpl`)") == set()

    def test_mismatched_quotes_are_captured_up_to_the_first_quote(self):
        assert extract("require('odd\")") == {"odd"}


class TestLocalPaths:

    @pytest.mark.parametrize(
        "text",
        [
            "import a from './a';",
            "import a from '../../a';",
            "import a from '/root/a';",
            "require('./x')",
            "require('.')",
            "require('..')",
        ],
    )
    def test_never_reported(self, text):
        assert extract(text) == set()


class TestMalformedInput:

    def test_unterminated_import(self):
        assert extract("import { a, b, c from 'x") == set()

    def test_import_without_from(self):
        assert extract("import x;\nvar y = 1;") == set()

    def test_long_input_without_semicolons(self):
        text = "import " + "a, " * 20000 + "z from 'big'"
        assert extract(text) == {"big"}

    def test_many_references(self):
        text = "\n".join(f"require('pkg-{i}');" for i in range(2000))
        assert len(extract(text)) == 2000

    def test_binary_like_text(self):
        assert extract("\x00\x01require\x00('x')\xff") == set()
