"""Unit tests for the external dependency scan."""

from __future__ import annotations

import pytest

from bento.core.dependencies import extract, is_external


class TestExtract:

    def test_default_import(self):
        assert extract('import debounce from "lodash";') == {"lodash"}

    def test_named_and_namespace_imports(self):
        text = (
            "import { render, useState } from '@wordpress/element';\n"
            'import * as api from "@wordpress/api-fetch";\n'
        )
        assert extract(text) == {"@wordpress/element", "@wordpress/api-fetch"}

    def test_require_calls(self):
        text = "var a = require('left-pad');\nvar b = require ( \"jquery\" );"
        assert extract(text) == {"left-pad", "jquery"}

    def test_local_paths_are_excluded(self):
        text = (
            "import a from './a';\n"
            "import b from '../b';\n"
            "var c = require('/abs/c');\n"
        )
        assert extract(text) == set()

    def test_duplicates_collapse(self):
        text = "import a from 'x';\nimport b from 'x';\nrequire('x');"
        assert extract(text) == {"x"}

    def test_side_effect_and_dynamic_imports_are_not_matched(self):
        text = "import 'polyfill';\nconst m = import('lazy');"
        assert extract(text) == set()

    def test_empty_script(self):
        assert extract("") == set()


class TestIsExternal:

    @pytest.mark.parametrize("name", ["lodash", "@scope/pkg", "pkg/sub"])
    def test_external(self, name):
        assert is_external(name)

    @pytest.mark.parametrize("name", ["", "./x", "../x", "/x"])
    def test_not_external(self, name):
        assert not is_external(name)
