"""Shared test fixtures for bento."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest

from bento.config import BentoSettings
from bento.core.errors import DependencyInstallError, ToolUnavailableError, TransformError
from bento.core.orchestrator import Orchestrator
from bento.models.config import BuildConfig


# ---------------------------------------------------------------------------
# Fake tool runner
# ---------------------------------------------------------------------------


class FakeToolRunner:
    """In-memory ToolRunner that records every call.

    ``babel`` prefixes a marker comment, ``terser`` collapses whitespace,
    ``sass`` returns the source file unchanged (the fixtures only use
    SCSS that is also valid CSS).
    """

    def __init__(
        self,
        available: Sequence[str] = ("babel", "terser", "sass"),
        *,
        failures: dict[str, str] | None = None,
        install_error: str | None = None,
    ) -> None:
        self.available = set(available)
        self.failures = dict(failures or {})
        self.install_error = install_error
        self.calls: list[tuple[str, list[str], str | None]] = []
        self.installed: list[list[str]] = []

    def is_available(self, tool: str) -> bool:
        return tool in self.available

    def run(self, tool: str, args: Sequence[str], *, input_text: str | None = None) -> str:
        self.calls.append((tool, list(args), input_text))
        if tool not in self.available:
            raise ToolUnavailableError(tool)
        if tool in self.failures:
            raise TransformError(tool, self.failures[tool], stderr=self.failures[tool])
        if tool == "babel":
            return f"/* transpiled */\n{input_text}"
        if tool == "terser":
            return " ".join((input_text or "").split())
        if tool == "sass":
            return Path(args[0]).read_text(encoding="utf-8")
        raise AssertionError(f"unexpected tool {tool}")

    def install(self, packages: Sequence[str]) -> None:
        self.installed.append(list(packages))
        if self.install_error:
            raise DependencyInstallError(self.install_error)

    def tools_called(self) -> list[str]:
        return [tool for tool, _, _ in self.calls]


# ---------------------------------------------------------------------------
# Project tree
# ---------------------------------------------------------------------------

MAIN_JS = """\
import debounce from "lodash";
const ready = () => debounce(init, 10);
window.myPlugin = { ready };
"""

HELPER_JS = """\
var pad = require("left-pad");
var local = require('./local');
function helper() { return pad("x", 2); }
"""

STYLE_CSS = """\
/* Frontend styles */
.button {
    color: red;
    margin : 0 ;
}
"""

THEME_SCSS = """\
.theme {
  padding: 4px;
}
"""


def write_tree(root: Path, files: dict[str, str]) -> None:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A plugin project with admin and frontend entries; ``shared`` is absent."""
    write_tree(tmp_path, {
        "scripts/admin/main.js": MAIN_JS,
        "scripts/admin/sub/helper.js": HELPER_JS,
        "scripts/admin/notes.txt": "not an asset\n",
        "scripts/frontend/style.css": STYLE_CSS,
        "scripts/frontend/theme.scss": THEME_SCSS,
    })
    return tmp_path


@pytest.fixture
def make_config(project: Path) -> Callable[..., BuildConfig]:
    """Factory fixture: BuildConfig rooted at the test project."""

    def _factory(**overrides: Any) -> BuildConfig:
        defaults: dict[str, Any] = {
            "entry": {
                "admin": project / "scripts/admin",
                "frontend": project / "scripts/frontend",
            },
            "output": project / "public",
        }
        defaults.update(overrides)
        return BuildConfig(**defaults)

    return _factory


@pytest.fixture
def runner() -> FakeToolRunner:
    return FakeToolRunner()


@pytest.fixture
def settings() -> BentoSettings:
    return BentoSettings(watch_debounce_seconds=0.0)


@pytest.fixture
def orchestrator(
    make_config: Callable[..., BuildConfig],
    runner: FakeToolRunner,
    settings: BentoSettings,
) -> Orchestrator:
    """Orchestrator over the test project with a fake tool runner."""
    return Orchestrator(make_config(), runner=runner, settings=settings)
