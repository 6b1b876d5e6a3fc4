"""Script and style transform adapters.

Each adapter turns one source file into a ``TransformResult`` holding the
readable text, the minified text, and any external module names found in
it. Heavy lifting is delegated to external tools through a ``ToolRunner``;
missing or failing tools degrade as follows:

========================  ===========================================
Condition                 Outcome
========================  ===========================================
transpiler missing/fails  readable = original text, warning
minifier missing/fails    minified = readable text, warning
Sass compiler missing     file skipped (``ToolUnavailableError``)
Sass compiler fails       file skipped (``TransformError``)
========================  ===========================================
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from bento.core import dependencies
from bento.core.css import minify_css
from bento.core.errors import ToolUnavailableError, TransformError
from bento.core.tools import ToolRunner
from bento.models.artifacts import FileKind, SourceFile
from bento.models.build import BuildWarning, WarningCategory

logger = logging.getLogger(__name__)

TRANSPILER = "babel"
SCRIPT_MINIFIER = "terser"
SASS_COMPILER = "sass"

# Constructs that an ES5 target cannot run as-is.
_MODERN_SYNTAX_RE = re.compile(
    r"\b(?:import|export|class|const|let|async|await)\b"
    r"|=>"
    r"|\?\."
)

_TERSER_COMPRESS = "dead_code=true,drop_console=false,drop_debugger=true,keep_fargs=true"


class TransformResult(BaseModel):
    """Output of one transform call."""

    model_config = ConfigDict(frozen=True)

    readable: str
    minified: str
    extension: str  # output extension, ".js" or ".css"
    dependencies: frozenset[str] = frozenset()
    warnings: list[BuildWarning] = Field(default_factory=list)


def needs_transpilation(source_text: str) -> bool:
    """Heuristic: does *source_text* use syntax newer than ES5?"""
    return _MODERN_SYNTAX_RE.search(source_text) is not None


def _warning(
    category: WarningCategory, message: str, source: SourceFile | None
) -> BuildWarning:
    logger.warning("%s", message)
    return BuildWarning(
        category=category,
        message=message,
        entry=source.entry_name if source else None,
        path=source.relative_path if source else None,
    )


# ---------------------------------------------------------------------------
# Scripts
# ---------------------------------------------------------------------------


class ScriptTransform:
    """Optional transpile, then minify, for ``.js`` sources.

    Parameters
    ----------
    runner:
        Tool runner used for ``babel`` and ``terser``.
    compress:
        Run terser's compression pass. Identifiers are never mangled so
        globally exposed WordPress symbols keep their names.
    """

    def __init__(self, runner: ToolRunner, *, compress: bool = True) -> None:
        self._runner = runner
        self._compress = compress

    def transform(self, source_text: str, *, source: SourceFile | None = None) -> TransformResult:
        warnings: list[BuildWarning] = []
        found = frozenset(dependencies.extract(source_text))

        readable = source_text
        if needs_transpilation(source_text):
            readable = self._transpile(source_text, source, warnings)

        minified = self._minify(readable, source, warnings)
        return TransformResult(
            readable=readable,
            minified=minified,
            extension=".js",
            dependencies=found,
            warnings=warnings,
        )

    def _transpile(
        self, text: str, source: SourceFile | None, warnings: list[BuildWarning]
    ) -> str:
        label = source.relative_path if source else "<script>"
        if not self._runner.is_available(TRANSPILER):
            warnings.append(_warning(
                WarningCategory.TOOL_UNAVAILABLE,
                f"Babel not found, {label} left untranspiled",
                source,
            ))
            return text
        try:
            return self._runner.run(
                TRANSPILER, ["--presets=@babel/preset-env"], input_text=text
            )
        except (ToolUnavailableError, TransformError) as exc:
            warnings.append(_warning(
                exc.category, f"Transpiling {label} failed: {exc}", source
            ))
            return text

    def minifier_args(self) -> list[str]:
        args: list[str] = []
        if self._compress:
            args += ["--compress", _TERSER_COMPRESS]
        args += ["--format", "comments=false"]
        return args

    def _minify(
        self, text: str, source: SourceFile | None, warnings: list[BuildWarning]
    ) -> str:
        label = source.relative_path if source else "<script>"
        if not self._runner.is_available(SCRIPT_MINIFIER):
            warnings.append(_warning(
                WarningCategory.TOOL_UNAVAILABLE,
                f"Terser not found, using unminified content for {label}",
                source,
            ))
            return text
        try:
            output = self._runner.run(SCRIPT_MINIFIER, self.minifier_args(), input_text=text)
        except (ToolUnavailableError, TransformError) as exc:
            warnings.append(_warning(
                exc.category, f"JS minification of {label} failed: {exc}", source
            ))
            return text
        if not output.strip() and text.strip():
            warnings.append(_warning(
                WarningCategory.TRANSFORM_FAILURE,
                f"Terser produced no output for {label}, using unminified content",
                source,
            ))
            return text
        return output


# ---------------------------------------------------------------------------
# Styles
# ---------------------------------------------------------------------------


class StyleTransform:
    """Sass/SCSS compilation or plain CSS passthrough, then CSS minification."""

    def __init__(self, runner: ToolRunner) -> None:
        self._runner = runner

    def compile(self, source_path: Path) -> str:
        """Compile a Sass/SCSS file to expanded CSS without source maps.

        Raises ``ToolUnavailableError`` when no compiler is present and
        ``TransformError`` when the compiler rejects the file.
        """
        if not self._runner.is_available(SASS_COMPILER):
            raise ToolUnavailableError(
                SASS_COMPILER,
                "Sass not found. Install sass: npm install sass",
                path=str(source_path),
            )
        try:
            return self._runner.run(
                SASS_COMPILER,
                [str(source_path), "--style=expanded", "--no-source-map"],
            )
        except TransformError as exc:
            exc.path = str(source_path)
            raise

    @staticmethod
    def passthrough(source_text: str) -> str:
        return source_text

    def transform(self, source: SourceFile, kind: FileKind) -> TransformResult:
        if kind == FileKind.STYLE_SASS:
            css = self.compile(source.path)
        elif kind == FileKind.STYLE_CSS:
            css = self.passthrough(source.path.read_text(encoding="utf-8"))
        else:
            raise ValueError(f"StyleTransform cannot handle {kind.value} files")
        return TransformResult(readable=css, minified=minify_css(css), extension=".css")
