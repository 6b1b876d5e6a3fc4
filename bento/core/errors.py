"""Error taxonomy for the build pipeline.

Fatal conditions (configuration, cleaning/preparing I/O) abort the session.
Recoverable conditions carry a ``category`` and are converted into
``BuildWarning`` entries by the orchestrator.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from bento.models.build import WarningCategory

if TYPE_CHECKING:
    from bento.models.build import BuildReport


class BentoError(RuntimeError):
    """Base class for all bento errors."""

    category: ClassVar[WarningCategory | None] = None

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class ConfigurationError(BentoError):
    """Malformed or unreadable configuration. Fatal before any build work."""


class MissingEntryError(BentoError):
    """An entry's source directory does not exist."""

    category = WarningCategory.MISSING_ENTRY


class ToolUnavailableError(BentoError):
    """An external tool (transpiler, minifier, Sass compiler) is not present."""

    category = WarningCategory.TOOL_UNAVAILABLE

    def __init__(self, tool: str, message: str | None = None, *, path: str | None = None) -> None:
        super().__init__(message or f"{tool} is not available", path=path)
        self.tool = tool


class TransformError(BentoError):
    """An external tool ran but reported an error, or timed out."""

    category = WarningCategory.TRANSFORM_FAILURE

    def __init__(
        self,
        tool: str,
        message: str,
        *,
        stderr: str = "",
        path: str | None = None,
    ) -> None:
        super().__init__(message, path=path)
        self.tool = tool
        self.stderr = stderr


class BuildIOError(BentoError):
    """A filesystem operation (clean, mkdir, write) failed."""

    category = WarningCategory.IO_FAILURE


class DependencyInstallError(BentoError):
    """The dependency installer failed."""

    category = WarningCategory.DEPENDENCY_INSTALL_FAILURE


class BuildFailedError(BentoError):
    """A fatal condition terminated the build session.

    Parameters
    ----------
    stage:
        The state the session was in when it failed (e.g. ``"cleaning"``).
    message:
        Human-readable description including the failing operation.
    path:
        Filesystem path involved, when there is one.
    report:
        The session report, already transitioned to ``FAILED``.
    """

    def __init__(
        self,
        stage: str,
        message: str,
        *,
        path: str | None = None,
        report: BuildReport | None = None,
    ) -> None:
        detail = f"{message} ({path})" if path else message
        super().__init__(f"Build failed during {stage}: {detail}", path=path)
        self.stage = stage
        self.report = report
