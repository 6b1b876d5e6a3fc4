"""External tool runner backends.

The orchestrator never decides *how* a tool is launched. It is handed a
``ToolRunner`` at construction and asks it three things: is a tool
present, run it, install packages. ``NodeToolRunner`` is the
subprocess-backed default for Node package runners (``npx``/``bunx``);
tests pass a fake.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from bento.core.errors import DependencyInstallError, ToolUnavailableError, TransformError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class ToolRunner(Protocol):
    """Protocol for launching external build tools."""

    def is_available(self, tool: str) -> bool:
        """Return ``True`` if *tool* can be run."""
        ...

    def run(self, tool: str, args: Sequence[str], *, input_text: str | None = None) -> str:
        """Run *tool* with *args* and return its stdout.

        Raises
        ------
        ToolUnavailableError
            The tool (or the runner itself) cannot be launched.
        TransformError
            The tool exited non-zero or timed out.
        """
        ...

    def install(self, packages: Sequence[str]) -> None:
        """Install *packages*; raises ``DependencyInstallError`` on failure."""
        ...


# ---------------------------------------------------------------------------
# Subprocess implementation
# ---------------------------------------------------------------------------


class NodeToolRunner:
    """Runs Node tools through a package runner.

    Parameters
    ----------
    runner:
        Package runner executable, ``"npx"`` or ``"bunx"``.
    package_manager:
        Package manager used for dependency installation, ``"npm"`` or ``"bun"``.
    timeout:
        Seconds before a single tool invocation is abandoned.
    cwd:
        Working directory for tool invocations (the project root).
    """

    def __init__(
        self,
        runner: str = "npx",
        package_manager: str = "npm",
        *,
        timeout: float = 60.0,
        cwd: Path | None = None,
    ) -> None:
        self.runner = runner
        self.package_manager = package_manager
        self.timeout = timeout
        self.cwd = cwd
        self._availability: dict[str, bool] = {}

    def is_available(self, tool: str) -> bool:
        if tool not in self._availability:
            try:
                result = subprocess.run(
                    [self.runner, tool, "--version"],
                    capture_output=True,
                    stdin=subprocess.DEVNULL,
                    text=True,
                    encoding="utf-8",
                    errors="replace",
                    timeout=self.timeout,
                    cwd=self.cwd,
                )
                available = result.returncode == 0
            except (subprocess.SubprocessError, OSError):
                available = False
            self._availability[tool] = available
            logger.debug("Tool %s available via %s: %s", tool, self.runner, available)
        return self._availability[tool]

    def run(self, tool: str, args: Sequence[str], *, input_text: str | None = None) -> str:
        command = [self.runner, tool, *args]
        # Sources are read as UTF-8; talk to the tools in UTF-8 whatever the locale.
        try:
            result = subprocess.run(
                command,
                input=input_text,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                cwd=self.cwd,
            )
        except FileNotFoundError as exc:
            raise ToolUnavailableError(tool, f"{self.runner} not found on PATH") from exc
        except subprocess.TimeoutExpired as exc:
            raise TransformError(
                tool, f"{tool} timed out after {self.timeout:g}s"
            ) from exc
        except OSError as exc:
            raise ToolUnavailableError(tool, f"could not launch {tool}: {exc}") from exc
        except UnicodeError as exc:
            raise TransformError(tool, f"could not exchange text with {tool}: {exc}") from exc

        if result.returncode != 0:
            stderr = result.stderr.strip()
            raise TransformError(
                tool,
                f"{tool} exited with status {result.returncode}: {stderr or 'no output'}",
                stderr=stderr,
            )
        return result.stdout

    def install(self, packages: Sequence[str]) -> None:
        command = [self.package_manager, "install", *packages]
        try:
            subprocess.run(command, check=True, cwd=self.cwd)
        except (subprocess.SubprocessError, OSError) as exc:
            raise DependencyInstallError(
                f"{self.package_manager} install failed for {', '.join(packages)}: {exc}"
            ) from exc
