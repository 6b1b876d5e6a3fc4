"""Build session models — state machine states, warnings, and the report."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from bento.models.artifacts import Artifact


class BuildState(str, Enum):
    """States of a build session."""

    IDLE = "idle"
    CLEANING = "cleaning"
    PREPARING = "preparing"
    PROCESSING = "processing"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"


# Valid state transitions, enforced by BuildStateMachine.
# PROCESSING -> PROCESSING is the per-entry repetition.
# IDLE -> PROCESSING is the incremental (single-file) path.
VALID_TRANSITIONS: dict[BuildState, set[BuildState]] = {
    BuildState.IDLE: {
        BuildState.CLEANING,
        BuildState.PREPARING,
        BuildState.PROCESSING,
        BuildState.FAILED,
    },
    BuildState.CLEANING: {BuildState.PREPARING, BuildState.FAILED},
    BuildState.PREPARING: {
        BuildState.PROCESSING,
        BuildState.FINALIZING,
        BuildState.FAILED,
    },
    BuildState.PROCESSING: {
        BuildState.PROCESSING,
        BuildState.FINALIZING,
        BuildState.FAILED,
    },
    BuildState.FINALIZING: {BuildState.DONE, BuildState.FAILED},
    BuildState.DONE: set(),  # terminal
    BuildState.FAILED: set(),  # terminal
}


class BuildKind(str, Enum):
    FULL = "full"
    INCREMENTAL = "incremental"


class WarningCategory(str, Enum):
    """Recoverable conditions from the error taxonomy."""

    MISSING_ENTRY = "missing_entry"
    TOOL_UNAVAILABLE = "tool_unavailable"
    TRANSFORM_FAILURE = "transform_failure"
    IO_FAILURE = "io_failure"
    DEPENDENCY_INSTALL_FAILURE = "dependency_install_failure"


class BuildWarning(BaseModel):
    """A recoverable condition recorded during a session."""

    model_config = ConfigDict(frozen=True)

    category: WarningCategory
    message: str
    entry: str | None = None
    path: str | None = None


class StateTransition(BaseModel):
    """One recorded state machine transition."""

    model_config = ConfigDict(frozen=True)

    from_state: BuildState
    to_state: BuildState
    detail: str = ""
    at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class BuildReport(BaseModel):
    """Outcome of a full or incremental build session.

    The report is mutable while the session runs and is owned by the
    orchestrator. ``succeeded`` is independent of ``warnings``.
    """

    session_id: str
    kind: BuildKind = BuildKind.FULL
    state: BuildState = BuildState.IDLE
    transitions: list[StateTransition] = Field(default_factory=list)
    warnings: list[BuildWarning] = Field(default_factory=list)
    artifacts: dict[str, Artifact] = Field(default_factory=dict)
    dependencies: set[str] = Field(default_factory=set)
    skipped: list[str] = Field(default_factory=list)
    error: str | None = None
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime | None = None

    @property
    def succeeded(self) -> bool:
        return self.state == BuildState.DONE

    @property
    def processed_count(self) -> int:
        return len(self.artifacts)

    def add_warning(
        self,
        category: WarningCategory,
        message: str,
        *,
        entry: str | None = None,
        path: str | None = None,
    ) -> BuildWarning:
        warning = BuildWarning(category=category, message=message, entry=entry, path=path)
        self.warnings.append(warning)
        return warning

    def warnings_for(self, category: WarningCategory) -> list[BuildWarning]:
        return [w for w in self.warnings if w.category == category]
