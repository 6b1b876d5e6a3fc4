"""Bento data models — Pydantic v2; configuration and artifacts are frozen."""

from bento.models.artifacts import Artifact, Entry, FileKind, SourceFile
from bento.models.build import (
    VALID_TRANSITIONS,
    BuildKind,
    BuildReport,
    BuildState,
    BuildWarning,
    StateTransition,
    WarningCategory,
)
from bento.models.config import (
    AdvancedOptions,
    BuildConfig,
    CssOptions,
    OptimizationOptions,
    TranspileOptions,
    WordPressOptions,
)

__all__ = [
    # artifacts
    "FileKind",
    "Entry",
    "SourceFile",
    "Artifact",
    # build
    "BuildState",
    "BuildKind",
    "VALID_TRANSITIONS",
    "WarningCategory",
    "BuildWarning",
    "StateTransition",
    "BuildReport",
    # config
    "BuildConfig",
    "WordPressOptions",
    "AdvancedOptions",
    "TranspileOptions",
    "CssOptions",
    "OptimizationOptions",
]
