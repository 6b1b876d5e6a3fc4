"""File classifier — routes a path to its transform by extension."""

from __future__ import annotations

import os

from bento.models.artifacts import FileKind

EXTENSION_KINDS: dict[str, FileKind] = {
    ".js": FileKind.SCRIPT,
    ".scss": FileKind.STYLE_SASS,
    ".sass": FileKind.STYLE_SASS,
    ".css": FileKind.STYLE_CSS,
}


def classify(path: str | os.PathLike[str]) -> FileKind:
    """Return the FileKind for *path* (case-insensitive extension match)."""
    _, ext = os.path.splitext(os.fspath(path))
    return EXTENSION_KINDS.get(ext.lower(), FileKind.UNSUPPORTED)


def is_processable(path: str | os.PathLike[str]) -> bool:
    return classify(path).is_processable
