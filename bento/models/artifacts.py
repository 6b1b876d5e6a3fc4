"""Source file and artifact models."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict


class FileKind(str, Enum):
    """Transform routing decided by the file classifier."""

    SCRIPT = "script"
    STYLE_SASS = "style_sass"
    STYLE_CSS = "style_css"
    UNSUPPORTED = "unsupported"

    @property
    def is_processable(self) -> bool:
        return self is not FileKind.UNSUPPORTED


class Entry(BaseModel):
    """A named source directory; one output subdirectory per entry."""

    model_config = ConfigDict(frozen=True)

    name: str
    source_dir: Path


class SourceFile(BaseModel):
    """A discovered (or notified) source file. Never persisted."""

    model_config = ConfigDict(frozen=True)

    path: Path
    entry_name: str
    relative_path: str  # POSIX form, relative to the entry's source dir

    @classmethod
    def from_entry(cls, entry: Entry, path: Path) -> SourceFile:
        """Build a SourceFile for *path* inside *entry*.

        Only the containing directory is resolved; a symlinked file keeps
        its own name and location. Raises ``ValueError`` if *path* is not
        under the entry directory.
        """
        path = Path(path)
        absolute = path.absolute().parent.resolve() / path.name
        relative = absolute.relative_to(Path(entry.source_dir).resolve())
        return cls(path=absolute, entry_name=entry.name, relative_path=relative.as_posix())

    @property
    def base_name(self) -> str:
        """Relative path without its extension."""
        suffix = Path(self.relative_path).suffix
        return self.relative_path[: -len(suffix)] if suffix else self.relative_path


class Artifact(BaseModel):
    """The readable + minified output pair for one source file.

    Both names are relative to the entry's output subdirectory. The
    serialized form is the manifest value shape.
    """

    model_config = ConfigDict(frozen=True)

    unminified: str
    minified: str

    @classmethod
    def for_source(cls, source: SourceFile, extension: str) -> Artifact:
        """Name the artifact pair for *source* with output *extension* (e.g. ``.css``)."""
        return cls(
            unminified=f"{source.base_name}{extension}",
            minified=f"{source.base_name}.min{extension}",
        )
