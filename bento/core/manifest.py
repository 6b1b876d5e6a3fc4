"""Manifest store — source-relative path -> artifact pair.

The store is the one piece of mutable state shared between the full
build and watch-mode rebuilds. All operations take the same lock. The
persisted file is always rewritten in full.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

from pydantic import ValidationError

from bento.models.artifacts import Artifact

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "manifest.json"


class ManifestStore:
    """In-memory manifest with JSON persistence.

    Keys are entry-relative POSIX paths. Entries from different build
    entries that share a relative path overwrite each other; the last
    write wins.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Artifact] = {}
        self._owners: dict[str, str] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def record(self, relative_path: str, artifact: Artifact, *, entry_name: str | None = None) -> None:
        """Insert or overwrite the entry for *relative_path*."""
        with self._lock:
            self._entries[relative_path] = artifact
            if entry_name is not None:
                self._owners[relative_path] = entry_name

    def remove(self, relative_path: str) -> Artifact | None:
        """Drop the entry for *relative_path*, returning it if present."""
        with self._lock:
            self._owners.pop(relative_path, None)
            return self._entries.pop(relative_path, None)

    def reset(self) -> None:
        with self._lock:
            self._entries.clear()
            self._owners.clear()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, relative_path: str) -> Artifact | None:
        with self._lock:
            return self._entries.get(relative_path)

    def owner(self, relative_path: str) -> str | None:
        """Entry name that last recorded *relative_path*, if known."""
        with self._lock:
            return self._owners.get(relative_path)

    def snapshot(self) -> dict[str, Artifact]:
        with self._lock:
            return dict(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, relative_path: object) -> bool:
        with self._lock:
            return relative_path in self._entries

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def serialize(self) -> str:
        """Return the manifest as JSON text with sorted keys."""
        with self._lock:
            data = {key: artifact.model_dump() for key, artifact in self._entries.items()}
        return json.dumps(data, indent=2, sort_keys=True) + "\n"

    def write(self, output_root: Path) -> Path:
        """Write ``manifest.json`` under *output_root*, replacing any existing file."""
        path = Path(output_root) / MANIFEST_FILENAME
        text = self.serialize()
        with self._lock:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        logger.info("Generated manifest: %s", path)
        return path

    def load(self, output_root: Path) -> int:
        """Seed the store from an existing manifest file.

        Returns the number of entries loaded. A missing file loads
        nothing; an unreadable or malformed file is logged and ignored.
        """
        path = Path(output_root) / MANIFEST_FILENAME
        if not path.is_file():
            return 0
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            loaded = {key: Artifact.model_validate(value) for key, value in raw.items()}
        except (OSError, ValueError, AttributeError, ValidationError) as exc:
            logger.warning("Ignoring unreadable manifest %s: %s", path, exc)
            return 0
        with self._lock:
            self._entries.update(loaded)
        return len(loaded)
