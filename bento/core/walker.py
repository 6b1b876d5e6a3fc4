"""Entry walker — recursive discovery of processable files."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from bento.core.classifier import is_processable
from bento.core.errors import MissingEntryError

logger = logging.getLogger(__name__)


def walk(entry_dir: str | os.PathLike[str]) -> list[Path]:
    """Return absolute paths of every processable file under *entry_dir*.

    Directory entries are visited in sorted order so repeated walks of
    the same tree produce the same sequence.

    Raises
    ------
    MissingEntryError
        If *entry_dir* does not exist or is not a directory.
    """
    root = Path(entry_dir)
    if not root.is_dir():
        raise MissingEntryError(f"Entry path {root} does not exist", path=str(root))

    files: list[Path] = []
    for current, dirnames, filenames in os.walk(root.resolve()):
        dirnames.sort()
        for fname in sorted(filenames):
            full = Path(current) / fname
            if is_processable(full):
                files.append(full)
            else:
                logger.debug("Skipping unsupported file %s", full)
    return files
