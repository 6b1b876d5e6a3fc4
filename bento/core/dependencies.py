"""Best-effort textual scan for external module references.

Recognises ``import ... from "<name>"`` and ``require("<name>")`` with
single or double quotes. This is a heuristic, not a parser: it can match
inside comments or strings and misses dynamic ``import()`` and bare
``import "x"`` side-effect imports. Names starting with ``.`` or ``/``
are local paths and are dropped.
"""

from __future__ import annotations

import re

_REFERENCE_RE = re.compile(
    r"""import\s+[^;]*?\s+from\s+['"]([^'"]+)['"]"""
    r"""|require\s*\(\s*['"]([^'"]+)['"]\s*\)"""
)


def is_external(name: str) -> bool:
    return bool(name) and not name.startswith((".", "/"))


def extract(script_text: str) -> set[str]:
    """Return the set of external module names referenced by *script_text*."""
    names: set[str] = set()
    for match in _REFERENCE_RE.finditer(script_text):
        name = match.group(1) or match.group(2)
        if is_external(name):
            names.add(name)
    return names
