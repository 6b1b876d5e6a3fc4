"""Build configuration file loading.

Supported sources, in lookup order when no explicit file is given:

* ``bento.toml``        — top-level keys are the BuildConfig fields
* ``bento.json``        — same shape, JSON
* ``pyproject.toml``    — the ``[tool.bento]`` table

Keys may use the original camelCase names (``autoInstallDeps``).
Relative paths are resolved against the file's directory.
"""

from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from bento.core.errors import ConfigurationError
from bento.models.config import BuildConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAMES: tuple[str, ...] = ("bento.toml", "bento.json", "pyproject.toml")


def find_config(directory: Path) -> Path | None:
    """Return the first config file present in *directory*, if any."""
    for name in DEFAULT_CONFIG_FILENAMES:
        candidate = Path(directory) / name
        if not candidate.is_file():
            continue
        if name == "pyproject.toml" and "bento" not in _read_toml(candidate).get("tool", {}):
            continue
        return candidate
    return None


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Invalid TOML in {path}: {exc}", path=str(path)) from exc
    except OSError as exc:
        raise ConfigurationError(f"Cannot read {path}: {exc}", path=str(path)) from exc


def read_config_data(path: Path) -> dict[str, Any]:
    """Return the raw configuration mapping stored in *path*."""
    if path.suffix == ".json":
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Invalid JSON in {path}: {exc}", path=str(path)) from exc
        except OSError as exc:
            raise ConfigurationError(f"Cannot read {path}: {exc}", path=str(path)) from exc
    elif path.suffix == ".toml":
        data = _read_toml(path)
        if path.name == "pyproject.toml":
            data = data.get("tool", {}).get("bento", {})
    else:
        raise ConfigurationError(
            f"Unsupported config format {path.suffix!r} (use .toml or .json)", path=str(path)
        )

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config in {path} must be a table/object", path=str(path))
    return data


def load_config(path: Path | None = None, *, search_dir: Path | None = None) -> BuildConfig:
    """Load and validate a BuildConfig.

    Parameters
    ----------
    path:
        Explicit config file. If it does not exist, a warning is logged
        and the defaults are used.
    search_dir:
        Directory searched for a default config file when *path* is not
        given. Defaults to the current directory.

    Raises
    ------
    ConfigurationError
        The file is unreadable, malformed, or fails validation.
    """
    base = Path(search_dir or Path.cwd())
    if path is None:
        path = find_config(base)
        if path is None:
            logger.warning("No config file found in %s, using defaults", base)
            logger.info('Run "bento init" to create a default config file')
            return BuildConfig().resolve_paths(base)
    elif not Path(path).is_file():
        logger.warning("Config file not found: %s, using defaults", path)
        logger.info('Run "bento init" to create a default config file')
        return BuildConfig().resolve_paths(Path(path).resolve().parent)

    path = Path(path)
    data = read_config_data(path)
    try:
        config = BuildConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration in {path}:\n{exc}", path=str(path)) from exc
    return config.resolve_paths(path.resolve().parent)


DEFAULT_CONFIG_TEMPLATE = '''\
# Bento - WordPress Plugin Bundler Configuration
#
# This file configures Bento for your WordPress plugin.

# Output directory where built files will be placed
output = "public"

# Clean output directory before build
clean = true

# Entry points - directories containing your source files
[entry]
admin = "scripts/admin"
frontend = "scripts/frontend"
shared = "scripts/shared"

# WordPress specific options
[wordpress]
# Plugin text domain (for translations)
textDomain = "{text_domain}"
# Generate WordPress-style handles for enqueuing
generateHandles = true
# WordPress coding standards compliance
wpCodingStandards = true

[advanced]
# Automatically detect and install npm dependencies
autoInstallDeps = true

# Transpile modern JS to older browsers
[advanced.transpile]
target = "es5"
browsers = ["> 1%", "last 2 versions", "ie >= 11"]

# CSS preprocessing options
[advanced.css]
autoprefixer = true
purgeUnused = false  # Remove unused CSS (be careful with WordPress)

# Bundle optimization
[advanced.optimization]
splitChunks = true  # Create separate chunks for shared code
treeshake = true    # Remove unused code
compress = true     # Additional compression
'''


def render_default_config(text_domain: str = "your-plugin-textdomain") -> str:
    """Return the commented ``bento.toml`` written by ``bento init``."""
    return DEFAULT_CONFIG_TEMPLATE.format(text_domain=text_domain)
