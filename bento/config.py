"""Process-level settings — env-driven.

Project build options live in ``BuildConfig`` (``bento.toml``). This
module holds knobs that belong to the machine running the build: which
Node package runner to launch tools with, timeouts, log level, worker
count. They are read from ``BENTO_*`` environment variables or a
``.env`` file.

Examples
--------
Use Bun instead of npm::

    export BENTO_TOOL_RUNNER=bunx
    export BENTO_PACKAGE_MANAGER=bun
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class BentoSettings(BaseSettings):
    """Runtime settings with environment variable overrides."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BENTO_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"

    # External tools
    tool_runner: str = "npx"
    package_manager: str = "npm"
    tool_timeout_seconds: float = 60.0

    # Transforms of one entry run on this many threads (1 = sequential)
    max_workers: int = 1

    # Watch mode
    watch_debounce_seconds: float = 0.1
    watch_queue_size: int = 1024

    config_file: Path = Path("bento.toml")
