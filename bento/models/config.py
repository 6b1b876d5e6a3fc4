"""Build configuration models.

``BuildConfig`` is constructed once per session (from ``bento.toml``, a
``[tool.bento]`` table, ``bento.json`` or plain keyword arguments) and is
never mutated during a build. Keys from the original camelCase config
format are accepted through aliases.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bento.models.artifacts import Entry


def _default_entries() -> dict[str, Path]:
    return {
        "admin": Path("scripts/admin"),
        "frontend": Path("scripts/frontend"),
        "shared": Path("scripts/shared"),
    }


class _Options(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class WordPressOptions(_Options):
    """WordPress-facing options. Recorded, not enforced."""

    text_domain: str = Field(default="default", alias="textDomain")
    generate_handles: bool = Field(default=True, alias="generateHandles")
    wp_coding_standards: bool = Field(default=True, alias="wpCodingStandards")


class TranspileOptions(_Options):
    target: str = "es5"
    browsers: list[str] = Field(
        default_factory=lambda: ["> 1%", "last 2 versions", "ie >= 11"]
    )


class CssOptions(_Options):
    autoprefixer: bool = True
    purge_unused: bool = Field(default=False, alias="purgeUnused")


class OptimizationOptions(_Options):
    """Optimization toggles.

    Only ``compress`` changes behaviour: when false the script minifier
    skips its compression pass and only strips comments and whitespace.
    """

    split_chunks: bool = Field(default=True, alias="splitChunks")
    treeshake: bool = True
    compress: bool = True


class AdvancedOptions(_Options):
    auto_install_deps: bool = Field(default=True, alias="autoInstallDeps")
    transpile: TranspileOptions = TranspileOptions()
    css: CssOptions = CssOptions()
    optimization: OptimizationOptions = OptimizationOptions()


class BuildConfig(_Options):
    """Immutable input for a build session.

    Parameters
    ----------
    entry:
        Entry name -> source directory. Declaration order is the
        processing order for full builds.
    output:
        Output root. Each entry gets a same-named subdirectory.
    clean:
        Remove the output root before building.
    """

    entry: dict[str, Path] = Field(default_factory=_default_entries)
    output: Path = Path("public")
    clean: bool = True
    wordpress: WordPressOptions = WordPressOptions()
    advanced: AdvancedOptions = AdvancedOptions()

    @field_validator("entry")
    @classmethod
    def _check_entry_names(cls, value: dict[str, Path]) -> dict[str, Path]:
        for name in value:
            if not name or name in (".", "..") or "/" in name or "\\" in name:
                raise ValueError(
                    f"Entry name {name!r} must be a single, non-empty path segment"
                )
        return value

    def entries(self) -> list[Entry]:
        """Return configured entries in declaration order."""
        return [Entry(name=name, source_dir=path) for name, path in self.entry.items()]

    def get_entry(self, name: str) -> Entry:
        """Return the entry called *name*; ``KeyError`` if not configured."""
        return Entry(name=name, source_dir=self.entry[name])

    def resolve_paths(self, base_dir: Path) -> BuildConfig:
        """Return a copy with relative entry/output paths anchored at *base_dir*."""
        base = Path(base_dir)

        def _anchor(path: Path) -> Path:
            return path if path.is_absolute() else base / path

        return self.model_copy(
            update={
                "entry": {name: _anchor(path) for name, path in self.entry.items()},
                "output": _anchor(self.output),
            }
        )
