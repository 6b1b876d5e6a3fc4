"""Build orchestrator — the central coordinator for bento builds.

The Orchestrator wires the entry walker, the file classifier, the
transform adapters and the manifest store into full and incremental
build sessions, each driven through ``BuildStateMachine``.

Fatal conditions (cleaning, preparing, writing the manifest) raise
``BuildFailedError``. Everything else is per-file or per-entry: it is
logged, recorded on the session's ``BuildReport`` as a warning, and
processing moves on.
"""

from __future__ import annotations

import logging
import shutil
import threading
import uuid
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path

from bento.config import BentoSettings
from bento.core.classifier import classify
from bento.core.errors import (
    BuildFailedError,
    BuildIOError,
    DependencyInstallError,
    MissingEntryError,
    ToolUnavailableError,
    TransformError,
)
from bento.core.manifest import ManifestStore
from bento.core.state_machine import BuildStateMachine
from bento.core.tools import NodeToolRunner, ToolRunner
from bento.core.transforms import ScriptTransform, StyleTransform, TransformResult
from bento.core.walker import walk
from bento.models.artifacts import Artifact, Entry, FileKind, SourceFile
from bento.models.build import BuildKind, BuildReport, BuildState, WarningCategory
from bento.models.config import BuildConfig

logger = logging.getLogger(__name__)

# Created under the output root next to the per-entry directories.
SHARED_OUTPUT_DIRS: tuple[str, ...] = ("assets",)


class Orchestrator:
    """Runs full and incremental builds for one ``BuildConfig``.

    Parameters
    ----------
    config:
        Build configuration. Uses defaults if not provided.
    runner:
        Tool runner for babel/terser/sass and dependency installs.
        Defaults to a ``NodeToolRunner`` configured from *settings*.
    settings:
        Process-level settings (runner, timeouts, worker count).
    """

    def __init__(
        self,
        config: BuildConfig | None = None,
        *,
        runner: ToolRunner | None = None,
        settings: BentoSettings | None = None,
    ) -> None:
        self.config = config or BuildConfig()
        self.settings = settings or BentoSettings()
        self.runner: ToolRunner = runner or NodeToolRunner(
            self.settings.tool_runner,
            self.settings.package_manager,
            timeout=self.settings.tool_timeout_seconds,
        )

        self.manifest = ManifestStore()
        self.scripts = ScriptTransform(
            self.runner, compress=self.config.advanced.optimization.compress
        )
        self.styles = StyleTransform(self.runner)

        # Serializes writes into the output tree together with manifest records.
        self._write_lock = threading.Lock()
        self._manifest_loaded = False
        self.last_report: BuildReport | None = None

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    @property
    def output_root(self) -> Path:
        return self.config.output

    def output_dir(self, entry_name: str) -> Path:
        return self.config.output / entry_name

    # ------------------------------------------------------------------
    # Full build
    # ------------------------------------------------------------------

    def build(self) -> BuildReport:
        """Run a full build session.

        Lifecycle:
        1. CLEANING   — remove the output root (if ``clean``)
        2. PREPARING  — create the output layout
        3. PROCESSING — once per entry, in configuration order
        4. FINALIZING — write the manifest, install dependencies
        5. DONE

        Returns the session report. Raises ``BuildFailedError`` (with the
        report attached, in state FAILED) on a fatal condition.
        """
        report = self._new_report(BuildKind.FULL)
        machine = BuildStateMachine(report)
        logger.info("Bento bundler starting...")

        # A full build publishes only what it produces.
        self.manifest.reset()
        self._manifest_loaded = True

        with self._session(report, machine):
            if self.config.clean:
                machine.transition(BuildState.CLEANING)
                self.clean_output()

            machine.transition(BuildState.PREPARING)
            self.ensure_layout()

            for entry in self.config.entries():
                machine.transition(BuildState.PROCESSING, entry.name)
                self.process_entry(entry, report)

            machine.transition(BuildState.FINALIZING)
            self._write_manifest()
            if self.config.advanced.auto_install_deps:
                self.install_dependencies(report)

            machine.transition(BuildState.DONE)

        logger.info(
            "Build completed successfully! %d files, %d warnings",
            report.processed_count, len(report.warnings),
        )
        return report

    def clean_output(self) -> None:
        """Recursively remove the output root. Fatal on failure."""
        output = self.output_root
        if not output.exists() and not output.is_symlink():
            return
        try:
            if output.is_dir() and not output.is_symlink():
                shutil.rmtree(output)
            else:
                output.unlink()
        except OSError as exc:
            raise BuildFailedError(
                BuildState.CLEANING.value,
                f"could not remove output directory: {exc}",
                path=str(output),
            ) from exc
        logger.info("Cleaned output directory %s", output)

    def ensure_layout(self) -> None:
        """Create the output root, one directory per entry, and shared dirs."""
        names = [entry.name for entry in self.config.entries()] + list(SHARED_OUTPUT_DIRS)
        for name in names:
            path = self.output_root / name
            try:
                path.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise BuildFailedError(
                    BuildState.PREPARING.value,
                    f"could not create output directory: {exc}",
                    path=str(path),
                ) from exc

    def process_entry(self, entry: Entry, report: BuildReport) -> list[Artifact]:
        """Walk *entry* and process every discovered file.

        A missing entry directory is recorded as a warning and skipped.
        """
        logger.info("Processing %s entry: %s", entry.name, entry.source_dir)
        try:
            files = walk(entry.source_dir)
        except MissingEntryError as exc:
            logger.warning("%s", exc)
            report.add_warning(
                WarningCategory.MISSING_ENTRY, str(exc), entry=entry.name, path=exc.path
            )
            return []

        sources: list[SourceFile] = []
        for path in files:
            try:
                sources.append(SourceFile.from_entry(entry, path))
            except ValueError as exc:
                message = f"Skipping {path}: not inside entry {entry.name}: {exc}"
                logger.error("%s", message)
                report.add_warning(
                    WarningCategory.IO_FAILURE, message, entry=entry.name, path=str(path)
                )
                report.skipped.append(str(path))
        produced: list[Artifact] = []

        if self.settings.max_workers > 1 and len(sources) > 1:
            # Transforms run in parallel; writes and records stay on this thread.
            with ThreadPoolExecutor(
                max_workers=self.settings.max_workers,
                thread_name_prefix=f"bento-{entry.name}",
            ) as pool:
                futures = [pool.submit(self.transform_file, source) for source in sources]
                for source, future in zip(sources, futures):
                    artifact = self._complete(source, future.result, report)
                    if artifact is not None:
                        produced.append(artifact)
        else:
            for source in sources:
                artifact = self.process_file(source, report)
                if artifact is not None:
                    produced.append(artifact)
        return produced

    # ------------------------------------------------------------------
    # Per-file path (shared by full and incremental builds)
    # ------------------------------------------------------------------

    def transform_file(self, source: SourceFile) -> TransformResult:
        """Classify *source* and run the matching transform. No side effects."""
        kind = classify(source.path)
        if kind == FileKind.SCRIPT:
            text = source.path.read_text(encoding="utf-8")
            return self.scripts.transform(text, source=source)
        if kind in (FileKind.STYLE_SASS, FileKind.STYLE_CSS):
            return self.styles.transform(source, kind)
        raise ValueError(f"{source.relative_path} is not a processable file")

    def process_file(self, source: SourceFile, report: BuildReport) -> Artifact | None:
        """Transform, write both artifacts, and record *source* in the manifest.

        Returns the recorded artifact, or ``None`` if the file was skipped.
        """
        return self._complete(source, lambda: self.transform_file(source), report)

    def _complete(
        self,
        source: SourceFile,
        compute: Callable[[], TransformResult],
        report: BuildReport,
    ) -> Artifact | None:
        logger.info("  Processing: %s", source.relative_path)
        try:
            result = compute()
        except (ToolUnavailableError, TransformError) as exc:
            self._skip(source, report, exc.category, f"Skipping {source.relative_path}: {exc}")
            return None
        except UnicodeDecodeError as exc:
            self._skip(
                source, report, WarningCategory.TRANSFORM_FAILURE,
                f"Skipping {source.relative_path}: not valid UTF-8 ({exc.reason})",
            )
            return None
        except OSError as exc:
            self._skip(
                source, report, WarningCategory.IO_FAILURE,
                f"Skipping {source.relative_path}: could not read source: {exc}",
            )
            return None

        report.warnings.extend(result.warnings)
        report.dependencies.update(result.dependencies)

        try:
            artifact = self._publish(source, result)
        except BuildIOError as exc:
            self._skip(source, report, WarningCategory.IO_FAILURE, str(exc))
            return None

        report.artifacts[source.relative_path] = artifact
        return artifact

    def _publish(self, source: SourceFile, result: TransformResult) -> Artifact:
        """Write both outputs, then record the manifest entry."""
        artifact = Artifact.for_source(source, result.extension)
        out_dir = self.output_dir(source.entry_name)
        with self._write_lock:
            for name, text in (
                (artifact.unminified, result.readable),
                (artifact.minified, result.minified),
            ):
                target = out_dir / name
                try:
                    target.parent.mkdir(parents=True, exist_ok=True)
                    target.write_text(text, encoding="utf-8")
                except OSError as exc:
                    raise BuildIOError(
                        f"Could not write {target}: {exc}", path=str(target)
                    ) from exc
            self.manifest.record(source.relative_path, artifact, entry_name=source.entry_name)
        return artifact

    @staticmethod
    def _skip(
        source: SourceFile,
        report: BuildReport,
        category: WarningCategory | None,
        message: str,
    ) -> None:
        if category == WarningCategory.TOOL_UNAVAILABLE:
            logger.warning("%s", message)
        else:
            logger.error("%s", message)
        report.add_warning(
            category or WarningCategory.TRANSFORM_FAILURE,
            message,
            entry=source.entry_name,
            path=source.relative_path,
        )
        report.skipped.append(source.relative_path)

    # ------------------------------------------------------------------
    # Incremental rebuilds
    # ------------------------------------------------------------------

    def rebuild_file(self, path: Path, entry_name: str) -> BuildReport:
        """Rebuild one changed file and rewrite the whole manifest.

        Unsupported files are skipped without touching the manifest.
        """
        report = self._new_report(BuildKind.INCREMENTAL)
        machine = BuildStateMachine(report)
        source = self._source_for(path, entry_name)

        if not classify(source.path).is_processable:
            logger.debug("Skipping non-processable file: %s", path)
            report.skipped.append(source.relative_path)
            machine.transition(BuildState.PROCESSING, "skipped")
            machine.transition(BuildState.FINALIZING)
            machine.transition(BuildState.DONE)
            return report

        logger.info("Rebuilding %s (%s)", source.relative_path, entry_name)
        self._load_manifest_once()
        with self._session(report, machine):
            machine.transition(BuildState.PROCESSING, entry_name)
            self.process_file(source, report)
            machine.transition(BuildState.FINALIZING)
            self._write_manifest()
            machine.transition(BuildState.DONE)

        logger.info("Single file rebuild completed!")
        return report

    def remove_file(self, path: Path, entry_name: str) -> BuildReport:
        """Drop a deleted source file's manifest entry and artifacts."""
        report = self._new_report(BuildKind.INCREMENTAL)
        machine = BuildStateMachine(report)
        source = self._source_for(path, entry_name)

        self._load_manifest_once()
        with self._session(report, machine):
            machine.transition(BuildState.PROCESSING, entry_name)
            owner = self.manifest.owner(source.relative_path)
            artifact = None
            if owner in (None, entry_name):
                artifact = self.manifest.remove(source.relative_path)
            if artifact is not None:
                logger.info("Removed %s from manifest", source.relative_path)
                out_dir = self.output_dir(entry_name)
                with self._write_lock:
                    for name in (artifact.unminified, artifact.minified):
                        try:
                            (out_dir / name).unlink(missing_ok=True)
                        except OSError as exc:
                            report.add_warning(
                                WarningCategory.IO_FAILURE,
                                f"Could not remove {out_dir / name}: {exc}",
                                entry=entry_name,
                                path=source.relative_path,
                            )
            machine.transition(BuildState.FINALIZING)
            if artifact is not None:
                self._write_manifest()
            machine.transition(BuildState.DONE)
        return report

    def _source_for(self, path: Path, entry_name: str) -> SourceFile:
        entry = self.config.get_entry(entry_name)
        return SourceFile.from_entry(entry, Path(path))

    def _load_manifest_once(self) -> None:
        # Watch mode without a prior full build in this process.
        if not self._manifest_loaded:
            loaded = self.manifest.load(self.output_root)
            logger.debug("Loaded %d existing manifest entries", loaded)
            self._infer_owners()
            self._manifest_loaded = True

    def _infer_owners(self) -> None:
        """Attribute loaded manifest keys to the entry that wrote them.

        The manifest file stores no owner. A key belongs to the entry whose
        output directory holds its unminified artifact; when several do, the
        entry processed last in a full build wins, as it did when recording.
        """
        entries = self.config.entries()
        for key, artifact in self.manifest.snapshot().items():
            owners = [
                entry.name for entry in entries
                if (self.output_dir(entry.name) / artifact.unminified).is_file()
            ]
            if owners:
                self.manifest.record(key, artifact, entry_name=owners[-1])

    # ------------------------------------------------------------------
    # Finalizing
    # ------------------------------------------------------------------

    def _write_manifest(self) -> Path:
        try:
            return self.manifest.write(self.output_root)
        except OSError as exc:
            raise BuildFailedError(
                BuildState.FINALIZING.value,
                f"could not write manifest: {exc}",
                path=str(self.output_root),
            ) from exc

    def install_dependencies(self, report: BuildReport) -> None:
        """Install the session's external dependencies. Never fatal."""
        if not report.dependencies:
            return
        names = sorted(report.dependencies)
        logger.info("Installing dependencies: %s", ", ".join(names))
        try:
            self.runner.install(names)
        except DependencyInstallError as exc:
            logger.warning("Some dependencies could not be installed automatically: %s", exc)
            report.add_warning(WarningCategory.DEPENDENCY_INSTALL_FAILURE, str(exc))

    # ------------------------------------------------------------------
    # Session helpers
    # ------------------------------------------------------------------

    def _new_report(self, kind: BuildKind) -> BuildReport:
        ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
        report = BuildReport(session_id=f"bento-{ts}-{uuid.uuid4().hex[:4]}", kind=kind)
        self.last_report = report
        return report

    def _session(self, report: BuildReport, machine: BuildStateMachine) -> _Session:
        return _Session(report, machine)


class _Session:
    """Context manager that moves a session to FAILED on any escaping error.

    ``BuildFailedError`` gets the report attached; any other exception is
    wrapped in one, carrying the state the session was in.
    """

    def __init__(self, report: BuildReport, machine: BuildStateMachine) -> None:
        self._report = report
        self._machine = machine

    def __enter__(self) -> _Session:
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc is None:
            return False
        stage = self._machine.state.value
        self._machine.fail(str(exc))
        if isinstance(exc, BuildFailedError):
            exc.report = self._report
            logger.error("%s", exc)
            return False
        if isinstance(exc, Exception):
            logger.exception("Unexpected error during %s", stage)
            raise BuildFailedError(stage, str(exc), path=getattr(exc, "path", None), report=self._report) from exc
        return False
