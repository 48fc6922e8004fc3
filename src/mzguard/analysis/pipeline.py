"""Analysis pipeline orchestrator."""

import time
from pathlib import Path
from typing import Iterable, Optional

from mzguard.analysis.dependency_analyzer import validate_dependencies
from mzguard.analysis.detector import ConflictDetector
from mzguard.analysis.popularity import PopularityIndex
from mzguard.analysis.scanner import PluginScanner
from mzguard.core.config import Config
from mzguard.core.logging import StructuredLogger, get_logger
from mzguard.core.progress import ProgressIndicator
from mzguard.schemas.plugins import PluginHeader, ProjectAnalysis

MODES = ("full", "conflicts", "dependencies")


def _check_mode(mode: str) -> None:
    if mode not in MODES:
        raise ValueError(f"Unknown analysis mode '{mode}' (expected one of {', '.join(MODES)})")


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


class AnalysisPipeline:
    """Scans plugins, validates dependencies and detects override conflicts."""

    def __init__(
        self,
        config: Optional[Config] = None,
        popularity: Optional[PopularityIndex] = None,
        verbose: bool = False,
        logger: Optional[StructuredLogger] = None,
    ):
        """
        Initialize analysis pipeline.

        Args:
            config: Configuration (defaults if None)
            popularity: Class popularity index; loaded from
                ``config.popularity_file`` when None and a file is configured
            verbose: Whether to show progress
            logger: Structured logger (package logger if None)
        """
        self.config = config or Config()
        self.verbose = verbose
        self.logger = logger or get_logger()

        if popularity is None and self.config.popularity_file:
            popularity = PopularityIndex.load(self.config.popularity_file)
        self.popularity = popularity or PopularityIndex()

        self.progress = ProgressIndicator(enabled=verbose)
        self.scanner = PluginScanner(
            max_workers=self.config.max_workers,
            include_disabled=self.config.include_disabled,
            skip_prefix=self.config.skip_prefix,
            on_file_done=self.progress.advance,
        )
        self.detector = ConflictDetector(
            popularity=self.popularity, threshold=self.config.warning_threshold
        )

    def analyze(self, project_path: str | Path, mode: str = "full") -> ProjectAnalysis:
        """
        Analyze an RPG Maker MZ project.

        Args:
            project_path: Project directory containing js/plugins
            mode: "full", "conflicts" or "dependencies"

        Returns:
            ProjectAnalysis with the requested reports

        Raises:
            ValueError: If the mode is unknown or the path is not a directory
            PermissionError: If the plugin directory cannot be read
        """
        _check_mode(mode)
        started = time.perf_counter()
        self.progress.start_stage("scan")
        self.logger.log_scan_stage("scan", "started", project=str(project_path))
        try:
            headers = self.scanner.scan(project_path)
        except (ValueError, PermissionError):
            self.logger.log_scan_stage("scan", "failed", project=str(project_path))
            self.progress.finish()
            raise
        self._scan_done(headers, started)

        return self._analyze_headers(str(Path(project_path).expanduser().resolve()), headers, mode)

    def analyze_files(self, paths: Iterable[str | Path], mode: str = "conflicts") -> ProjectAnalysis:
        """Analyze explicit plugin files; their order is the load order."""
        _check_mode(mode)
        paths = list(paths)
        started = time.perf_counter()
        self.progress.start_stage("scan")
        headers = self.scanner.scan_files(paths)
        self._scan_done(headers, started)

        project = str(Path(paths[0]).expanduser().resolve().parent) if paths else ""
        return self._analyze_headers(project, headers, mode)

    def _scan_done(self, headers: list[PluginHeader], started: float) -> None:
        self.logger.log_scan_stage(
            "scan",
            "completed",
            duration_ms=_elapsed_ms(started),
            plugin_count=len(headers),
            failed=len(self.scanner.errors),
        )
        self.logger.log_scan_errors(self.scanner.errors)
        self.progress.complete_stage(f"Read {len(headers)} plugins")

    def _analyze_headers(self, project_path: str, headers: list[PluginHeader], mode: str) -> ProjectAnalysis:
        dependencies = None
        if mode in ("full", "dependencies"):
            started = time.perf_counter()
            self.progress.start_stage("dependencies")
            dependencies = validate_dependencies(headers)
            self.logger.log_scan_stage(
                "dependencies",
                "completed",
                duration_ms=_elapsed_ms(started),
                issues=len(dependencies.issues),
                health=dependencies.health,
            )
            self.progress.complete_stage(f"{len(dependencies.issues)} dependency issues")

        conflicts = None
        if mode in ("full", "conflicts"):
            self.progress.start_stage("conflicts")
            conflicts = self.detector.detect(headers)
            self.logger.log_conflict_summary(
                plugin_count=len(headers),
                total_overrides=conflicts.total_overrides,
                conflicts=len(conflicts.conflicts),
                warnings=sum(1 for c in conflicts.conflicts if c.severity == "warning"),
            )
            self.progress.complete_stage(f"{len(conflicts.conflicts)} conflicts")

        for message in self.scanner.warnings:
            self.progress.note(message)
        for error in self.scanner.errors:
            self.progress.note(f"{error.file}: {error.error}", level="error")
        self.progress.finish()

        return ProjectAnalysis(
            project_path=project_path,
            plugins=headers,
            dependencies=dependencies,
            conflicts=conflicts,
            errors=list(self.scanner.errors),
            warnings=list(self.scanner.warnings),
        )
