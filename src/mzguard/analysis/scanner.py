"""Read plugin files and load order from an RPG Maker MZ project."""

import json
import logging
import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Iterable, Optional

from mzguard.analysis.extractor import OverrideExtractor
from mzguard.schemas.plugins import PluginHeader, ScanError

logger = logging.getLogger(__name__)

PLUGINS_DIR = Path("js") / "plugins"
PLUGINS_JS = Path("js") / "plugins.js"

# var $plugins = [ ... ];
_PLUGINS_ARRAY = re.compile(r"\$plugins\s*=\s*(\[[\s\S]*?\]);")
# First /*: ... */ annotation block (also matches localized /*:ja blocks)
_ANNOTATION_BLOCK = re.compile(r"/\*:[\s\S]*?\*/")
_BASE = re.compile(r"@base\s+(\S+)")
_ORDER_AFTER = re.compile(r"@orderAfter\s+(\S+)")
_ORDER_BEFORE = re.compile(r"@orderBefore\s+(\S+)")
_PLUGINDESC = re.compile(r"@plugindesc[ \t]+([^\n]*)")

# Below this many files the thread pool costs more than it saves
PARALLEL_MIN_FILES = 10


def read_load_order(plugins_js: str, include_disabled: bool = False) -> list[str]:
    """
    Parse the ``$plugins`` array of ``js/plugins.js``.

    Args:
        plugins_js: Content of js/plugins.js
        include_disabled: If True, also return plugins whose status is off

    Returns:
        Plugin names in load order; empty if the array is missing or malformed
    """
    match = _PLUGINS_ARRAY.search(plugins_js)
    if not match:
        logger.warning("No $plugins array found in plugins.js")
        return []

    try:
        entries = json.loads(match.group(1))
    except json.JSONDecodeError as e:
        logger.warning(f"Cannot parse $plugins array: {e}")
        return []

    names: list[str] = []
    for entry in entries:
        if not isinstance(entry, dict) or not entry.get("name"):
            continue
        if include_disabled or entry.get("status"):
            names.append(str(entry["name"]))
    return names


def parse_annotations(source: str) -> dict:
    """
    Read dependency annotations from the first ``/*: ... */`` block.

    Returns:
        Dictionary with ``base``, ``order_after``, ``order_before`` and
        ``description``
    """
    block_match = _ANNOTATION_BLOCK.search(source)
    block = block_match.group(0) if block_match else ""
    desc_match = _PLUGINDESC.search(block)
    return {
        "base": _BASE.findall(block),
        "order_after": _ORDER_AFTER.findall(block),
        "order_before": _ORDER_BEFORE.findall(block),
        "description": desc_match.group(1).strip() if desc_match else "",
    }


class PluginScanner:
    """Builds plugin headers (identity, annotations, overrides) from plugin files."""

    def __init__(
        self,
        max_workers: Optional[int] = None,
        include_disabled: bool = False,
        skip_prefix: str = "_",
        extractor: Optional[OverrideExtractor] = None,
        on_file_done: Optional[Callable[[int, int], None]] = None,
    ):
        """
        Initialize plugin scanner.

        Args:
            max_workers: Maximum number of parallel workers (None for auto-detect)
            include_disabled: Analyze plugins that are switched off in plugins.js
            skip_prefix: Plugin files starting with this prefix are ignored
            extractor: Override extractor (default rules if None)
            on_file_done: Called with (files done, files total) after each file
        """
        self.max_workers = max_workers
        self.include_disabled = include_disabled
        self.skip_prefix = skip_prefix
        self.extractor = extractor or OverrideExtractor()
        self.on_file_done = on_file_done
        self.errors: list[ScanError] = []
        self.warnings: list[str] = []

    def _reset(self) -> None:
        self.errors = []
        self.warnings = []

    def _record_error(self, file_path: Path, error: Exception) -> None:
        self.errors.append(ScanError(file=file_path.name, error=str(error), type=type(error).__name__))
        logger.debug(f"Failed to read plugin {file_path}: {error}")

    def _file_done(self, done: int, total: int) -> None:
        if self.on_file_done is not None:
            self.on_file_done(done, total)

    def _process_files_parallel(
        self, files: list[Path], parser_func: Callable[[Path], PluginHeader]
    ) -> list[Optional[PluginHeader]]:
        """
        Parse files, in parallel for larger sets, keeping input order.

        Args:
            files: Plugin files in load order
            parser_func: Function turning one file into a PluginHeader

        Returns:
            One entry per file (None for files that failed)
        """
        if not files:
            return []

        if len(files) < PARALLEL_MIN_FILES:
            results: list[Optional[PluginHeader]] = []
            for file_path in files:
                try:
                    results.append(parser_func(file_path))
                except (OSError, UnicodeDecodeError) as e:
                    self._record_error(file_path, e)
                    results.append(None)
                self._file_done(len(results), len(files))
            return results

        results = [None] * len(files)
        done = 0
        num_workers = self.max_workers or min(4, len(files))

        with ThreadPoolExecutor(max_workers=num_workers) as executor:
            future_to_index = {
                executor.submit(parser_func, file_path): i for i, file_path in enumerate(files)
            }
            for future in as_completed(future_to_index):
                index = future_to_index[future]
                try:
                    results[index] = future.result()
                except (OSError, UnicodeDecodeError) as e:
                    self._record_error(files[index], e)
                    results[index] = None
                done += 1
                self._file_done(done, len(files))

        return results

    def parse_source(self, source: str, filename: str, name: Optional[str] = None) -> PluginHeader:
        """Build a header from source text already in memory."""
        annotations = parse_annotations(source)
        return PluginHeader(
            filename=filename,
            name=name or Path(filename).stem,
            overrides=self.extractor.extract(source),
            **annotations,
        )

    def _parse_plugin_file(self, file_path: Path) -> PluginHeader:
        source = file_path.read_text(encoding="utf-8")
        return self.parse_source(source, file_path.name)

    def _collect(self, files: list[Path]) -> list[PluginHeader]:
        headers = [h for h in self._process_files_parallel(files, self._parse_plugin_file) if h]
        logger.info(f"Read {len(headers)} plugins ({len(self.errors)} failed)")
        return headers

    def _warn(self, message: str) -> None:
        self.warnings.append(message)
        logger.warning(message)

    def _order_files(self, plugins_dir: Path, project_path: Path) -> list[Path]:
        candidates = {
            path.stem: path
            for path in sorted(plugins_dir.glob("*.js"))
            if not (self.skip_prefix and path.name.startswith(self.skip_prefix))
        }

        plugins_js = project_path / PLUGINS_JS
        if not plugins_js.is_file():
            logger.info("No js/plugins.js found; using alphabetical load order")
            return list(candidates.values())

        load_order = read_load_order(
            plugins_js.read_text(encoding="utf-8"), include_disabled=self.include_disabled
        )
        ordered: list[Path] = []
        for name in load_order:
            path = candidates.pop(name, None)
            if path is None:
                self._warn(f"Plugin '{name}' is in plugins.js but js/plugins/{name}.js was not found")
            else:
                ordered.append(path)

        for name in candidates:
            logger.debug(f"Skipping {name}.js: not enabled in plugins.js")
        return ordered

    def scan(self, project_path: str | Path) -> list[PluginHeader]:
        """
        Scan a project's js/plugins directory.

        Args:
            project_path: RPG Maker MZ project directory

        Returns:
            Plugin headers in load order

        Raises:
            ValueError: If the path does not exist or is not a directory
            PermissionError: If the plugins directory cannot be read
        """
        self._reset()
        project_path = Path(project_path).expanduser().resolve()

        if not project_path.exists():
            raise ValueError(f"Project path does not exist: {project_path}")
        if not project_path.is_dir():
            raise ValueError(f"Project path is not a directory: {project_path}")

        plugins_dir = project_path / PLUGINS_DIR
        if not plugins_dir.is_dir():
            self._warn(f"No plugin directory at {plugins_dir}")
            return []

        try:
            files = self._order_files(plugins_dir, project_path)
        except PermissionError as e:
            raise PermissionError(f"Cannot read plugin directory: {plugins_dir}") from e

        return self._collect(files)

    def scan_files(self, paths: Iterable[str | Path]) -> list[PluginHeader]:
        """Build headers for explicit plugin files, keeping the given order."""
        self._reset()
        return self._collect([Path(p).expanduser() for p in paths])

    def read_sources(self, corpus_path: str | Path) -> dict[str, str]:
        """
        Read every ``*.js`` below a directory (for popularity building).

        Returns:
            Relative path -> source; unreadable files are recorded as errors
        """
        self._reset()
        corpus_path = Path(corpus_path).expanduser().resolve()
        if not corpus_path.is_dir():
            raise ValueError(f"Corpus path is not a directory: {corpus_path}")

        sources: dict[str, str] = {}
        for file_path in sorted(corpus_path.rglob("*.js")):
            try:
                sources[file_path.relative_to(corpus_path).as_posix()] = file_path.read_text(
                    encoding="utf-8"
                )
            except (OSError, UnicodeDecodeError) as e:
                self._record_error(file_path, e)
        return sources
