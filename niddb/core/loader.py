"""Loader that feeds many database files into one NidDatabase."""

from __future__ import annotations

import fnmatch
import logging
from collections.abc import Callable, Iterable
from pathlib import Path

from niddb.core.database import NidDatabase
from niddb.core.exceptions import LoadError
from niddb.core.models import LoadStats
from niddb.formats import KNOWN_EXTENSIONS

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[Path, int, int], None]


class NidLoader:
    """Loads files and directories, collecting errors instead of stopping."""

    def __init__(self, db: NidDatabase) -> None:
        """Initialize with the database to populate."""
        self._db = db

    def load_paths(
        self,
        paths: Iterable[Path],
        exclude_patterns: list[str] | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> LoadStats:
        """Load every given file, and every database file under given directories.

        Files are loaded in order, so later files take precedence in the
        scoped scan. A file that fails to load is recorded in
        ``LoadStats.errors``; libraries it linked before failing stay loaded.

        Args:
            paths: Files and/or directories to load
            exclude_patterns: Glob patterns matched against path components
                of files found under directories (e.g., "old_*")
            on_progress: Optional callback for progress updates (file, current, total)

        Returns:
            LoadStats with counts of files/libraries/symbols processed
        """
        stats = LoadStats()
        files: list[Path] = []
        for path in paths:
            path = Path(path)
            if path.is_dir():
                found, skipped = self._discover(path, exclude_patterns or [])
                files.extend(found)
                stats.skipped += skipped
            else:
                files.append(path)

        total_files = len(files)
        for i, file in enumerate(files):
            libraries_before = len(self._db.libraries)
            symbols_before = self._db.libraries.symbol_count()
            try:
                self._db.load_file(file)
                stats.files += 1
            except LoadError as e:
                logger.debug("Failed to load %s: %s", file, e)
                stats.errors.append(f"{file}: {e}")

            stats.libraries += len(self._db.libraries) - libraries_before
            stats.symbols += self._db.libraries.symbol_count() - symbols_before

            if on_progress:
                on_progress(file, i + 1, total_files)

        return stats

    def _discover(self, directory: Path, patterns: list[str]) -> tuple[list[Path], int]:
        """Find database files under a directory, sorted by path."""
        found = []
        skipped = 0
        for file in sorted(directory.rglob("*")):
            if not file.is_file() or file.suffix.lower() not in KNOWN_EXTENSIONS:
                continue
            if self._should_exclude(str(file.relative_to(directory)), patterns):
                skipped += 1
                continue
            found.append(file)
        return found, skipped

    def _should_exclude(self, path: str, patterns: list[str]) -> bool:
        """Check if a path matches any exclusion pattern.

        Excludes:
        - Any path component starting with '.' (hidden files/directories)
        - Any path component matching the exclusion patterns
        """
        for part in Path(path).parts:
            if part.startswith("."):
                return True
            for pattern in patterns:
                if fnmatch.fnmatch(part, pattern):
                    return True
        return False


def get_default_nid_dir(project_root: Path) -> Path:
    """Get the default directory searched for NID databases."""
    return project_root / ".niddb"
