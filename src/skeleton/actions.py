"""
Filesystem actions used to restore the skeleton.

Deleting something that is already gone is never an error: it is reported
as skipped and the action moves on.
"""

import os
import shutil
from pathlib import Path, PurePath
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from loguru import logger

from config.constants import SKELETON_KEEP_FILES
from interaction.cli import ConsoleComponents

PathLike = Union[str, Path]


def _inside(path: Path, working_path: Path) -> bool:
    # normpath, not resolve(): symlinks inside the skeleton stay where they are
    try:
        Path(os.path.normpath(path)).relative_to(os.path.normpath(working_path))
    except ValueError:
        return False
    return True


def _hidden_match(match: Path, working_path: Path, pattern_parts: Tuple[str, ...]) -> bool:
    """Wildcards do not match dotfiles, like the shell glob."""
    parts = match.relative_to(working_path).parts
    if "**" in pattern_parts or len(parts) != len(pattern_parts):
        dotted = any(p.startswith(".") for p in pattern_parts)
        return not dotted and any(p.startswith(".") for p in parts)
    return any(
        part.startswith(".") and "*" in segment and not segment.startswith(".")
        for part, segment in zip(parts, pattern_parts)
    )


def expand_patterns(working_path: Path, patterns: Iterable[str]) -> List[Path]:
    """
    Resolve relative paths and glob patterns against the working path.

    Patterns containing "*" are expanded once; whatever does not match is
    dropped. Plain paths are kept whether they exist or not. Leading
    separators are ignored and nothing outside the working path is returned.
    """
    resolved: List[Path] = []
    for pattern in patterns:
        pattern = pattern.lstrip("/\\")
        if not pattern:
            continue

        if "*" in pattern:
            parts = PurePath(pattern).parts
            candidates = [
                match for match in sorted(working_path.glob(pattern))
                if not _hidden_match(match, working_path, parts)
            ]
        else:
            candidates = [working_path / pattern]

        for path in candidates:
            if _inside(path, working_path):
                resolved.append(path)
            else:
                logger.warning(f"Ignoring purge path outside the skeleton: {pattern}")
    return resolved


def display_path(path: Path, working_path: Path) -> str:
    """Path relative to the working path when inside it."""
    try:
        return path.relative_to(working_path).as_posix()
    except ValueError:
        return str(path)


class _DeleteAction:
    """Shared plumbing of the delete actions."""

    kind = "Path"

    def __init__(self, working_path: PathLike, components: Optional[ConsoleComponents] = None):
        self.working_path = Path(working_path)
        self.components = components

    def _deleted(self, path: Path):
        label = display_path(path, self.working_path)
        logger.info(f"{self.kind} [{label}] has been deleted")
        if self.components:
            self.components.task(f"{self.kind} [{label}] has been deleted")

    def _missing(self, path: Path):
        label = display_path(path, self.working_path)
        logger.debug(f"{self.kind} [{label}] doesn't exist, skipped")
        if self.components:
            self.components.skipped(f"{self.kind} [{label}] doesn't exists")

    @staticmethod
    def _paths(paths: Iterable[PathLike]) -> Iterator[Path]:
        for path in paths:
            yield Path(path)


class DeleteFiles(_DeleteAction):
    """Delete files, leaving .gitkeep / .gitignore placeholders alone."""

    kind = "File"

    def handle(self, files: Iterable[PathLike]) -> int:
        """
        Delete the given files.

        Returns:
            Number of files deleted
        """
        deleted = 0
        for path in self._paths(files):
            if path.name in SKELETON_KEEP_FILES:
                continue

            if path.is_dir() and not path.is_symlink():
                logger.debug(f"Skipping directory {path} in file list")
                continue

            try:
                path.unlink()
            except FileNotFoundError:
                self._missing(path)
                continue

            deleted += 1
            self._deleted(path)
        return deleted


class DeleteDirectories(_DeleteAction):
    """Recursively delete directories."""

    kind = "Directory"

    def handle(self, directories: Iterable[PathLike]) -> int:
        """
        Delete the given directories and everything below them.

        Returns:
            Number of directories deleted
        """
        deleted = 0
        for path in self._paths(directories):
            if not path.is_dir():
                self._missing(path)
                continue

            try:
                if path.is_symlink():
                    path.unlink()
                else:
                    shutil.rmtree(path)
            except FileNotFoundError:
                self._missing(path)
                continue

            deleted += 1
            self._deleted(path)
        return deleted
