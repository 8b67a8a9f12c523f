"""Purge the skeleton folder back to its original state."""

from pathlib import Path
from typing import Optional

from loguru import logger

from config.constants import (
    EXIT_SUCCESS, SKELETON_CACHES, SKELETON_CONFIG_FILE, SKELETON_DATABASE,
    SKELETON_ENV_FILE, SKELETON_GENERATED_FILES,
)
from core.exceptions import PurgeError
from interaction.cli import ConsoleComponents
from skeleton.actions import DeleteDirectories, DeleteFiles, expand_patterns
from skeleton.config import SkeletonConfig


class PurgeSkeleton:
    """
    Restore a skeleton application directory.

    Order matters: caches are cleared first, then the environment and
    harness files, then generated artifacts, and finally the user
    configured files and directories (the only deletions reported on the
    console).
    """

    def __init__(
        self,
        working_path: Path,
        config: Optional[SkeletonConfig] = None,
        components: Optional[ConsoleComponents] = None
    ):
        self.working_path = Path(working_path)
        self.config = config or SkeletonConfig()
        self.components = components

    def handle(self) -> int:
        """
        Run the purge.

        Returns:
            Process exit code

        Raises:
            PurgeError: If the working path is not a directory
        """
        if not self.working_path.is_dir():
            raise PurgeError(f"Skeleton directory [{self.working_path}] does not exist.")

        logger.info(f"Purging skeleton at {self.working_path}")

        self.clear_caches()

        wp = self.working_path
        attributes = self.config.get_purge_attributes()

        DeleteFiles(wp).handle([
            wp / SKELETON_ENV_FILE,
            wp / SKELETON_CONFIG_FILE,
        ])

        DeleteFiles(wp).handle([
            wp / SKELETON_DATABASE,
            *expand_patterns(wp, SKELETON_GENERATED_FILES),
        ])

        DeleteFiles(wp, components=self.components).handle(
            expand_patterns(wp, attributes.files)
        )

        DeleteDirectories(wp, components=self.components).handle(
            expand_patterns(wp, attributes.directories)
        )

        return EXIT_SUCCESS

    def clear_caches(self):
        """Remove cached configuration, events, routes and compiled views."""
        for label, patterns in SKELETON_CACHES:
            DeleteFiles(self.working_path).handle(expand_patterns(self.working_path, patterns))
            if self.components:
                self.components.info(f"{label} cleared successfully.")
