"""Skeleton maintenance for the package testing harness."""

from skeleton.actions import DeleteDirectories, DeleteFiles, expand_patterns
from skeleton.config import PurgeAttributes, SkeletonConfig
from skeleton.purge import PurgeSkeleton

__all__ = [
    "DeleteDirectories",
    "DeleteFiles",
    "expand_patterns",
    "PurgeAttributes",
    "SkeletonConfig",
    "PurgeSkeleton",
]
