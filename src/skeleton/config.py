"""Package testing harness configuration (testbench.yaml)."""

from pathlib import Path
from typing import Optional

import yaml
from loguru import logger
from pydantic import BaseModel, Field, ValidationError, field_validator

from config.constants import SKELETON_CONFIG_FILE
from core.exceptions import ConfigurationError


class PurgeAttributes(BaseModel):
    """Extra paths (relative to the skeleton, globs allowed) removed by a purge."""
    files: list[str] = Field(default_factory=list)
    directories: list[str] = Field(default_factory=list)

    @field_validator('files', 'directories', mode='before')
    @classmethod
    def accept_single_value(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v


class SkeletonConfig(BaseModel):
    """
    Harness settings read from testbench.yaml.

    Example:
        skeleton: ./workbench
        purge:
          files:
            - storage/logs/*.log
          directories:
            - lang/*
    """
    skeleton: Optional[str] = None
    purge: PurgeAttributes = Field(default_factory=PurgeAttributes)

    @field_validator('purge', mode='before')
    @classmethod
    def empty_purge(cls, v):
        return {} if v is None else v

    @classmethod
    def from_file(cls, path: Path) -> "SkeletonConfig":
        """
        Load the configuration; a missing file gives the defaults.

        Raises:
            ConfigurationError: If the file is not valid YAML or has invalid values
        """
        if not path.is_file():
            logger.debug(f"No {SKELETON_CONFIG_FILE} at {path}, using defaults")
            return cls()

        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}", {"error": str(e)}) from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"{path} must contain a mapping")

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration in {path}", {"errors": e.errors()}) from e

    def get_purge_attributes(self) -> PurgeAttributes:
        return self.purge

    def skeleton_path(self, base: Path) -> Optional[Path]:
        """Skeleton directory declared in the file, resolved against base."""
        if not self.skeleton:
            return None
        return (base / self.skeleton).resolve()
