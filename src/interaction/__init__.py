"""Console interaction helpers."""

from interaction.cli import ConsoleComponents, Colors

__all__ = ["ConsoleComponents", "Colors"]
