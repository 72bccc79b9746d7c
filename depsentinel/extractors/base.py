"""Abstract base class for usage extraction strategies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path


class UsageExtractor(ABC):
    """
    Strategy that discovers which modules a source file references.
    Every strategy returns raw dotted module names for absolute imports;
    relative imports are project-internal and never reported.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Strategy identifier, e.g. 'light', 'heavy'."""
        ...

    @abstractmethod
    def extract(self, path: Path) -> set[str]:
        """
        Return the modules referenced by *path*.

        Raises:
            ExtractionError: the file could not be analyzed.
        """
        ...

    def check_prerequisites(self) -> list[str]:
        """
        Check prerequisites.
        Returns list of missing items (empty = can run).
        """
        return []
