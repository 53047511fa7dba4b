import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Union

from depgraphml.core.model import DependencyNode


class DependencyTreeError(Exception):
    """The build tool could not produce a dependency tree."""


class PackageManager(ABC):
    """Base class inherited by all build tool managers."""

    def __init__(self, directory: Union[str, Path] = ".") -> None:
        self.directory = Path(directory)

    @property
    @abstractmethod
    def name(self) -> str:
        """Friendly build tool name (e.g., Maven, Gradle)."""
        pass

    @property
    @abstractmethod
    def lock_files(self) -> List[str]:
        """Build files whose presence identifies the project."""
        pass

    def detect(self, files: List[str]) -> bool:
        """
        Returns True if this manager supports the given directory listing.
        Default implementation checks for exact match in lock_files.
        """
        for lock_file in self.lock_files:
            if lock_file in files:
                return True
        return False

    def list_files(self) -> List[str]:
        return os.listdir(self.directory)

    @abstractmethod
    def get_dependencies(self) -> DependencyNode:
        """Returns the root of the resolved dependency tree."""
        pass
