import logging
import os
import re
from pathlib import Path
from typing import Optional, Union

from depgraphml.core.model import Artifact, DependencyNode
from .base import DependencyTreeError, PackageManager
from .gradle import UNSPECIFIED, GradleManager, parse_dependencies_report
from .maven import MavenManager, parse_tree_json, parse_tree_text

MANAGERS = [
    MavenManager,
    GradleManager,
]

RE_GRADLE_LINE = re.compile(r'^[| ]*[+\\]--- ', re.MULTILINE)


def detect_manager(directory: Union[str, Path] = ".") -> Optional[PackageManager]:
    """Checks files in the directory and returns the correct manager."""
    try:
        files = os.listdir(directory)
    except OSError as e:
        logging.error(f"Error listing {directory}: {e}")
        raise DependencyTreeError(f"Cannot read project directory {directory}: {e}") from e

    for manager_cls in MANAGERS:
        manager = manager_cls(directory)
        if manager.detect(files):
            return manager

    return None


def load_tree_file(path: Union[str, Path]) -> DependencyNode:
    """Reads a dependency tree previously saved by Maven or Gradle."""
    path = Path(path)
    logging.debug(f"Loading dependency tree from {path} ...")

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logging.error(f"Error reading {path}: {e}")
        raise DependencyTreeError(f"Cannot read {path}: {e}") from e

    if path.suffix.lower() == ".json":
        return parse_tree_json(content)

    if RE_GRADLE_LINE.search(content):
        return parse_dependencies_report(content, Artifact(path.stem, path.stem, UNSPECIFIED))

    return parse_tree_text(content)


__all__ = [
    "DependencyTreeError",
    "GradleManager",
    "MANAGERS",
    "MavenManager",
    "PackageManager",
    "detect_manager",
    "load_tree_file",
]
