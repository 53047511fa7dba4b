from abc import ABC, abstractmethod
from typing import TextIO

from depgraphml.core.model import DependencyNode


class DependencyNodeVisitor(ABC):
    """Callbacks invoked by DependencyNode.accept during a depth-first walk."""

    @abstractmethod
    def visit(self, node: DependencyNode) -> bool:
        """Called before the children of node. Returning False skips them."""
        pass

    @abstractmethod
    def end_visit(self, node: DependencyNode) -> bool:
        """Called after every child of node. Returning False stops the walk."""
        pass


class SerializingVisitor(DependencyNodeVisitor):
    """Base class for visitors that append the visited tree to a text stream."""

    def __init__(self, writer: TextIO) -> None:
        self.writer = writer
