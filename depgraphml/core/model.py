import re
from dataclasses import dataclass, field
from typing import List, Optional

# 1.0-20240101.123456-7 -> 1.0-SNAPSHOT
SNAPSHOT_TIMESTAMP = re.compile(r"^(.*)-(\d{8}\.\d{6})-(\d+)$")


def base_version_of(version: Optional[str]) -> str:
    """Folds a timestamped snapshot version back to its -SNAPSHOT form."""
    if not version:
        return ""
    match = SNAPSHOT_TIMESTAMP.match(version)
    if match:
        return f"{match.group(1)}-SNAPSHOT"
    return version


@dataclass
class Artifact:
    group_id: str
    artifact_id: str
    base_version: str
    classifier: Optional[str] = None
    type: Optional[str] = None

    # Scope of the edge towards the parent node
    scope: Optional[str] = None
    optional: bool = False

    @property
    def has_classifier(self) -> bool:
        return bool(self.classifier)

    @classmethod
    def from_version(cls, group_id: str, artifact_id: str, version: str, **kwargs) -> "Artifact":
        return cls(group_id, artifact_id, base_version_of(version), **kwargs)


@dataclass
class DependencyNode:
    artifact: Artifact
    parent: Optional['DependencyNode'] = field(default=None, repr=False, compare=False)
    children: List['DependencyNode'] = field(default_factory=list)

    @property
    def is_root(self) -> bool:
        """
        A node without parent is the root. A node pointing at itself is
        accepted too, older resolvers mark the root that way.
        """
        return self.parent is None or self.parent is self

    def add_child(self, child: 'DependencyNode') -> 'DependencyNode':
        child.parent = self
        self.children.append(child)
        return child

    def accept(self, visitor) -> bool:
        """Depth-first walk: visit on the way down, end_visit on the way up."""
        if visitor.visit(self):
            for child in self.children:
                if not child.accept(visitor):
                    break

        return visitor.end_visit(self)

    def count(self) -> int:
        return 1 + sum(child.count() for child in self.children)
