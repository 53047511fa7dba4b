import json
import logging
import re
import subprocess
import tempfile
from pathlib import Path
from typing import List, Optional

from depgraphml import config
from depgraphml.core.model import Artifact, DependencyNode
from depgraphml.managers.base import DependencyTreeError, PackageManager

# "[INFO] " prefixes when the tree was copied from the console
RE_LOG_PREFIX = re.compile(r'^\[[A-Z]+\]\s?')

# "|  +- g:a:jar:1.0:compile" -> ("|  +- ", "g:a:jar:1.0:compile")
RE_TREE_LINE = re.compile(r'^((?:[| ]  )*)(?:[+\\]- )?(\S.*)$')

# Root lines look like g:a:type:version or g:a:type:classifier:version
RE_ROOT_COORDS = re.compile(r'^[^\s:()]+(?::[^\s:]+){3,4}(?:\s|$)')


class MavenManager(PackageManager):
    @property
    def name(self) -> str:
        return "Maven"

    @property
    def lock_files(self) -> list[str]:
        return ["pom.xml"]

    def get_dependencies(self) -> DependencyNode:
        logging.debug(f"Running dependency:tree in {self.directory} ...")

        with tempfile.TemporaryDirectory() as tmp:
            output_file = Path(tmp) / "tree.txt"
            cmd = [
                config.get_mvn_executable(),
                "-q", "-B",
                "dependency:tree",
                "-DoutputType=text",
                f"-DoutputFile={output_file}",
            ]

            try:
                subprocess.check_output(
                    cmd,
                    cwd=self.directory,
                    text=True,
                    timeout=config.get_timeout(),
                    stderr=subprocess.PIPE
                )
                content = output_file.read_text(encoding="utf-8")
            except subprocess.CalledProcessError as e:
                logging.error(f"Maven Error: {e.stderr or e.output}")
                raise DependencyTreeError(f"mvn dependency:tree failed with exit code {e.returncode}") from e
            except (OSError, subprocess.TimeoutExpired) as e:
                logging.error(f"Maven Error: {e}")
                raise DependencyTreeError(f"Fail to read Maven dependencies: {e}") from e

        logging.debug(f"Tree obtained. Processing {len(content)} bytes...")
        return parse_tree_text(content)


def _parse_coordinates(text: str, is_root: bool) -> Artifact:
    """
    Maven prints groupId:artifactId:type[:classifier]:version[:scope],
    the root line has no scope.
    """
    optional = "(optional" in text

    # "(g:a:jar:1.0:compile - omitted for duplicate)" in verbose trees
    if text.startswith("("):
        text = text[1:].split(" - ", 1)[0].rstrip(")")

    coords = text.split()[0]
    parts = coords.split(":")

    classifier = None
    scope = None
    if len(parts) == 4:
        group_id, artifact_id, type_, version = parts
    elif is_root and len(parts) == 5:
        group_id, artifact_id, type_, classifier, version = parts
    elif len(parts) == 5:
        group_id, artifact_id, type_, version, scope = parts
    elif not is_root and len(parts) == 6:
        group_id, artifact_id, type_, classifier, version, scope = parts
    else:
        raise DependencyTreeError(f"Unrecognized artifact coordinates: {coords}")

    return Artifact.from_version(
        group_id, artifact_id, version,
        classifier=classifier or None,
        type=type_ or None,
        scope=scope or None,
        optional=optional,
    )


def parse_tree_text(content: str) -> DependencyNode:
    """Parses the text output of ``mvn dependency:tree``. Only the first tree is read."""
    stack: List[DependencyNode] = []
    root: Optional[DependencyNode] = None

    for raw in content.splitlines():
        line = RE_LOG_PREFIX.sub("", raw).rstrip()
        if not line.strip():
            continue

        match = RE_TREE_LINE.match(line)
        if not match:
            continue

        prefix, text = match.groups()
        is_child = line[len(prefix):].startswith(("+- ", "\\- "))
        depth = len(prefix) // 3 + 1 if is_child else 0

        if depth == 0:
            # Build log noise around the tree
            if not RE_ROOT_COORDS.match(text):
                continue
            if root is not None:
                logging.warning(f"Ignoring additional tree starting at: {text}")
                break
            root = DependencyNode(_parse_coordinates(text, is_root=True))
            stack = [root]
            continue

        if root is None or depth > len(stack):
            raise DependencyTreeError(f"Unexpected indentation in dependency tree: {raw!r}")

        parent = stack[depth - 1]
        node = parent.add_child(DependencyNode(_parse_coordinates(text, is_root=False)))
        stack = stack[:depth] + [node]

    if root is None:
        raise DependencyTreeError("No dependency tree found in Maven output.")

    logging.debug(f"Maven tree parsed. {root.count()} nodes.")
    return root


def _node_from_json(data: dict) -> DependencyNode:
    artifact = Artifact.from_version(
        data.get("groupId", ""),
        data.get("artifactId", ""),
        data.get("version", ""),
        classifier=data.get("classifier") or None,
        type=data.get("type") or None,
        scope=data.get("scope") or None,
        optional=str(data.get("optional", "false")).lower() == "true",
    )
    node = DependencyNode(artifact)
    for child in data.get("children") or []:
        if not isinstance(child, dict):
            raise DependencyTreeError(f"Dependency tree child must be an object, got: {child!r}")
        node.add_child(_node_from_json(child))
    return node


def parse_tree_json(content: str) -> DependencyNode:
    """Parses the JSON output of ``mvn dependency:tree -DoutputType=json``."""
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise DependencyTreeError(f"Invalid JSON dependency tree: {e}") from e

    if not isinstance(data, dict):
        raise DependencyTreeError("JSON dependency tree must be an object.")

    root = _node_from_json(data)
    # The root has no incoming edge
    root.artifact.scope = None
    return root
