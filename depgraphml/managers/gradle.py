import logging
import re
import subprocess
from typing import List, Optional

from depgraphml import config
from depgraphml.core.model import Artifact, DependencyNode
from depgraphml.managers.base import DependencyTreeError, PackageManager

# "|    +--- g:a:1.0 -> 1.2 (*)" -> ("|    ", "g:a:1.0 -> 1.2 (*)")
RE_TREE_LINE = re.compile(r'^((?:[| ]    )*)[+\\]--- (.+)$')

# (*) omitted, (c) constraint, (n) not resolved
RE_MARKERS = re.compile(r'\s+(\([*cn]\)|FAILED)$')

UNSPECIFIED = "unspecified"


class GradleManager(PackageManager):
    @property
    def name(self) -> str:
        return "Gradle"

    @property
    def lock_files(self) -> list[str]:
        return ["build.gradle", "build.gradle.kts"]

    def root_artifact(self) -> Artifact:
        project = self.directory.resolve().name
        return Artifact(project, project, UNSPECIFIED)

    def get_dependencies(self) -> DependencyNode:
        configuration = config.get_gradle_configuration()
        logging.debug(f"Reading Gradle {configuration} report in {self.directory} ...")

        try:
            report = subprocess.check_output(
                [
                    config.get_gradle_executable(self.directory),
                    "-q",
                    "dependencies",
                    "--configuration", configuration,
                ],
                cwd=self.directory,
                text=True,
                timeout=config.get_timeout(),
                stderr=subprocess.PIPE
            )
        except subprocess.CalledProcessError as e:
            logging.error(f"Gradle Error: {e.stderr or e.output}")
            raise DependencyTreeError(f"gradle dependencies failed with exit code {e.returncode}") from e
        except (OSError, subprocess.TimeoutExpired) as e:
            logging.error(f"Gradle Error: {e}")
            raise DependencyTreeError(f"Fail to read Gradle dependencies: {e}") from e

        logging.debug(f"Report obtained. Processing {len(report)} bytes...")
        return parse_dependencies_report(report, self.root_artifact(), configuration)


def _parse_dependency(text: str, root: Artifact, configuration: Optional[str]) -> Artifact:
    text = RE_MARKERS.sub("", text.strip())

    if text.startswith("project "):
        path = text[len("project "):].strip()
        name = path.rsplit(":", 1)[-1] or path
        return Artifact(root.group_id, name, UNSPECIFIED, type="jar", scope=configuration)

    # "g:a:1.0 -> 1.2" and "g:a -> 1.2" carry the resolved version after the arrow
    resolved = None
    if " -> " in text:
        text, resolved = [part.strip() for part in text.split(" -> ", 1)]

    parts = text.split(":")
    if len(parts) < 2:
        raise DependencyTreeError(f"Unrecognized dependency notation: {text}")

    group_id, artifact_id = parts[0], parts[1]
    version = resolved or (parts[2] if len(parts) > 2 else "")
    classifier = parts[3] if len(parts) > 3 else None

    return Artifact.from_version(
        group_id, artifact_id, version,
        classifier=classifier,
        type="jar",
        scope=configuration,
    )


def parse_dependencies_report(report: str, root_artifact: Artifact,
                              configuration: Optional[str] = None) -> DependencyNode:
    """
    Parses a ``gradle dependencies`` report for a single configuration. Gradle
    prints the project's dependencies without the project itself, so the root
    is supplied by the caller.
    """
    root = DependencyNode(root_artifact)
    stack: List[DependencyNode] = [root]

    for line in report.splitlines():
        match = RE_TREE_LINE.match(line.rstrip())
        if not match:
            continue

        prefix, text = match.groups()
        depth = len(prefix) // 5 + 1
        if depth > len(stack):
            raise DependencyTreeError(f"Unexpected indentation in dependency report: {line!r}")

        parent = stack[depth - 1]
        node = parent.add_child(DependencyNode(_parse_dependency(text, root_artifact, configuration)))
        stack = stack[:depth] + [node]

    logging.debug(f"Gradle tree parsed. {root.count()} nodes.")
    return root
