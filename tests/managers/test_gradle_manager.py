import os
import subprocess
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from depgraphml.core.model import Artifact
from depgraphml.managers.base import DependencyTreeError
from depgraphml.managers.gradle import GradleManager, parse_dependencies_report

REPORT = r"""
------------------------------------------------------------
Root project 'demo'
------------------------------------------------------------

runtimeClasspath - Runtime classpath of source set 'main'.
+--- org.springframework.boot:spring-boot-starter-web -> 3.1.0
|    +--- org.springframework.boot:spring-boot-starter:3.1.0
|    |    \--- org.yaml:snakeyaml:1.33
|    \--- org.springframework:spring-web:6.0.9 (*)
+--- com.google.guava:guava:31.1-jre
+--- project :core
\--- org.apache.commons:commons-lang3:3.12.0 -> 3.13.0 (c)

(c) - A dependency constraint, not a dependency. The dependency affected by the constraint has been resolved.
(*) - Indicates repeated occurrences of a transitive dependency subtree.
"""


class TestGradleReportParsing(unittest.TestCase):

    def setUp(self):
        self.root_artifact = Artifact("demo", "demo", "unspecified")

    def test_parse_report(self):
        root = parse_dependencies_report(REPORT, self.root_artifact, "runtimeClasspath")

        self.assertIs(root.artifact, self.root_artifact)
        self.assertEqual(root.count(), 8)
        names = [c.artifact.artifact_id for c in root.children]
        self.assertEqual(names, ["spring-boot-starter-web", "guava", "core", "commons-lang3"])

        web = root.children[0]
        self.assertEqual(web.artifact.base_version, "3.1.0")
        self.assertEqual(web.artifact.scope, "runtimeClasspath")
        self.assertEqual(web.artifact.type, "jar")
        self.assertEqual(web.children[0].children[0].artifact.artifact_id, "snakeyaml")
        self.assertEqual(web.children[1].artifact.base_version, "6.0.9")

    def test_resolved_version_wins(self):
        root = parse_dependencies_report(REPORT, self.root_artifact)
        lang = root.children[3]

        self.assertEqual(lang.artifact.base_version, "3.13.0")
        self.assertIsNone(lang.artifact.scope)

    def test_project_dependency(self):
        core = parse_dependencies_report(REPORT, self.root_artifact).children[2]

        self.assertEqual(core.artifact.group_id, "demo")
        self.assertEqual(core.artifact.artifact_id, "core")
        self.assertEqual(core.artifact.base_version, "unspecified")

    def test_no_dependencies(self):
        root = parse_dependencies_report("runtimeClasspath\nNo dependencies\n", self.root_artifact)
        self.assertEqual(root.children, [])

    def test_bad_indentation(self):
        with self.assertRaises(DependencyTreeError):
            parse_dependencies_report("|    |    \\--- g:a:1.0\n", self.root_artifact)


class TestGradleManager(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.manager = GradleManager(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def test_detect(self):
        self.assertTrue(self.manager.detect(["build.gradle.kts", "settings.gradle.kts"]))
        self.assertFalse(self.manager.detect(["pom.xml"]))

    @patch.dict(os.environ, {"DEPGRAPHML_GRADLE_CONFIGURATION": "compileClasspath"})
    @patch("subprocess.check_output")
    def test_runs_dependencies_task(self, mock_subprocess):
        mock_subprocess.return_value = REPORT

        root = self.manager.get_dependencies()

        cmd = mock_subprocess.call_args[0][0]
        self.assertEqual(cmd[-3:], ["dependencies", "--configuration", "compileClasspath"])
        self.assertEqual(root.artifact.artifact_id, Path(self.tmp.name).resolve().name)
        self.assertEqual(root.children[0].artifact.scope, "compileClasspath")

    @patch("subprocess.check_output")
    def test_uses_wrapper_when_present(self, mock_subprocess):
        wrapper = Path(self.tmp.name) / "gradlew"
        wrapper.write_text("#!/bin/sh\n")
        mock_subprocess.return_value = ""

        with patch.dict(os.environ):
            os.environ.pop("DEPGRAPHML_GRADLE", None)
            self.manager.get_dependencies()

        self.assertEqual(mock_subprocess.call_args[0][0][0], str(wrapper.resolve()))

    @patch("subprocess.check_output")
    def test_timeout(self, mock_subprocess):
        mock_subprocess.side_effect = subprocess.TimeoutExpired(["gradle"], 300)

        with self.assertRaises(DependencyTreeError):
            self.manager.get_dependencies()
