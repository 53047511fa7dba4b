"""
Tests for the depgraphml command line.
"""

import xml.etree.ElementTree as ET
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from depgraphml.cli import app
from depgraphml.core.model import Artifact, DependencyNode

runner = CliRunner()

TREE_TEXT = r"""com.example:app:jar:1.0
+- junit:junit:jar:4.13.2:test
|  \- org.hamcrest:hamcrest-core:jar:1.3:test
\- org.slf4j:slf4j-api:jar:1.7.36:compile
"""


@pytest.fixture
def tree_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("DEPGRAPHML_OUTPUT", raising=False)
    path = tmp_path / "tree.txt"
    path.write_text(TREE_TEXT, encoding="utf-8")
    return path


def test_export_to_file(tree_file, tmp_path):
    output = tmp_path / "deps.graphml"

    result = runner.invoke(app, ["export", "--input", str(tree_file), "--output", str(output)])

    assert result.exit_code == 0
    content = output.read_text(encoding="utf-8")
    assert content.count("<node ") == 4
    assert content.count("<edge ") == 3
    assert (
        '<edge id="com.example:app:1.0:jar|test|junit:junit:4.13.2:jar" '
        'source="com.example:app:1.0:jar" target="junit:junit:4.13.2:jar">'
    ) in content
    ET.fromstring(content.encode("utf-8"))


def test_export_default_output(tree_file, tmp_path):
    result = runner.invoke(app, ["export", "-i", str(tree_file)])

    assert result.exit_code == 0
    assert (tmp_path / "dependencies.graphml").exists()


def test_export_to_stdout(tree_file):
    result = runner.invoke(app, ["export", "-i", str(tree_file), "-o", "-"])

    assert result.exit_code == 0
    assert "<graphml" in result.stdout
    assert result.stdout.rstrip().endswith("</graph></graphml>")


def test_export_missing_input(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(app, ["export", "-i", str(tmp_path / "missing.txt")])

    assert result.exit_code == 1


def test_export_without_project(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(app, ["export", "--project-dir", str(tmp_path)])

    assert result.exit_code == 1
    assert not (tmp_path / "dependencies.graphml").exists()


def test_export_uses_detected_manager(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "pom.xml").write_text("<project/>")
    root = DependencyNode(Artifact("g", "app", "1.0"))
    root.add_child(DependencyNode(Artifact("g", "lib", "2.0", scope="compile")))

    with patch("depgraphml.managers.maven.MavenManager.get_dependencies", return_value=root) as mock_get:
        result = runner.invoke(app, ["export", "-d", str(tmp_path), "-o", "out.graphml"])

    assert result.exit_code == 0
    mock_get.assert_called_once()
    assert '<edge id="g:app:1.0|compile|g:lib:2.0"' in (tmp_path / "out.graphml").read_text(encoding="utf-8")


def test_export_missing_project_dir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(app, ["export", "-d", str(tmp_path / "nope")])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "Error:" in result.output


def test_export_input_not_utf8(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "tree.txt"
    path.write_bytes("org.caf\xe9:app:jar:1.0\n".encode("latin-1"))

    result = runner.invoke(app, ["export", "-i", str(path)])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert not (tmp_path / "dependencies.graphml").exists()
