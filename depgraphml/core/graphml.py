"""
GraphML serialization of dependency trees.

The output targets yEd: besides the plain string attributes, nodes carry a
``y:ShapeNode`` label (key ``d0``) and edges a ``y:PolyLineEdge`` label
(key ``d1``). See http://graphml.graphdrawing.org/ for the format itself.
"""
import logging
from pathlib import Path
from typing import Optional, TextIO, Union
from xml.sax.saxutils import escape

from depgraphml.core.model import DependencyNode
from depgraphml.core.visitor import SerializingVisitor

GRAPHML_HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?> '
    '<graphml xmlns="http://graphml.graphdrawing.org/xmlns" '
    'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" '
    'xmlns:y="http://www.yworks.com/xml/graphml" '
    'xsi:schemaLocation="http://graphml.graphdrawing.org/xmlns '
    'http://graphml.graphdrawing.org/xmlns/1.0/graphml.xsd">\n'
    '  <key for="node" id="d0" yfiles.type="nodegraphics"/> \n'
    '  <key for="edge" id="d1" yfiles.type="edgegraphics"/> \n'
    '  <key for="node" id="_name" attr.name="_name" attr.type="string"/> \n'
    '  <key for="edge" id="_label" attr.name="_label" attr.type="string"/> \n'
    '  <key for="node" id="groupId" attr.name="groupId" attr.type="string"/> \n'
    '  <key for="node" id="artifactId" attr.name="artifactId" attr.type="string"/> \n'
    '  <key for="node" id="version" attr.name="version" attr.type="string"/> \n'
    '  <key for="node" id="classifier" attr.name="classifier" attr.type="string"/> \n'
    '  <key for="node" id="type" attr.name="type" attr.type="string"/> \n'
    '<graph id="dependencies" edgedefault="directed">\n'
)

GRAPHML_FOOTER = "</graph></graphml>"


def _xml(value: Optional[str]) -> str:
    # Also safe inside double-quoted attributes
    return escape(value or "", {'"': "&quot;"})


def node_id(node: DependencyNode) -> str:
    """Coordinates of the node: groupId:artifactId:baseVersion[:classifier][:type]."""
    artifact = node.artifact
    parts = [artifact.group_id or "", artifact.artifact_id or "", artifact.base_version or ""]

    if artifact.has_classifier:
        parts.append(artifact.classifier)
    if artifact.type:
        parts.append(artifact.type)

    return ":".join(parts)


def edge_id(parent: DependencyNode, child: DependencyNode) -> str:
    scope = child.artifact.scope
    if scope is None:
        scope = "null"
    return f"{node_id(parent)}|{scope}|{node_id(child)}"


def node_label(node: DependencyNode) -> str:
    return f"{node.artifact.artifact_id or ''}:{node.artifact.base_version or ''}"


class GraphmlDependencyNodeVisitor(SerializingVisitor):
    """
    Writes nodes on the way down and edges on the way up, so the document is
    produced in a single pass without building a graph first.

    The header is written when the root is entered and the footer when it is
    left; nothing else is tracked between calls.
    """

    def visit(self, node: DependencyNode) -> bool:
        if node.is_root:
            self.writer.write(GRAPHML_HEADER)

        artifact = node.artifact
        label = _xml(node_label(node))

        self.writer.write(f'<node id="{_xml(node_id(node))}">')
        self.writer.write(f'\n\t<data key="d0"><y:ShapeNode><y:NodeLabel>{label}</y:NodeLabel></y:ShapeNode></data>')
        self.writer.write(f'\n\t<data key="_name">{label}</data>')

        self.writer.write(f'\n\t<data key="groupId">{_xml(artifact.group_id)}</data>')
        self.writer.write(f'\n\t<data key="artifactId">{_xml(artifact.artifact_id)}</data>')
        self.writer.write(f'\n\t<data key="version">{_xml(artifact.base_version)}</data>')

        if artifact.has_classifier:
            self.writer.write(f'\n\t<data key="classifier">{_xml(artifact.classifier)}</data>')
        if artifact.type:
            self.writer.write(f'\n\t<data key="type">{_xml(artifact.type)}</data>')

        self.writer.write("</node>\n")
        return True

    def end_visit(self, node: DependencyNode) -> bool:
        if node.is_root:
            self.writer.write(GRAPHML_FOOTER)
            return True

        parent = node.parent
        self.writer.write(
            f'<edge id="{_xml(edge_id(parent, node))}" '
            f'source="{_xml(node_id(parent))}" target="{_xml(node_id(node))}">'
        )

        scope = node.artifact.scope
        if scope:
            self.writer.write(
                f'<data key="d1"><y:PolyLineEdge><y:EdgeLabel>{_xml(scope)}</y:EdgeLabel></y:PolyLineEdge></data>'
            )
            self.writer.write(f'<data key="_label">{_xml(scope)}</data>')

        self.writer.write("</edge>\n")
        return True


def write_graphml(root: DependencyNode, writer: TextIO) -> None:
    root.accept(GraphmlDependencyNodeVisitor(writer))


def export_graphml(root: DependencyNode, path: Union[str, Path]) -> Path:
    """Writes the tree below root to path as UTF-8 GraphML."""
    path = Path(path)
    total = root.count()
    logging.info(f"Exporting {total} nodes / {total - 1} edges to {path}")

    with open(path, "w", encoding="utf-8") as f:
        write_graphml(root, f)

    logging.debug(f"GraphML written to {path}.")
    return path
