import logging
from pathlib import Path
from typing import Optional

from rich.markup import escape
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, Footer, Header, Label, LoadingIndicator, Markdown, Tree

from depgraphml import config
from depgraphml.__version__ import __version__
from depgraphml.core.graphml import edge_id, export_graphml, node_id, node_label
from depgraphml.core.model import DependencyNode
from depgraphml.managers import DependencyTreeError, detect_manager, load_tree_file


def artifact_report(node: DependencyNode) -> str:
    """Markdown summary of a node: coordinates and the ids used in the GraphML export."""
    artifact = node.artifact
    md_output = [
        "| Field | Value |",
        "| --- | --- |",
        f"| groupId | `{artifact.group_id}` |",
        f"| artifactId | `{artifact.artifact_id}` |",
        f"| version | `{artifact.base_version}` |",
    ]
    if artifact.has_classifier:
        md_output.append(f"| classifier | `{artifact.classifier}` |")
    if artifact.type:
        md_output.append(f"| type | `{artifact.type}` |")
    if artifact.optional:
        md_output.append("| optional | yes |")

    md_output.append("")
    md_output.append(f"**Node id:** `{node_id(node)}`\n")

    if not node.is_root:
        md_output.append(f"**Scope:** {artifact.scope or '_none_'}\n")
        md_output.append(f"**Edge id:** `{edge_id(node.parent, node)}`\n")

    md_output.append(f"**Children:** {len(node.children)}")
    return "\n".join(md_output)


class ArtifactScreen(ModalScreen):
    """Modal with the coordinates and GraphML identities of one node."""

    DEFAULT_CSS = """
    ArtifactScreen {
        align: center middle;
        background: rgba(0, 0, 0, 0.8);
    }
    #dialog {
        padding: 0 1;
        width: 70%;
        height: 70%;
        border: heavy $primary;
        background: $surface;
        layout: vertical;
    }
    #title {
        text-align: center;
        text-style: bold;
        background: $primary;
        color: white;
        width: 100%;
        padding: 1;
    }
    #content-scroll {
        height: 1fr;
        margin: 1 0;
        overflow-y: auto;
    }
    #close-btn {
        width: 100%;
        dock: bottom;
    }
    """

    def __init__(self, node: DependencyNode) -> None:
        super().__init__()
        self.node = node

    def compose(self) -> ComposeResult:
        yield Vertical(
            Label(escape(node_label(self.node)), id="title"),
            VerticalScroll(
                Markdown(artifact_report(self.node)),
                id="content-scroll"
            ),
            Button("Close (Esc)", variant="primary", id="close-btn"),
            id="dialog",
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss()

    def key_escape(self) -> None:
        self.dismiss()


class DepGraphApp(App):
    TITLE = "depgraphml"
    SUB_TITLE = f"v{__version__}"

    DEFAULT_CSS = """
    Screen { layout: vertical; }

    #info-bar {
        height: 3;
        dock: top;
        background: $surface;
        border-bottom: solid $primary;
        align: left middle;
        padding: 0 1;
    }

    .info-label {
        width: auto;
        height: 1;
        padding: 0 2;
        color: $text;
    }

    #tree-container {
        height: 1fr;
        border: none;
        margin: 0 1;
    }
    Tree { padding: 1; background: $surface; }

    #loading-container { height: 100%; align: center middle; }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("j", "cursor_down", "Down", show=False),
        Binding("k", "cursor_up", "Up", show=False),
        Binding("l", "expand_node", "Expand"),
        Binding("h", "collapse_node", "Collapse"),
        Binding("enter", "show_details", "Details"),
        Binding("e", "export", "Export GraphML"),
    ]

    total_nodes: int = 0
    source_name: str = "..."

    def __init__(self, input_file: Optional[Path] = None, project_dir: Path = Path("."),
                 output: Optional[Path] = None) -> None:
        super().__init__()
        self.input_file = input_file
        self.project_dir = project_dir
        self.output = output or config.get_output_path()
        self.root_node: Optional[DependencyNode] = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)

        with Horizontal(id="info-bar"):
            yield Label(f"[b]Source:[/b] [cyan]{self.source_name}[/]", id="lbl-source", classes="info-label")
            yield Label("[b]Nodes:[/b] [blue]0[/]", id="lbl-nodes", classes="info-label")
            yield Label("[b]Edges:[/b] [blue]0[/]", id="lbl-edges", classes="info-label")
            yield Label(f"[b]Output:[/b] [green]{escape(str(self.output))}[/]", id="lbl-output", classes="info-label")

        with Container(id="main-area"):
            with Container(id="loading-container"):
                yield LoadingIndicator()
                yield Label("Initializing depgraphml...", id="status-label")

            with Container(id="tree-container"):
                yield Tree("Root", id="dep-tree")

        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#tree-container").display = False
        self.load_tree()

    # --- ACTIONS ---

    def action_cursor_down(self) -> None:
        self.query_one("#dep-tree").action_cursor_down()

    def action_cursor_up(self) -> None:
        self.query_one("#dep-tree").action_cursor_up()

    def action_expand_node(self) -> None:
        tree = self.query_one("#dep-tree")
        if tree.cursor_node:
            tree.cursor_node.expand()

    def action_collapse_node(self) -> None:
        tree = self.query_one("#dep-tree")
        node = tree.cursor_node
        if node:
            if node.is_expanded:
                node.collapse()
            elif node.parent:
                tree.select_node(node.parent)
                node.parent.collapse()

    def action_show_details(self) -> None:
        tree = self.query_one("#dep-tree")
        if tree.cursor_node and tree.cursor_node.data:
            self.push_screen(ArtifactScreen(tree.cursor_node.data))

    def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
        if event.node.data:
            self.push_screen(ArtifactScreen(event.node.data))

    def action_export(self) -> None:
        if self.root_node is None:
            self.notify("Nothing to export yet.", severity="warning")
            return

        try:
            path = export_graphml(self.root_node, self.output)
        except OSError as e:
            logging.exception("Export failed:")
            self.notify(f"Export failed: {e}", severity="error")
            return

        self.notify(f"GraphML written to {path}", severity="information")

    # --- LOGIC ---

    def update_status(self, msg: str) -> None:
        self.query_one("#status-label", Label).update(msg)

    def update_dashboard_ui(self) -> None:
        edges = max(self.total_nodes - 1, 0)
        self.query_one("#lbl-source", Label).update(f"[b]Source:[/b] [cyan]{escape(self.source_name)}[/]")
        self.query_one("#lbl-nodes", Label).update(f"[b]Nodes:[/b] [blue]{self.total_nodes}[/]")
        self.query_one("#lbl-edges", Label).update(f"[b]Edges:[/b] [blue]{edges}[/]")

    def show_error(self, message: str) -> None:
        self.query_one("#status-label", Label).update(f"[bold red]Fatal Error:[/]\n{escape(message)}")
        self.query_one(LoadingIndicator).display = False

    def resolve_tree(self) -> DependencyNode:
        if self.input_file is not None:
            self.source_name = self.input_file.name
            return load_tree_file(self.input_file)

        manager = detect_manager(self.project_dir)
        if not manager:
            raise DependencyTreeError("No supported project found.")

        self.source_name = manager.name
        logging.info(f"Manager: {manager.name}")
        return manager.get_dependencies()

    @work(thread=True, exclusive=True)
    def load_tree(self) -> None:
        try:
            logging.info("Worker started.")
            self.call_from_thread(self.update_status, "Reading dependency tree...")

            root_node = self.resolve_tree()
            self.total_nodes = root_node.count()

        except DependencyTreeError as e:
            logging.exception("Fatal error in worker:")
            self.call_from_thread(self.show_error, str(e))
            return

        self.call_from_thread(self.update_dashboard_ui)
        self.call_from_thread(self.render_tree, root_node)

    def render_tree(self, root_node: DependencyNode) -> None:
        self.root_node = root_node

        tree = self.query_one("#dep-tree")
        tree.clear()
        tree.root.data = root_node
        tree.root.label = f"📦 {escape(node_id(root_node))}"
        tree.root.expand()

        def add_nodes(tree_node, data_node):
            for child in data_node.children:
                safe_label = escape(node_label(child))
                safe_group = escape(child.artifact.group_id or "")

                child_count = len(child.children)
                if child_count > 0:
                    count_suffix = f" [dim]↳[/] {child_count}"
                else:
                    count_suffix = ""

                if child.artifact.scope:
                    scope = f" [yellow]({escape(child.artifact.scope)})[/]"
                else:
                    scope = ""

                label = f"[green]{safe_label}[/] [dim]{safe_group}[/]{scope}{count_suffix}"
                new_node = tree_node.add(label, data=child)
                add_nodes(new_node, child)

        add_nodes(tree.root, root_node)
        self.query_one("#loading-container").display = False
        self.query_one("#tree-container").display = True
        tree.focus()
