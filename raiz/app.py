import logging
from typing import Any, Dict, Optional

from rich.markup import escape
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, Footer, Header, Label, LoadingIndicator, Markdown, Tree

from raiz.__version__ import __version__
from raiz.core.model import DependencyNode, NodeStatus
from raiz.core.registry import REGISTRY_URL, RegistryClient
from raiz.tools import TreeResult, resolve_tree


def node_label(name: str, node: DependencyNode) -> str:
    """Rich markup for one tree row."""
    safe_name = escape(name)
    safe_range = escape(node.version_range)

    if node.status is NodeStatus.CIRCULAR:
        return f"[yellow](⟳) {safe_name}[/] [dim]{safe_range} circular[/]"
    if node.status is NodeStatus.DEPTH_LIMITED:
        return f"[blue](…) {safe_name}[/] [dim]{safe_range} depth limit[/]"
    if node.status is NodeStatus.ERROR:
        return f"[bold red](!) {safe_name}[/] [dim]{safe_range}[/] [red]({escape(node.error)})[/]"

    child_count = len(node.dependencies)
    count_suffix = f" [dim]↳[/] {child_count}" if child_count else ""
    return f"[green](•) {safe_name} [dim]{escape(node.version)} ({safe_range})[/]{count_suffix}"


def node_report(name: str, node: DependencyNode) -> str:
    lines = [f"# {name}\n", f"- **Requested range**: `{node.version_range}`"]

    if node.status is NodeStatus.EXPANDED:
        lines.append(f"- **Resolved version**: `{node.version}` (latest)")
        lines.append(f"- **Direct dependencies**: {len(node.dependencies)}")
        for dep, child in sorted(node.dependencies.items()):
            lines.append(f"  - `{dep}` {child.version_range}")
    elif node.status is NodeStatus.CIRCULAR:
        lines.append("\nThis package is already one of its own ancestors on this path.")
    elif node.status is NodeStatus.DEPTH_LIMITED:
        lines.append("\nNot expanded: the depth limit was reached.")
    else:
        lines.append(f"\n**Lookup failed:** {node.error}")

    return "\n".join(lines)


def root_report(result: TreeResult) -> str:
    info = result.to_dict()
    lines = [f"# {info['name']} {info['version']}\n"]
    if info["description"]:
        lines.append(f"{info['description']}\n")

    fields = [
        ("Latest", info["latest_version"]),
        ("Published", info["publish_time"]),
        ("License", info["license"]),
        ("Author", info["author"]),
        ("Homepage", info["homepage"]),
        ("Repository", info["repository"]),
        ("Keywords", ", ".join(info["keywords"])),
    ]
    for title, value in fields:
        if value:
            lines.append(f"- **{title}**: {value}")

    lines.append(f"\n**{result.total_dependencies}** unique dependencies, depth **{result.tree_depth}**.")
    return "\n".join(lines)


def has_error_below(node: DependencyNode) -> bool:
    if node.status is NodeStatus.ERROR:
        return True
    return any(has_error_below(child) for child in node.dependencies.values())


class PackageScreen(ModalScreen):
    """Modal with the details of one package in the tree."""

    DEFAULT_CSS = """
    PackageScreen {
        align: center middle;
        background: rgba(0, 0, 0, 0.8);
    }
    #dialog {
        padding: 0 1;
        width: 85%;
        height: 85%;
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
        scrollbar-gutter: stable;
    }
    #close-btn {
        width: 100%;
        dock: bottom;
    }
    """

    def __init__(self, title: str, report: str) -> None:
        super().__init__()
        self.title_text = title
        self.report = report

    def compose(self) -> ComposeResult:
        yield Vertical(
            Label(escape(self.title_text), id="title"),
            VerticalScroll(Markdown(self.report), id="content-scroll"),
            Button("Close (Esc)", variant="primary", id="close-btn"),
            id="dialog",
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss()

    def key_escape(self) -> None:
        self.dismiss()


class RaizApp(App):
    TITLE = "Raiz"
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
        Binding("space", "toggle_node", "Toggle"),
        Binding("enter", "show_details", "Details"),
        Binding("e", "toggle_filter", "Errors Only"),
    ]

    show_only_errors: bool = False

    def __init__(self, package_name: str, version: Optional[str] = None, max_depth: Optional[int] = None,
                 registry_url: str = REGISTRY_URL, timeout: Optional[float] = None) -> None:
        super().__init__()
        self.package_name = package_name
        self.requested_version = version
        self.max_depth = max_depth
        self.registry_url = registry_url
        self.timeout = timeout
        self.result: Optional[TreeResult] = None
        self.lookups = 0

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)

        with Horizontal(id="info-bar"):
            yield Label(f"[b]Package:[/b] [cyan]{escape(self.package_name)}[/]", id="lbl-package", classes="info-label")
            yield Label("[b]Version:[/b] [blue]...[/]", id="lbl-version", classes="info-label")
            yield Label("[b]Total:[/b] [blue]0[/]", id="lbl-total", classes="info-label")
            yield Label("[b]Depth:[/b] [green]0[/]", id="lbl-depth", classes="info-label")

        with Container(id="main-area"):
            with Container(id="loading-container"):
                yield LoadingIndicator()
                yield Label("Initializing Raiz...", id="status-label")

            with Container(id="tree-container"):
                yield Tree("Root", id="dep-tree")

        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#tree-container").display = False
        self.resolve_package()

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

    def action_toggle_node(self) -> None:
        tree = self.query_one("#dep-tree")
        if tree.cursor_node:
            tree.cursor_node.toggle()

    def action_show_details(self) -> None:
        tree = self.query_one("#dep-tree")
        if tree.cursor_node:
            self._open_details(tree.cursor_node.data)

    def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
        self._open_details(event.node.data)

    def _open_details(self, data: Any) -> None:
        if isinstance(data, TreeResult):
            self.push_screen(PackageScreen(f"{data.metadata.name}@{data.version}", root_report(data)))
        elif data:
            name, node = data
            self.push_screen(PackageScreen(name, node_report(name, node)))

    def action_toggle_filter(self) -> None:
        self.show_only_errors = not self.show_only_errors

        status = "enabled" if self.show_only_errors else "disabled"
        severity = "warning" if self.show_only_errors else "information"
        msg = "Showing failed lookups only." if self.show_only_errors else "Showing all packages."

        self.notify(f"Filter {status}: {msg}", severity=severity)

        if self.result:
            self.render_tree(self.result)

    # --- LOGIC ---

    def on_fetch(self, package_name: str) -> None:
        # Called from the worker thread
        self.lookups += 1
        self.call_from_thread(self.update_status, f"Fetching {package_name}... ({self.lookups} lookups)")

    def update_status(self, msg: str) -> None:
        self.query_one("#status-label", Label).update(escape(msg))

    def update_dashboard_ui(self) -> None:
        if not self.result:
            return
        self.query_one("#lbl-version", Label).update(f"[b]Version:[/b] [blue]{escape(self.result.version)}[/]")
        self.query_one("#lbl-total", Label).update(f"[b]Total:[/b] [blue]{self.result.total_dependencies}[/]")
        self.query_one("#lbl-depth", Label).update(f"[b]Depth:[/b] [green]{self.result.tree_depth}[/]")

    def show_error(self, message: str) -> None:
        self.query_one("#status-label", Label).update(f"[bold red]Fatal Error:[/]\n{escape(message)}")
        self.query_one("LoadingIndicator").display = False

    @work(thread=True, exclusive=True)
    def resolve_package(self) -> None:
        try:
            logging.info("Worker started.")
            with RegistryClient(base_url=self.registry_url, on_fetch=self.on_fetch) as client:
                result = resolve_tree(
                    self.package_name, self.requested_version, self.max_depth, client=client, timeout=self.timeout
                )
        except Exception as e:
            logging.exception("Fatal error in worker:")
            self.call_from_thread(self.show_error, str(e))
            return

        self.call_from_thread(self.show_result, result)

    def show_result(self, result: TreeResult) -> None:
        self.result = result
        self.update_dashboard_ui()
        self.render_tree(result)

    def render_tree(self, result: TreeResult) -> None:
        tree = self.query_one("#dep-tree")
        tree.clear()
        tree.root.data = result
        tree.root.label = f"📦 {escape(result.metadata.name)} [dim]{escape(result.version)}[/]"
        tree.root.expand()

        def add_nodes(tree_node, children: Dict[str, DependencyNode], depth: int) -> None:
            for name, child in children.items():
                if self.show_only_errors and not has_error_below(child):
                    continue

                allow_expand = bool(child.dependencies)
                new_node = tree_node.add(
                    node_label(name, child),
                    data=(name, child),
                    expand=self.show_only_errors or depth == 1,
                    allow_expand=allow_expand,
                )
                add_nodes(new_node, child.dependencies, depth + 1)

        add_nodes(tree.root, result.tree, 1)
        self.query_one("#loading-container").display = False
        self.query_one("#tree-container").display = True
        tree.focus()
