# src/crdrill/cli/formatter.py
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from crdrill.core.models import DrillNode, DrillResult, Readiness, ReportState

STATE_STYLES = {
    ReportState.NOT_READY: "yellow",
    ReportState.ERRORED: "bold red",
    ReportState.UNKNOWN: "magenta",
    ReportState.NOT_FOUND: "red",
    ReportState.TRANSPORT_ERROR: "red",
    ReportState.DECODE_ERROR: "red",
    ReportState.CYCLE: "bold magenta",
    ReportState.DEPTH_EXCEEDED: "dim yellow",
}

READINESS_ICONS = {
    Readiness.READY: "✅",
    Readiness.NOT_READY: "⏳",
    Readiness.ERRORED: "❌",
    Readiness.UNKNOWN: "❔",
    Readiness.EXEMPT: "➖",
}


class DrillFormatter:
    """
    DrillFormatter: The visual heart of the CLI.
    Responsible for rendering the drill tree, the findings table and the summary.
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def _label(self, node: DrillNode) -> Text:
        icon = READINESS_ICONS.get(node.readiness, "⚠️")
        label = Text(f"{icon} ")
        label.append(f"{node.identity.kind}/{node.identity.name}", style="bold cyan")
        label.append(f" ({node.identity.api_version})", style="dim")
        if node.report:
            style = STATE_STYLES.get(node.report.state, "red")
            label.append(f"  {node.report.state.value}", style=style)
            if node.report.message:
                label.append(f": {node.report.message}", style="white")
        elif node.readiness:
            label.append(f"  {node.readiness.value}", style="green" if node.readiness == Readiness.READY else "dim")
        return label

    def build_tree(self, result: DrillResult) -> Tree:
        """
        Mirrors the traversal: every fetched or failed reference becomes a branch.
        """
        tree = Tree(self._label(result.root), guide_style="cyan")

        def grow(branch: Tree, node: DrillNode):
            for child in node.children:
                grow(branch.add(self._label(child)), child)

        grow(tree, result.root)
        return tree

    def print_tree(self, result: DrillResult):
        self.console.print(self.build_tree(result))

    def print_findings_table(self, result: DrillResult):
        """
        Builds the findings table shown at the very end of a drill.
        """
        if result.ok:
            return

        table = Table(title="CRDrill Findings", show_lines=True, header_style="bold magenta")
        table.add_column("Depth", justify="right", style="dim", no_wrap=True)
        table.add_column("Resource", style="cyan")
        table.add_column("State", style="bold", no_wrap=True)
        table.add_column("Reason")
        table.add_column("Message", style="white")

        for r in result.reports:
            style = STATE_STYLES.get(r.state, "red")
            # Condition messages come from the cluster and may contain [brackets]
            table.add_row(
                str(r.depth),
                Text(str(r.identity)),
                Text(r.state.value, style=style),
                Text(r.reason),
                Text(r.message),
            )

        self.console.print(table)

    def print_summary(self, result: DrillResult):
        root = result.root.identity
        if result.ok:
            self.console.print(Panel(
                f"[bold green]{root} is ready[/bold green]\n"
                f"Resources inspected: {len(result.visited)}",
                border_style="green"
            ))
            return

        lines = [f"[bold white]Summary for {root}[/bold white]",
                 "════════════════════════════════════════",
                 f"Resources inspected: {len(result.visited)}"]
        for state, count in sorted(result.summary().items()):
            lines.append(f"{state + ':':<20} {count}")
        if result.cancelled:
            lines.append("[bold yellow]Drill stopped early; results are partial.[/bold yellow]")

        self.console.print(Panel("\n".join(lines), border_style="red" if not result.cancelled else "yellow"))
