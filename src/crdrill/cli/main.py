#!/usr/bin/env python3
"""
CRDRILL CLI - Composite Resource Drill
--------------------------------------
Primary interface: takes the identity of a composite resource, drills into
its references and explains why it is not ready.

Exit codes:
    0   the root resource is healthy
    1   setup failure (kubeconfig, snapshot, root resource not fetchable)
    2   the drill reported problems
    130 interrupted by the user

Author: CRDrill Team
Date: 2026-10-19
"""

import sys
import logging
import argparse
import threading
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.text import Text

from crdrill.cli.exporter import ReportExporter
from crdrill.cli.formatter import DrillFormatter
from crdrill.core.engine import DrillEngine
from crdrill.core.errors import ConfigurationError, FetchError
from crdrill.core.settings import OUTPUT_FORMATS, DrillSettings
from crdrill.fetch.cluster import ClusterFetcher
from crdrill.fetch.paths import Pluralizer
from crdrill.fetch.snapshot import SnapshotFetcher
from crdrill.rules.readiness import ReadinessRules

__version__ = "0.1.0"

EXIT_HEALTHY = 0
EXIT_SETUP_FAILURE = 1
EXIT_PROBLEMS = 2
EXIT_INTERRUPTED = 130

# Global consoles: results go to stdout, diagnostics and logs to stderr
console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger("crdrill.cli")


class CRDrillCLI:
    """
    CLI wrapper that translates user commands into Engine actions.
    """

    def __init__(self):
        """Initializes the CLI and sets up the argument parser."""
        self.parser = argparse.ArgumentParser(
            prog="crdrill",
            description="CRDrill - find out why a composite resource is not ready",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self._setup_args()

    def _setup_args(self):
        """Configures the command-line flags and subcommands."""
        self.parser.add_argument("--version", action="version", version=f"crdrill v{__version__}")
        subparsers = self.parser.add_subparsers(dest="command", metavar="Command")

        drill = subparsers.add_parser("drill", help="🔍 Drill into a resource and its references")
        drill.add_argument("kind", help="Kind of the root resource (e.g. Platform)")
        drill.add_argument("name", help="Name of the root resource")
        drill.add_argument("--api-version", required=True,
                           help="API group/version of the root resource (e.g. example.org/v1alpha1)")
        drill.add_argument("--kubeconfig", help="Path to the kubeconfig file (default: $KUBECONFIG or ~/.kube/config)")
        drill.add_argument("--context", help="Kubeconfig context to use (default: current context)")
        drill.add_argument("--from-file", action="append", metavar="PATH",
                           help="Read resources from a YAML dump instead of a cluster (repeatable)")
        drill.add_argument("--exempt-kind", action="append", metavar="KIND",
                           help="Kind that never reports readiness and should be skipped (repeatable)")
        drill.add_argument("--plural", action="append", metavar="KIND=PLURAL",
                           help="Override the collection name for an irregular kind (repeatable)")
        drill.add_argument("--max-depth", type=int, help="Stop descending below this depth")
        drill.add_argument("--timeout", type=float, help="Per-request timeout in seconds")
        drill.add_argument("--time-budget", type=float,
                           help="Stop drilling after this many seconds and report partial results")
        drill.add_argument("-o", "--output", choices=OUTPUT_FORMATS, default="tree", help="Output format")
        drill.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    def _configure_logging(self, verbose: bool):
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.WARNING,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
            force=True,
        )

    def _build_fetcher(self, settings: DrillSettings):
        pluralizer = Pluralizer(settings.plural_overrides)
        if settings.offline:
            return SnapshotFetcher.from_files(settings.snapshot_files, pluralizer=pluralizer)
        return ClusterFetcher.from_kubeconfig(
            settings.kubeconfig,
            context=settings.context,
            pluralizer=pluralizer,
            timeout=settings.timeout,
        )

    def _fatal(self, title: str, error: Exception) -> int:
        err_console.print(Panel(Text(str(error)), title=f"[bold red]{title}[/bold red]",
                                border_style="red", expand=False))
        return EXIT_SETUP_FAILURE

    def _run_drill(self, args: argparse.Namespace) -> int:
        """Main drill orchestration."""
        try:
            settings = DrillSettings.from_args(args)
        except ConfigurationError as e:
            return self._fatal("Invalid arguments", e)

        self._configure_logging(settings.verbose)
        logger.debug(f"Resolved settings: {settings}")

        try:
            fetcher = self._build_fetcher(settings)
        except ConfigurationError as e:
            return self._fatal("Setup failed", e)

        engine = DrillEngine(
            fetcher,
            rules=ReadinessRules(settings.exempt_kinds),
            max_depth=settings.max_depth,
        )

        cancel = threading.Event()
        timer = None
        if settings.time_budget:
            timer = threading.Timer(settings.time_budget, cancel.set)
            timer.daemon = True
            timer.start()

        try:
            result = engine.diagnose(settings.kind, settings.api_version, settings.name, cancel=cancel)
        except FetchError as e:
            return self._fatal("Root resource unavailable", e)
        finally:
            if timer:
                timer.cancel()

        if settings.output in ("json", "yaml"):
            # Plain print keeps machine output free of console wrapping
            print(ReportExporter().export(result, settings.output))
        else:
            formatter = DrillFormatter(console)
            if settings.output == "tree":
                formatter.print_tree(result)
            else:
                formatter.print_findings_table(result)
            formatter.print_summary(result)

        return EXIT_HEALTHY if result.ok else EXIT_PROBLEMS

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Primary routing entry point."""
        args = self.parser.parse_args(argv)
        if args.command == "drill":
            return self._run_drill(args)
        self.parser.print_help()
        return EXIT_SETUP_FAILURE


def main(argv: Optional[List[str]] = None):
    """Application entry point with interrupt handling."""
    try:
        code = CRDrillCLI().run(argv)
    except KeyboardInterrupt:
        err_console.print("\n[bold red]Terminated by user.[/bold red]")
        code = EXIT_INTERRUPTED
    sys.exit(code)


if __name__ == "__main__":
    main()
