#!/usr/bin/env python3
"""
CRDRILL SETTINGS
----------------
Resolves run configuration from command-line flags and the environment.
Kubeconfig lookup follows kubectl: explicit flag, then $KUBECONFIG, then
~/.kube/config.

Author: CRDrill Team
Date: 2026-10-19
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional

from crdrill.core.errors import ConfigurationError
from crdrill.rules.readiness import DEFAULT_EXEMPT_KINDS

OUTPUT_FORMATS = ("tree", "table", "json", "yaml")


def resolve_kubeconfig(explicit: Optional[str] = None,
                       environ: Optional[Mapping[str, str]] = None) -> str:
    """Picks the kubeconfig file to load. Only the first $KUBECONFIG entry is used."""
    environ = os.environ if environ is None else environ
    if explicit:
        return str(Path(explicit).expanduser())
    env_value = environ.get("KUBECONFIG", "")
    entries = [e for e in env_value.split(os.pathsep) if e]
    if entries:
        return str(Path(entries[0]).expanduser())
    return str(Path.home() / ".kube" / "config")


def parse_plural_overrides(pairs: Iterable[str]) -> Dict[str, str]:
    """Parses repeated 'Kind=plural' flags."""
    overrides = {}
    for pair in pairs:
        kind, sep, plural = pair.partition("=")
        if not sep or not kind.strip() or not plural.strip():
            raise ConfigurationError(f"Invalid plural override '{pair}', expected Kind=plural")
        overrides[kind.strip()] = plural.strip()
    return overrides


@dataclass
class DrillSettings:
    """Everything one CLI run needs, already validated."""
    kind: str
    api_version: str
    name: str
    kubeconfig: str = ""
    context: Optional[str] = None
    snapshot_files: List[str] = field(default_factory=list)
    exempt_kinds: FrozenSet[str] = DEFAULT_EXEMPT_KINDS
    plural_overrides: Dict[str, str] = field(default_factory=dict)
    max_depth: Optional[int] = None
    timeout: Optional[float] = None
    time_budget: Optional[float] = None
    output: str = "tree"
    verbose: bool = False

    @property
    def offline(self) -> bool:
        return bool(self.snapshot_files)

    @classmethod
    def from_args(cls, args, environ: Optional[Mapping[str, str]] = None) -> "DrillSettings":
        """Builds settings from an argparse namespace of the 'drill' command."""
        for label, value in (("KIND", args.kind), ("NAME", args.name)):
            if not (value or "").strip():
                raise ConfigurationError(f"{label} must not be empty")
        if not (args.api_version or "").strip("/"):
            raise ConfigurationError("--api-version must not be empty (e.g. example.org/v1alpha1)")
        if args.max_depth is not None and args.max_depth < 0:
            raise ConfigurationError("--max-depth must be zero or greater")
        for flag, value in (("--timeout", args.timeout), ("--time-budget", args.time_budget)):
            if value is not None and value <= 0:
                raise ConfigurationError(f"{flag} must be greater than zero")
        if args.output not in OUTPUT_FORMATS:
            raise ConfigurationError(f"Unknown output format '{args.output}'")

        exempt = set(DEFAULT_EXEMPT_KINDS)
        exempt.update(args.exempt_kind or [])

        return cls(
            kind=args.kind.strip(),
            api_version=args.api_version.strip("/"),
            name=args.name.strip(),
            kubeconfig=resolve_kubeconfig(args.kubeconfig, environ),
            context=args.context,
            snapshot_files=list(args.from_file or []),
            exempt_kinds=frozenset(exempt),
            plural_overrides=parse_plural_overrides(args.plural or []),
            max_depth=args.max_depth,
            timeout=args.timeout,
            time_budget=args.time_budget,
            output=args.output,
            verbose=args.verbose,
        )
