#!/usr/bin/env python3
"""
CRDRILL DRILL CONTEXT
---------------------
A state-management object that acts as the 'Case File' for one diagnose()
traversal. It owns the visited set, the current ancestor path and the
reports gathered so far. A fresh context is created per traversal.

Author: CRDrill Team
Date: 2026-10-19
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Set

from crdrill.core.models import DiagnosticReport, ResourceIdentity


@dataclass
class DrillContext:
    """
    Maintains the state of a single drill session.

    Initialized by the DrillEngine and enriched while it walks the tree.
    """
    max_depth: Optional[int] = None                      # None means unbounded
    cancel: Any = None                                   # Anything exposing is_set()
    visited: List[ResourceIdentity] = field(default_factory=list)
    seen: Set[ResourceIdentity] = field(default_factory=set)
    path: List[ResourceIdentity] = field(default_factory=list)  # Ancestors of the current node
    reports: List[DiagnosticReport] = field(default_factory=list)
    cancelled: bool = False

    def mark_visited(self, identity: ResourceIdentity):
        self.visited.append(identity)
        self.seen.add(identity)

    def on_path(self, identity: ResourceIdentity) -> bool:
        return identity in self.path

    def check_cancelled(self) -> bool:
        if not self.cancelled and self.cancel is not None and self.cancel.is_set():
            self.cancelled = True
        return self.cancelled
