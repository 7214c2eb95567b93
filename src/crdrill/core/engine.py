#!/usr/bin/env python3
"""
CRDRILL ENGINE - The Drill
--------------------------
The DrillEngine takes a root composite resource and works out why it is
not ready. It classifies the root, and while a resource is NotReady or
Errored it descends depth-first into every reference the resource
declares, fetching and classifying each child in turn. Every problematic
node is reported, however deep it sits.

Fetch failures below the root are recovered per reference so siblings are
still inspected. Only a failure to fetch the root itself is raised.

Author: CRDrill Team
Date: 2026-10-19
"""

import logging
from typing import Any, Optional

from crdrill.core.context import DrillContext
from crdrill.core.errors import DecodeError, FetchError, NotFoundError
from crdrill.core.models import (
    DiagnosticReport,
    DrillNode,
    DrillResult,
    ManagedResource,
    Readiness,
    ReportState,
    ResourceIdentity,
    ResourceReference,
)
from crdrill.rules.readiness import ReadinessRules

logger = logging.getLogger("crdrill.engine")

_REPORT_STATES = {
    Readiness.NOT_READY: ReportState.NOT_READY,
    Readiness.ERRORED: ReportState.ERRORED,
    Readiness.UNKNOWN: ReportState.UNKNOWN,
}


class DrillEngine:
    """
    Recursive readiness diagnosis over a resource-reference graph.

    The fetcher is any object exposing fetch(kind, api_version, name) that
    returns a ManagedResource or raises a FetchError subclass.
    """

    def __init__(self, fetcher: Any, rules: Optional[ReadinessRules] = None,
                 max_depth: Optional[int] = None):
        if max_depth is not None and max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {max_depth}")
        self.fetcher = fetcher
        self.rules = rules or ReadinessRules()
        self.max_depth = max_depth

    def diagnose(self, kind: str, api_version: str, name: str, cancel: Any = None) -> DrillResult:
        """
        Drills into the root resource and returns every problem found.

        Args:
            kind: Kind of the root resource (singular, e.g. 'Platform').
            api_version: group/version of the root resource.
            name: Name of the root resource.
            cancel: Optional cooperative cancellation token exposing is_set().

        Raises:
            FetchError: when the root resource itself cannot be fetched.
        """
        context = DrillContext(max_depth=self.max_depth, cancel=cancel)
        root_identity = ResourceIdentity(kind, api_version, name)

        logger.info(f"Inspecting {root_identity}")
        resource = self.fetcher.fetch(kind, api_version, name)

        root = self._visit(resource, context, depth=0, parent=None)
        result = DrillResult(
            root=root,
            reports=context.reports,
            visited=context.visited,
            cancelled=context.cancelled,
        )

        if result.cancelled:
            logger.warning(f"Drill into {root_identity} cancelled after {len(result.visited)} resources")
        elif result.ok:
            logger.info(f"{root_identity} is ready")
        return result

    def _visit(self, resource: ManagedResource, context: DrillContext, depth: int,
               parent: Optional[ResourceIdentity]) -> DrillNode:
        identity = resource.identity
        context.mark_visited(identity)

        verdict = self.rules.classify(resource)
        node = DrillNode(identity=identity, readiness=verdict.readiness)

        if verdict.reportable:
            node.report = self._report(context, identity, _REPORT_STATES[verdict.readiness],
                                       verdict.message, verdict.reason, depth, parent)
            logger.warning(f"{identity} is {verdict.readiness.value}: {verdict.message}")

        if not verdict.descend:
            return node

        followable = [ref for ref in resource.references if ref.name]
        if context.max_depth is not None and depth >= context.max_depth and followable:
            self._report(context, identity, ReportState.DEPTH_EXCEEDED,
                         f"Depth limit {context.max_depth} reached; {len(followable)} references not inspected",
                         "MaxDepth", depth, parent)
            return node

        context.path.append(identity)
        try:
            for ref in resource.references:
                if context.check_cancelled():
                    break
                child = self._visit_reference(ref, context, depth + 1, identity)
                if child is not None:
                    node.children.append(child)
        finally:
            context.path.pop()

        return node

    def _visit_reference(self, ref: ResourceReference, context: DrillContext, depth: int,
                         parent: ResourceIdentity) -> Optional[DrillNode]:
        if not ref.name:
            logger.debug(f"{ref.kind} ({ref.api_version}) referenced by {parent} has not been created yet")
            return None

        identity = ref.identity
        if context.on_path(identity):
            report = self._report(context, identity, ReportState.CYCLE,
                                  f"Reference cycle: {identity} is an ancestor of itself via {parent}",
                                  "ReferenceCycle", depth, parent)
            return DrillNode(identity=identity, report=report)

        if identity in context.seen:
            logger.debug(f"{identity} already inspected; skipping shared reference from {parent}")
            return None

        try:
            child = self.fetcher.fetch(ref.kind, ref.api_version, ref.name)
        except FetchError as e:
            context.mark_visited(identity)
            report = self._report(context, identity, _fetch_state(e), e.message,
                                  type(e).__name__, depth, parent)
            logger.warning(f"Could not fetch {identity}: {e.message}")
            return DrillNode(identity=identity, report=report)

        context.seen.add(identity)
        return self._visit(child, context, depth, parent)

    def _report(self, context: DrillContext, identity: ResourceIdentity, state: ReportState,
                message: str, reason: str, depth: int,
                parent: Optional[ResourceIdentity]) -> DiagnosticReport:
        report = DiagnosticReport(identity=identity, state=state, message=message,
                                  reason=reason, depth=depth, parent=parent)
        context.reports.append(report)
        return report


def _fetch_state(error: FetchError) -> ReportState:
    if isinstance(error, NotFoundError):
        return ReportState.NOT_FOUND
    if isinstance(error, DecodeError):
        return ReportState.DECODE_ERROR
    return ReportState.TRANSPORT_ERROR
