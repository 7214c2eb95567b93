#!/usr/bin/env python3
"""
CRDRILL READINESS RULES - Condition Interpretation
--------------------------------------------------
The ReadinessRules act as the 'Judge' for a single fetched resource.
They read its status conditions and classify it as Ready, NotReady,
Errored, Unknown or Exempt. The engine decides what to do with the verdict.

Author: CRDrill Team
Date: 2026-10-19
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from crdrill.core.models import Condition, ManagedResource, Readiness

logger = logging.getLogger("crdrill.rules")

READY = "Ready"
SYNCED = "Synced"
RECONCILE_ERROR = "ReconcileError"

# Kinds that never report readiness by design
DEFAULT_EXEMPT_KINDS = frozenset({"ProviderConfig", "ProviderConfigUsage"})


@dataclass(frozen=True)
class Classification:
    """Verdict for one resource plus the condition that triggered it."""
    readiness: Readiness
    message: str = ""
    reason: str = ""

    @property
    def descend(self) -> bool:
        """Only failing resources are worth drilling into."""
        return self.readiness in (Readiness.NOT_READY, Readiness.ERRORED)

    @property
    def reportable(self) -> bool:
        return self.readiness not in (Readiness.READY, Readiness.EXEMPT)


def latest(conditions: List[Condition]) -> Optional[Condition]:
    """
    Returns the most recently transitioned condition.
    Untimed conditions sort first; ties go to the later position.
    """
    best = None
    best_key = None
    for position, condition in enumerate(conditions):
        stamp = condition.last_transition_time
        key = (stamp is not None, stamp.timestamp() if stamp else 0.0, position)
        if best_key is None or key >= best_key:
            best, best_key = condition, key
    return best


class ReadinessRules:
    """
    Ordered rule registry. The first rule returning a Classification wins.
    """

    def __init__(self, exempt_kinds: Optional[Iterable[str]] = None):
        self.exempt_kinds = frozenset(DEFAULT_EXEMPT_KINDS if exempt_kinds is None else exempt_kinds)

        # ReconcileError outranks a Ready=True observation
        self.active_rules = [
            self._rule_reconcile_error,
            self._rule_exempt_kind,
            self._rule_missing_ready,
            self._rule_ready_status,
        ]

    def classify(self, resource: ManagedResource) -> Classification:
        for rule in self.active_rules:
            verdict = rule(resource)
            if verdict is not None:
                logger.debug(f"{resource.identity} classified as {verdict.readiness.value} by {rule.__name__}")
                return verdict
        return Classification(Readiness.UNKNOWN)

    def _rule_reconcile_error(self, resource: ManagedResource) -> Optional[Classification]:
        """
        Rule: the control plane reported that it failed to reconcile.
        """
        failures = [c for c in resource.conditions_of_type(SYNCED) if c.reason == RECONCILE_ERROR]
        if not failures:
            return None
        condition = latest(failures)
        return Classification(Readiness.ERRORED, message=condition.message or RECONCILE_ERROR, reason=RECONCILE_ERROR)

    def _rule_exempt_kind(self, resource: ManagedResource) -> Optional[Classification]:
        """
        Rule: configuration-only kinds carry no Ready condition and are skipped.
        """
        if resource.kind in self.exempt_kinds and not resource.conditions_of_type(READY):
            return Classification(Readiness.EXEMPT)
        return None

    def _rule_missing_ready(self, resource: ManagedResource) -> Optional[Classification]:
        if resource.conditions_of_type(READY):
            return None
        return Classification(
            Readiness.UNKNOWN,
            message="Resource does not have a Ready status condition",
            reason="NoReadyCondition",
        )

    def _rule_ready_status(self, resource: ManagedResource) -> Optional[Classification]:
        condition = latest(resource.conditions_of_type(READY))
        if condition.is_true:
            return Classification(Readiness.READY, reason=condition.reason)
        return Classification(Readiness.NOT_READY, message=condition.describe(), reason=condition.reason)
