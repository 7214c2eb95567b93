import pytest

from crdrill.core.models import Condition, ManagedResource, Readiness, ResourceIdentity
from crdrill.core.models import parse_timestamp
from crdrill.rules.readiness import ReadinessRules, latest


def resource_with(kind="Bucket", conditions=()):
    return ManagedResource(
        identity=ResourceIdentity(kind, "example.org/v1alpha1", "sample"),
        conditions=tuple(conditions),
    )


def cond(ctype, status, reason="", message="", at=None):
    return Condition(ctype, status, reason, message, parse_timestamp(at))


READINESS_TABLE = [
    ([cond("Ready", "True")], Readiness.READY),
    ([cond("Ready", "False", "Creating")], Readiness.NOT_READY),
    ([cond("Ready", "Unknown")], Readiness.NOT_READY),
    ([], Readiness.UNKNOWN),
    ([cond("Synced", "True", "ReconcileSuccess")], Readiness.UNKNOWN),
    ([cond("Synced", "False", "ReconcileError", "boom")], Readiness.ERRORED),
    ([cond("Ready", "True"), cond("Synced", "False", "ReconcileError", "boom")], Readiness.ERRORED),
    ([cond("Ready", "False"), cond("Synced", "False", "ReconcilePaused")], Readiness.NOT_READY),
]


@pytest.mark.parametrize("conditions, expected", READINESS_TABLE)
def test_classification_table(conditions, expected):
    verdict = ReadinessRules().classify(resource_with(conditions=conditions))
    assert verdict.readiness == expected


def test_unknown_is_distinct_from_not_ready():
    """
    A resource without any Ready condition must never read as NotReady.
    """
    verdict = ReadinessRules().classify(resource_with(conditions=[cond("Synced", "True")]))
    assert verdict.readiness == Readiness.UNKNOWN
    assert verdict.reason == "NoReadyCondition"
    assert verdict.reportable is True
    assert verdict.descend is False


def test_most_recent_ready_condition_wins():
    conditions = [
        cond("Ready", "True", at="2026-10-01T12:00:00Z"),
        cond("Ready", "False", "Deleting", at="2026-10-02T08:00:00Z"),
        cond("Ready", "True", at="2026-09-30T00:00:00Z"),
    ]
    verdict = ReadinessRules().classify(resource_with(conditions=conditions))
    assert verdict.readiness == Readiness.NOT_READY
    assert verdict.reason == "Deleting"


def test_untimed_ready_conditions_fall_back_to_sequence_order():
    conditions = [cond("Ready", "False"), cond("Ready", "True")]
    assert ReadinessRules().classify(resource_with(conditions=conditions)).readiness == Readiness.READY


def test_latest_prefers_timed_over_untimed():
    timed = cond("Ready", "False", at="2020-01-01T00:00:00Z")
    untimed = cond("Ready", "True")
    assert latest([timed, untimed]) is timed


def test_reconcile_error_message_is_reported():
    verdict = ReadinessRules().classify(resource_with(conditions=[
        cond("Ready", "True"),
        cond("Synced", "False", "ReconcileError", "cannot apply composite: quota exceeded"),
    ]))
    assert verdict.message == "cannot apply composite: quota exceeded"
    assert verdict.descend is True


def test_not_ready_message_combines_reason_and_message():
    verdict = ReadinessRules().classify(resource_with(conditions=[
        cond("Ready", "False", "Creating", "instance is being provisioned"),
    ]))
    assert verdict.message == "Creating: instance is being provisioned"


@pytest.mark.parametrize("kind", ["ProviderConfig", "ProviderConfigUsage"])
def test_default_exempt_kinds(kind):
    verdict = ReadinessRules().classify(resource_with(kind=kind))
    assert verdict.readiness == Readiness.EXEMPT
    assert verdict.reportable is False
    assert verdict.descend is False


def test_exempt_kind_with_ready_condition_is_still_judged():
    verdict = ReadinessRules().classify(resource_with(kind="ProviderConfig", conditions=[cond("Ready", "False")]))
    assert verdict.readiness == Readiness.NOT_READY


def test_exempt_kind_with_reconcile_error_is_errored():
    verdict = ReadinessRules().classify(resource_with(
        kind="ProviderConfig", conditions=[cond("Synced", "False", "ReconcileError", "bad secret")]))
    assert verdict.readiness == Readiness.ERRORED
