"""
Shared builders for CRDrill tests.
Resources are plain dicts shaped like `kubectl get -o json` output.
"""

import pytest

GROUP = "example.org/v1alpha1"


def build_ref(kind, name="", api_version=GROUP):
    return {"apiVersion": api_version, "kind": kind, "name": name}


def build_resource(kind, name, api_version=GROUP, ready=None, reason="", message="",
                   synced_error=None, refs=(), conditions=None):
    """
    ready: None -> no Ready condition, True/False -> Ready condition status.
    synced_error: message of a Synced/ReconcileError condition, if any.
    """
    conds = list(conditions or [])
    if ready is not None:
        conds.append({
            "type": "Ready",
            "status": "True" if ready else "False",
            "reason": reason or ("Available" if ready else "Creating"),
            "message": message,
            "lastTransitionTime": "2026-10-01T10:00:00Z",
        })
    if synced_error is not None:
        conds.append({
            "type": "Synced",
            "status": "False",
            "reason": "ReconcileError",
            "message": synced_error,
            "lastTransitionTime": "2026-10-01T10:00:00Z",
        })
    return {
        "apiVersion": api_version,
        "kind": kind,
        "metadata": {"name": name},
        "spec": {"resourceRefs": list(refs)},
        "status": {"conditions": conds},
    }


@pytest.fixture
def make_resource():
    return build_resource


@pytest.fixture
def make_ref():
    return build_ref
