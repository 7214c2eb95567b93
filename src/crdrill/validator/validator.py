#!/usr/bin/env python3
"""
CRDRILL VALIDATOR - The Judge
-----------------------------
The Validator is the gate between the fetch boundary and the engine.
It performs a structural check on a decoded API payload before the models
layer turns it into a ManagedResource. Anything that fails here is
surfaced as a DecodeError for that node only.

Author: CRDrill Team
Date: 2026-10-19
"""

from typing import Any, Tuple


class ResourceValidator:
    """
    Enforces the handful of fields the readiness engine actually reads.
    Everything else in the payload is ignored.
    """

    def __init__(self):
        # Core fields that must exist in every single K8s resource
        self.required_fields = ["apiVersion", "kind", "metadata"]

    def validate_payload(self, doc: Any) -> Tuple[bool, str]:
        """
        The primary integrity check. Validates that the decoded payload is
        a viable Kubernetes object with the spec/status shapes we traverse.
        """
        if not isinstance(doc, dict):
            return False, f"Payload is not a mapping (got {type(doc).__name__})."

        # --- TEST 1: Identity & Metadata Presence ---
        for field in self.required_fields:
            if not doc.get(field):
                return False, f"Missing required top-level field '{field}'."

        for field in ("apiVersion", "kind"):
            if not isinstance(doc[field], str) or not doc[field].strip():
                return False, f"Field '{field}' must be a non-empty string."

        metadata = doc["metadata"]
        if not isinstance(metadata, dict) or not metadata.get("name"):
            return False, "Field 'metadata.name' is required but missing."

        # --- TEST 2: Traversed Sections ---
        for section in ("spec", "status"):
            value = doc.get(section)
            if value is not None and not isinstance(value, dict):
                return False, f"'{section}' must be a map/object."

        spec = doc.get("spec") or {}
        refs = spec.get("resourceRefs")
        if refs is not None and not isinstance(refs, list):
            return False, "'spec.resourceRefs' must be a list/sequence."

        single_ref = spec.get("resourceRef")
        if single_ref is not None and not isinstance(single_ref, dict):
            return False, "'spec.resourceRef' must be a map/object."

        conditions = (doc.get("status") or {}).get("conditions")
        if conditions is not None and not isinstance(conditions, list):
            return False, "'status.conditions' must be a list/sequence."

        return True, "Payload passes structural integrity check."
