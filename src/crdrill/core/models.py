#!/usr/bin/env python3
"""
CRDRILL CORE MODELS
-------------------
Defines the fundamental data structures used across the CRDrill engine.
These models represent a fetched control-plane resource, the references it
declares to its children, and the diagnostic findings produced while
drilling through them.

Author: CRDrill Team
Date: 2026-10-19
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from crdrill.core.errors import DecodeError
from crdrill.validator.validator import ResourceValidator

_validator = ResourceValidator()


class Readiness(str, Enum):
    """Classification of a single resource, derived from its conditions."""
    READY = "Ready"
    NOT_READY = "NotReady"
    ERRORED = "Errored"
    UNKNOWN = "Unknown"
    EXEMPT = "Exempt"


class ReportState(str, Enum):
    """The problem a DiagnosticReport describes."""
    NOT_READY = "NotReady"
    ERRORED = "Errored"
    UNKNOWN = "Unknown"
    NOT_FOUND = "NotFound"
    TRANSPORT_ERROR = "TransportError"
    DECODE_ERROR = "DecodeError"
    CYCLE = "Cycle"
    DEPTH_EXCEEDED = "DepthExceeded"


@dataclass(frozen=True)
class ResourceIdentity:
    """Visited-set key for a resource: (kind, api_version, name)."""
    kind: str
    api_version: str
    name: str

    def __str__(self) -> str:
        return f"{self.kind}/{self.name} ({self.api_version})"

    def to_dict(self) -> Dict[str, str]:
        return {"kind": self.kind, "apiVersion": self.api_version, "name": self.name}


@dataclass(frozen=True)
class ResourceReference:
    """
    A typed pointer from a parent resource to a child it composes.

    An empty name means the control plane has not created the child yet.
    """
    api_version: str
    kind: str
    name: str = ""

    @property
    def identity(self) -> ResourceIdentity:
        return ResourceIdentity(self.kind, self.api_version, self.name)

    @classmethod
    def from_dict(cls, data: Any) -> "ResourceReference":
        if not isinstance(data, dict):
            raise DecodeError(None, f"Resource reference must be a mapping, got {type(data).__name__}")
        api_version = str(data.get("apiVersion") or "").strip()
        kind = str(data.get("kind") or "").strip()
        if not api_version or not kind:
            raise DecodeError(None, f"Resource reference is missing apiVersion or kind: {dict(data)}")
        return cls(api_version=api_version, kind=kind, name=str(data.get("name") or "").strip())


@dataclass(frozen=True)
class Condition:
    """A timestamped observation of one aspect of a resource's health."""
    type: str
    status: str                                     # "True", "False" or "Unknown"
    reason: str = ""
    message: str = ""
    last_transition_time: Optional[datetime] = None

    @property
    def is_true(self) -> bool:
        return self.status == "True"

    def describe(self) -> str:
        """Human summary used as the report message."""
        if self.reason and self.message:
            return f"{self.reason}: {self.message}"
        return self.message or self.reason or f"{self.type}={self.status}"

    @classmethod
    def from_dict(cls, data: Any) -> "Condition":
        if not isinstance(data, dict) or "type" not in data:
            raise DecodeError(None, f"Malformed status condition: {data!r}")
        return cls(
            type=str(data["type"]),
            status=str(data.get("status", "Unknown")),
            reason=str(data.get("reason") or ""),
            message=str(data.get("message") or ""),
            last_transition_time=parse_timestamp(data.get("lastTransitionTime")),
        )


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parses an RFC 3339 timestamp as written by the API server."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise DecodeError(None, f"Invalid lastTransitionTime '{value}'")
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class ManagedResource:
    """
    The generic shape of any fetched resource.

    Each fetch produces a fresh value; the engine only reads it.
    """
    identity: ResourceIdentity
    references: Tuple[ResourceReference, ...] = ()
    conditions: Tuple[Condition, ...] = ()

    @property
    def kind(self) -> str:
        return self.identity.kind

    @property
    def name(self) -> str:
        return self.identity.name

    def conditions_of_type(self, condition_type: str) -> List[Condition]:
        return [c for c in self.conditions if c.type == condition_type]

    def __str__(self) -> str:
        return f"Name: {self.identity.name}, Kind: {self.identity.kind}, ApiVersion {self.identity.api_version}"

    @classmethod
    def from_dict(cls, payload: Any) -> "ManagedResource":
        """
        Builds a ManagedResource from a decoded API payload.
        Raises DecodeError when the payload is not a usable resource.
        """
        valid, err = _validator.validate_payload(payload)
        if not valid:
            raise DecodeError(None, err)

        identity = ResourceIdentity(
            kind=str(payload["kind"]),
            api_version=str(payload["apiVersion"]),
            name=str(payload["metadata"]["name"]),
        )
        spec = payload.get("spec") or {}
        status = payload.get("status") or {}

        try:
            references = []
            # Claims point at their composite through a single resourceRef
            if spec.get("resourceRef"):
                references.append(ResourceReference.from_dict(spec["resourceRef"]))
            references.extend(ResourceReference.from_dict(r) for r in spec.get("resourceRefs") or [])
            conditions = [Condition.from_dict(c) for c in status.get("conditions") or []]
        except DecodeError as e:
            raise DecodeError(identity, e.message)

        return cls(identity=identity, references=tuple(references), conditions=tuple(conditions))


@dataclass(frozen=True)
class DiagnosticReport:
    """Associates a resource identity with the problem found on it."""
    identity: ResourceIdentity
    state: ReportState
    message: str = ""
    reason: str = ""
    depth: int = 0
    parent: Optional[ResourceIdentity] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resource": self.identity.to_dict(),
            "state": self.state.value,
            "reason": self.reason,
            "message": self.message,
            "depth": self.depth,
            "parent": self.parent.to_dict() if self.parent else None,
        }


@dataclass
class DrillNode:
    """One visited resource in the drill tree."""
    identity: ResourceIdentity
    readiness: Optional[Readiness] = None    # None when the resource could not be fetched
    report: Optional[DiagnosticReport] = None
    children: List["DrillNode"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resource": self.identity.to_dict(),
            "readiness": self.readiness.value if self.readiness else None,
            "report": self.report.to_dict() if self.report else None,
            "children": [c.to_dict() for c in self.children],
        }


@dataclass
class DrillResult:
    """The outcome of one diagnose() traversal."""
    root: DrillNode
    reports: List[DiagnosticReport] = field(default_factory=list)
    visited: List[ResourceIdentity] = field(default_factory=list)
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return not self.reports

    def summary(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for report in self.reports:
            counts[report.state.value] = counts.get(report.state.value, 0) + 1
        return counts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "root": self.root.identity.to_dict(),
            "healthy": self.ok,
            "cancelled": self.cancelled,
            "visited": [i.to_dict() for i in self.visited],
            "summary": self.summary(),
            "reports": [r.to_dict() for r in self.reports],
            "tree": self.root.to_dict(),
        }
