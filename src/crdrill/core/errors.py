#!/usr/bin/env python3
"""
CRDRILL ERRORS
--------------
Typed failures raised across the fetch boundary and the CLI glue.
Readiness outcomes are not exceptions: they become DiagnosticReports.

Author: CRDrill Team
Date: 2026-10-19
"""

from typing import Any, Optional


class CRDrillError(Exception):
    """Base class for every error CRDrill raises on purpose."""


class ConfigurationError(CRDrillError):
    """The remote connection or the offline snapshot could not be set up."""


class FetchError(CRDrillError):
    """A resource could not be retrieved. Recovered per node, fatal for the root."""

    def __init__(self, identity: Optional[Any], message: str):
        self.identity = identity
        self.message = message
        super().__init__(f"{identity}: {message}" if identity else message)


class NotFoundError(FetchError):
    """The remote store has no object for the requested path."""


class TransportError(FetchError):
    """Network, auth or server failure unrelated to readiness semantics."""


class DecodeError(FetchError):
    """The payload could not be turned into a ManagedResource."""
