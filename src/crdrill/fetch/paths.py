#!/usr/bin/env python3
"""
CRDRILL PATHS - Reference Addressing
------------------------------------
Maps a typed reference (kind, apiVersion, name) to the REST path the API
server serves it on. Kinds are lower-cased and pluralized with English
rules, the same way the API server names resource collections.

Author: CRDrill Team
Date: 2026-10-19
"""

from typing import Dict, Optional

import inflect

from crdrill.core.errors import DecodeError


class Pluralizer:
    """
    Turns a singular Kind into its lower-case collection name.
    Passed explicitly to fetchers; there is no shared module-level instance.

    English rules add a second "s" to kinds that already end in one
    (DNS -> dnss); such kinds need an explicit override (--plural DNS=dnses).
    """

    def __init__(self, overrides: Optional[Dict[str, str]] = None):
        self._engine = inflect.engine()
        # Irregular CRD plurals, keyed by lower-case kind
        self.overrides = {k.lower(): v.lower() for k, v in (overrides or {}).items()}

    def plural(self, kind: str) -> str:
        if not isinstance(kind, str) or not kind.strip():
            raise DecodeError(None, f"Cannot build a resource path for kind {kind!r}")
        word = kind.strip().lower()
        if word in self.overrides:
            return self.overrides[word]
        return self._engine.plural_noun(word)


def resource_path(api_version: str, kind: str, name: str, pluralizer: Pluralizer) -> str:
    """
    Builds the canonical lookup path for a cluster-scoped object.

    Named groups live under /apis/<group>/<version>, the legacy core
    group ("v1") under /api/<version>.
    """
    prefix = "apis" if "/" in api_version else "api"
    return f"/{prefix}/{api_version}/{pluralizer.plural(kind)}/{name}"
