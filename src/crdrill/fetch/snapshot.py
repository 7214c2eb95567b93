#!/usr/bin/env python3
"""
CRDRILL SNAPSHOT FETCHER - Offline Store
----------------------------------------
Serves resources from memory instead of a live API server. The store is
filled from plain dicts or from YAML dumps such as the output of
`kubectl get <type> -o yaml` (multi-document files and `kind: List`
wrappers are both understood).

Used for offline post-mortems (--from-file) and for deterministic tests.

Author: CRDrill Team
Date: 2026-10-19
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from ruamel.yaml import YAML, YAMLError

from crdrill.core.errors import ConfigurationError, DecodeError, FetchError, NotFoundError
from crdrill.core.models import ManagedResource, ResourceIdentity
from crdrill.fetch.paths import Pluralizer, resource_path

logger = logging.getLogger("crdrill.fetch")


class SnapshotFetcher:
    """
    In-memory Fetcher keyed by the same REST path the cluster would serve.
    Records every fetch so callers can audit traversal order.
    """

    def __init__(self, documents: Iterable[Dict[str, Any]] = (), pluralizer: Optional[Pluralizer] = None):
        self.pluralizer = pluralizer or Pluralizer()
        self._store: Dict[str, Any] = {}
        self._failures: Dict[str, FetchError] = {}
        self.fetch_log: List[ResourceIdentity] = []
        for doc in documents:
            self.add(doc)

    def _path(self, kind: str, api_version: str, name: str) -> str:
        return resource_path(api_version, kind, name, self.pluralizer)

    def add(self, doc: Dict[str, Any]):
        """Registers a resource under the identity it declares."""
        try:
            kind, api_version, name = doc["kind"], doc["apiVersion"], doc["metadata"]["name"]
        except (KeyError, TypeError):
            raise DecodeError(None, f"Document does not declare kind/apiVersion/metadata.name: {doc!r}")
        if not all(isinstance(value, str) and value.strip() for value in (kind, api_version, name)):
            raise DecodeError(None, f"Document identity must be non-empty strings, got "
                                    f"kind={kind!r} apiVersion={api_version!r} name={name!r}")
        self._store[self._path(kind, api_version, name)] = doc

    def add_raw(self, kind: str, api_version: str, name: str, payload: Any):
        """Registers an arbitrary payload, valid or not, under an explicit identity."""
        self._store[self._path(kind, api_version, name)] = payload

    def add_failure(self, kind: str, api_version: str, name: str, error: FetchError):
        """Makes every fetch of this identity raise the given error."""
        self._failures[self._path(kind, api_version, name)] = error

    def __len__(self) -> int:
        return len(self._store)

    def fetch(self, kind: str, api_version: str, name: str) -> ManagedResource:
        identity = ResourceIdentity(kind, api_version, name)
        self.fetch_log.append(identity)
        try:
            path = self._path(kind, api_version, name)
        except DecodeError as e:
            raise DecodeError(identity, e.message)

        if path in self._failures:
            raise self._failures[path]
        if path not in self._store:
            raise NotFoundError(identity, f"the server could not find the requested resource ({path})")

        try:
            return ManagedResource.from_dict(self._store[path])
        except DecodeError as e:
            raise DecodeError(identity, e.message)

    @classmethod
    def from_files(cls, paths: Iterable[Union[str, Path]], pluralizer: Optional[Pluralizer] = None) -> "SnapshotFetcher":
        """
        Loads every resource found in the given YAML files.
        Raises ConfigurationError when a file is missing or unparseable.
        """
        yaml = YAML(typ='safe')
        fetcher = cls(pluralizer=pluralizer)

        for raw_path in paths:
            path = Path(raw_path)
            try:
                # BOM-aware read, same as manifests saved from Windows shells
                docs = list(yaml.load_all(path.read_text(encoding='utf-8-sig')))
            except OSError as e:
                raise ConfigurationError(f"Unable to read snapshot '{path}': {e}")
            except YAMLError as e:
                raise ConfigurationError(f"Snapshot '{path}' is not valid YAML: {e}")

            for doc in docs:
                for item in _expand(doc):
                    try:
                        fetcher.add(item)
                    except DecodeError as e:
                        logger.warning(f"Skipping document in {path.name}: {e.message}")

        logger.info(f"Loaded {len(fetcher)} resources from snapshot")
        return fetcher


def _expand(doc: Any) -> List[Any]:
    """Unwraps `kind: List` documents; drops empty documents."""
    if doc is None:
        return []
    if isinstance(doc, dict) and doc.get("kind") == "List":
        return [item for item in doc.get("items") or [] if item is not None]
    return [doc]
