#!/usr/bin/env python3
"""
CRDRILL CLUSTER FETCHER - Live API Server
-----------------------------------------
Retrieves resources straight from the Kubernetes API server using the
official client. Only raw GETs are issued; nothing is ever written.

Author: CRDrill Team
Date: 2026-10-19
"""

import json
import logging
from typing import Any, Optional

import urllib3
from kubernetes import config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from crdrill.core.errors import ConfigurationError, DecodeError, NotFoundError, TransportError
from crdrill.core.models import ManagedResource, ResourceIdentity
from crdrill.fetch.paths import Pluralizer, resource_path

logger = logging.getLogger("crdrill.fetch")


class ClusterFetcher:
    """
    Fetcher backed by a kubernetes.client.ApiClient.
    Owns the request deadline; the engine never times out on its own.
    """

    def __init__(self, api_client: Any, pluralizer: Optional[Pluralizer] = None,
                 timeout: Optional[float] = None):
        self.api_client = api_client
        self.pluralizer = pluralizer or Pluralizer()
        self.timeout = timeout

    @classmethod
    def from_kubeconfig(cls, kubeconfig: str, context: Optional[str] = None,
                        pluralizer: Optional[Pluralizer] = None,
                        timeout: Optional[float] = None) -> "ClusterFetcher":
        """
        Builds an API client from a kubeconfig file.
        Failure here is fatal for the whole run.
        """
        logger.info(f"Using kubeconfig: {kubeconfig}")
        try:
            api_client = config.new_client_from_config(config_file=kubeconfig, context=context)
        except (ConfigException, OSError, TypeError) as e:
            raise ConfigurationError(f"Unable to build a cluster connection from '{kubeconfig}': {e}")
        return cls(api_client, pluralizer=pluralizer, timeout=timeout)

    def fetch(self, kind: str, api_version: str, name: str) -> ManagedResource:
        identity = ResourceIdentity(kind, api_version, name)
        try:
            path = resource_path(api_version, kind, name, self.pluralizer)
        except DecodeError as e:
            raise DecodeError(identity, e.message)
        logger.debug(f"Querying: {path}")

        try:
            response = self.api_client.call_api(
                path, "GET",
                header_params={"Accept": "application/json"},
                auth_settings=["BearerToken"],
                _return_http_data_only=True,
                _preload_content=False,
                _request_timeout=self.timeout,
            )
        except ApiException as e:
            if e.status == 404:
                raise NotFoundError(identity, f"the server could not find the requested resource ({path})")
            raise TransportError(identity, f"HTTP {e.status} {e.reason} on {path}")
        except (urllib3.exceptions.HTTPError, OSError) as e:
            raise TransportError(identity, f"Request to {path} failed: {e}")

        try:
            payload = json.loads(response.data)
        except (ValueError, TypeError) as e:
            raise DecodeError(identity, f"Response from {path} is not valid JSON: {e}")

        try:
            return ManagedResource.from_dict(payload)
        except DecodeError as e:
            raise DecodeError(identity, e.message)
