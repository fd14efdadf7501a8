"""OpenShift route resolution through the custom objects API."""

from __future__ import annotations

import logging
from typing import Any

from kubernetes.client.rest import ApiException

from monitoringstatus.errors import QuerierClientError

logger = logging.getLogger(__name__)

ROUTE_GROUP = "route.openshift.io"
ROUTE_VERSION = "v1"
ROUTE_PLURAL = "routes"


def get_route_host(custom_api: Any, namespace: str, name: str) -> str:
    """
    Return ``spec.host`` of a route.

    Raises:
        QuerierClientError: if the route cannot be read or has no host
    """
    try:
        route = custom_api.get_namespaced_custom_object(
            group=ROUTE_GROUP,
            version=ROUTE_VERSION,
            namespace=namespace,
            plural=ROUTE_PLURAL,
            name=name,
        )
    except ApiException as e:
        raise QuerierClientError(f"reading route {namespace}/{name} failed") from e

    host = (route.get("spec") or {}).get("host")
    if not host:
        raise QuerierClientError(f"route {namespace}/{name} has no host")

    logger.debug(f"Route {namespace}/{name} resolved to {host}")
    return host


def route_url(host: str) -> str:
    # Router always terminates TLS for the querier route
    return f"https://{host}"
