"""
Prometheus HTTP API client for the Thanos Querier.

Issues instant queries against ``/api/v1/query`` with a bearer token and
decodes the response into typed models, so the number of returned series is
a plain ``len()`` rather than a path lookup into untyped JSON.

Example:
    with PrometheusClient.from_route(custom_api, "openshift-monitoring",
                                     "thanos-querier", token) as prom:
        response = prom.query(build_alerts_query(["openshift-monitoring"]))
        print(response.alert_count)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from monitoringstatus.errors import QuerierQueryFailed, QueryResponseError
from monitoringstatus.routes import get_route_host, route_url

__all__ = [
    "PrometheusClient",
    "QueryData",
    "QueryResponse",
    "Sample",
    "build_alerts_query",
]

logger = logging.getLogger(__name__)

QUERY_PATH = "/api/v1/query"


def build_alerts_query(namespaces: Sequence[str], severity: str = "critical") -> str:
    """
    Build the ALERTS selector for the given namespaces and severity.

    A single namespace uses an exact match; several use a regex match.
    """
    if not namespaces:
        raise ValueError("at least one namespace is required")
    if len(namespaces) == 1:
        return f'ALERTS{{namespace="{namespaces[0]}", severity="{severity}"}}'
    joined = "|".join(namespaces)
    return f'ALERTS{{namespace=~"{joined}", severity="{severity}"}}'


class Sample(BaseModel):
    """One series of an instant vector result."""

    model_config = ConfigDict(extra="ignore")

    metric: Dict[str, str] = Field(default_factory=dict)
    value: Optional[List[Any]] = None


class QueryData(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    result_type: str = Field(default="vector", alias="resultType")
    result: List[Sample]


class QueryResponse(BaseModel):
    """Body of a Prometheus ``/api/v1/query`` response."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    status: str = "success"
    data: Optional[QueryData] = None
    error_type: Optional[str] = Field(default=None, alias="errorType")
    error: Optional[str] = None

    @property
    def alert_count(self) -> int:
        if self.data is None:
            raise QueryResponseError("query response carries no data")
        return len(self.data.result)


class PrometheusClient:
    """Client for the Prometheus query API behind an OpenShift route."""

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout_seconds: float = 30.0,
        verify: bool = False,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Querier base URL, e.g. https://thanos-querier.apps.example.com
            token: Bearer token used for every request
            timeout_seconds: HTTP request timeout
            verify: Verify the server certificate
            transport: Optional httpx transport (tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout_seconds
        self._http = httpx.Client(
            base_url=self.base_url,
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout_seconds,
            verify=verify,
            transport=transport,
        )

    @classmethod
    def from_route(
        cls,
        custom_api: Any,
        namespace: str,
        name: str,
        token: str,
        **kwargs: Any,
    ) -> "PrometheusClient":
        """Create a client for the host of an OpenShift route.

        Raises:
            QuerierClientError: if the route cannot be resolved
        """
        host = get_route_host(custom_api, namespace, name)
        return cls(route_url(host), token, **kwargs)

    def __enter__(self) -> "PrometheusClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def query_raw(self, expr: str) -> bytes:
        """Run an instant query and return the raw response body.

        Raises:
            QuerierQueryFailed: on transport errors or a non-200 status
        """
        try:
            response = self._http.get(QUERY_PATH, params={"query": expr})
        except httpx.RequestError as e:
            raise QuerierQueryFailed(f"querying {self.base_url} failed") from e

        if response.status_code != httpx.codes.OK:
            raise QuerierQueryFailed(
                f"unexpected status code {response.status_code} from {self.base_url}: "
                f"{response.text[:200]}"
            )
        return response.content

    def query(self, expr: str) -> QueryResponse:
        """Run an instant query and decode the response.

        Raises:
            QuerierQueryFailed: on transport errors, non-200 or non-success status
            QueryResponseError: if the body is not a valid query response
        """
        body = self.query_raw(expr)
        try:
            result = QueryResponse.model_validate_json(body)
        except ValidationError as e:
            raise QueryResponseError("parsing query response failed") from e

        if result.status != "success":
            raise QuerierQueryFailed(
                f"query returned status {result.status}: {result.error_type} {result.error}"
            )
        if result.data is None:
            raise QueryResponseError("successful query response carries no data")
        return result
