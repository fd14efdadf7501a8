"""
Degraded-state check for the cluster monitoring stack.

The stack is degraded when critical alerts fire in the monitoring namespace,
or when the alerts cannot be queried at all, since that implies a problem
somewhere in the cluster. The check runs three steps in order:

1. look up the service account token (credentials)
2. resolve the querier route and run the ALERTS query (prometheus)
3. reduce the outcome to a DegradationStatus (decide)

Nothing is cached between checks; every call builds fresh clients and reads
a fresh token.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import httpx
from kubernetes import client

from monitoringstatus.config import StatusConfig, load_cluster_configuration
from monitoringstatus.credentials import get_service_account_token
from monitoringstatus.errors import (
    AlertsFiringError,
    HealthCheckError,
    KubeConfigError,
    RouteClientError,
)
from monitoringstatus.log import emit_status_event
from monitoringstatus.prometheus import PrometheusClient, build_alerts_query

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DegradationStatus:
    """Result of one status check."""

    degraded: bool
    reason: str = ""
    error: Optional[HealthCheckError] = None

    def __post_init__(self):
        if self.degraded and not self.reason:
            raise ValueError("a degraded status needs a reason")
        if not self.degraded and (self.reason or self.error is not None):
            raise ValueError("a healthy status carries no reason or error")

    @classmethod
    def healthy(cls) -> "DegradationStatus":
        return cls(degraded=False)

    @property
    def message(self) -> str:
        """Human-readable summary, wrapping the error with the failed step."""
        if self.error is None:
            return "monitoring stack is healthy"
        if isinstance(self.error, AlertsFiringError):
            return str(self.error)
        return f"could not query for alerts firing: {self.error}"

    def as_tuple(self) -> Tuple[bool, str, Optional[HealthCheckError]]:
        return self.degraded, self.reason, self.error

    def to_dict(self) -> Dict[str, Any]:
        return {
            "degraded": self.degraded,
            "reason": self.reason,
            "message": self.message,
            "error": str(self.error) if self.error is not None else None,
        }


def decide(alert_count: int, error: Optional[HealthCheckError] = None) -> DegradationStatus:
    """
    Reduce the outcome of the alert query to a status.

    Evaluated in order:
    1. any step failed -> degraded with that step's reason
    2. alerts firing -> degraded with reason AlertsFiring
    3. otherwise healthy
    """
    if error is not None:
        return DegradationStatus(degraded=True, reason=error.reason, error=error)
    if alert_count > 0:
        firing = AlertsFiringError(alert_count)
        return DegradationStatus(degraded=True, reason=firing.reason, error=firing)
    return DegradationStatus.healthy()


class HealthChecker:
    """
    Runs the degraded-state check against one cluster.

    API objects can be injected for testing; otherwise they are built from
    the config on every check.

    Example:
        checker = HealthChecker(get_config(kubeconfig="~/.kube/config"))
        status = checker.check()
        print(status.degraded, status.reason)
    """

    def __init__(
        self,
        config: StatusConfig,
        core_api: Any = None,
        custom_api: Any = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.config = config
        self._core_api = core_api
        self._custom_api = custom_api
        self._transport = transport

    @property
    def query(self) -> str:
        return build_alerts_query(self.config.alert_namespaces, self.config.alert_severity)

    def _build_api_client(self) -> client.ApiClient:
        configuration = load_cluster_configuration(self.config)
        try:
            return client.ApiClient(configuration)
        except (ValueError, OSError) as e:
            raise KubeConfigError("creating kube api client failed") from e

    def _apis(self, api_client: Optional[client.ApiClient]) -> Tuple[Any, Any]:
        custom_api = self._custom_api
        if custom_api is None:
            try:
                custom_api = client.CustomObjectsApi(api_client)
            except (ValueError, OSError) as e:
                raise RouteClientError("creating openshift route client failed") from e

        core_api = self._core_api
        if core_api is None:
            try:
                core_api = client.CoreV1Api(api_client)
            except (ValueError, OSError) as e:
                raise KubeConfigError("creating kube client failed") from e

        return core_api, custom_api

    def count_firing_alerts(self) -> int:
        """
        Return the number of firing alerts matching the query.

        Raises:
            HealthCheckError: subclass naming the step that failed
        """
        api_client = None
        if self._core_api is None or self._custom_api is None:
            api_client = self._build_api_client()

        try:
            core_api, custom_api = self._apis(api_client)
            token = get_service_account_token(
                core_api, self.config.monitoring_namespace, self.config.service_account
            )
            with PrometheusClient.from_route(
                custom_api,
                self.config.querier_namespace,
                self.config.querier_route,
                token,
                timeout_seconds=self.config.query_timeout_seconds,
                verify=self.config.verify_tls,
                transport=self._transport,
            ) as prom:
                response = prom.query(self.query)
        finally:
            if api_client is not None:
                api_client.close()

        count = response.alert_count
        if count > 0:
            logger.warning(
                f"{count} alert(s) firing for {self.query}: "
                f"{response.model_dump_json(by_alias=True)}"
            )
        return count

    def check(self) -> DegradationStatus:
        """Run the check; failures become a degraded status instead of raising."""
        try:
            count = self.count_firing_alerts()
        except HealthCheckError as e:
            logger.error(f"could not query for alerts firing: {e}")
            status = decide(0, error=e)
        else:
            status = decide(count)

        emit_status_event(status, self.config.monitoring_namespace)
        return status


def is_degraded(config: StatusConfig) -> DegradationStatus:
    """Run a single status check with clients built from ``config``."""
    return HealthChecker(config).check()
