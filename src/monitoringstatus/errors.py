"""
Failure taxonomy for the monitoring status check.

Every step of the check raises a subclass of HealthCheckError. The class
carries the machine-readable reason code reported alongside a degraded
status, so the caller never has to map exception types to strings itself.
"""

from __future__ import annotations

__all__ = [
    "REASON_ALERTS_FIRING",
    "REASON_KUBE_CONFIG",
    "REASON_QUERIER_CLIENT",
    "REASON_QUERIER_QUERY",
    "REASON_QUERIER_RESPONSE",
    "REASON_ROUTE_CLIENT",
    "REASON_TOKEN_MISSING",
    "HealthCheckError",
    "RouteClientError",
    "KubeConfigError",
    "ServiceAccountTokenMissing",
    "QuerierClientError",
    "QuerierQueryFailed",
    "QueryResponseError",
    "AlertsFiringError",
]

REASON_ALERTS_FIRING = "AlertsFiring"
REASON_ROUTE_CLIENT = "OpenShiftRouteClientError"
REASON_KUBE_CONFIG = "KubeConfigError"
REASON_TOKEN_MISSING = "ServiceAccountTokenMissing"
REASON_QUERIER_CLIENT = "ThanosQuerierClientError"
REASON_QUERIER_QUERY = "ThanosQuerierQueryFailed"
REASON_QUERIER_RESPONSE = "ThanosQuerierResponseInvalid"


class HealthCheckError(Exception):
    """Base error for the status check; ``reason`` is never empty."""

    reason: str = "HealthCheckFailed"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        if self.__cause__ is not None:
            return f"{self.message}: {self.__cause__}"
        return self.message


class RouteClientError(HealthCheckError):
    """Creating the OpenShift route client failed."""

    reason = REASON_ROUTE_CLIENT


class KubeConfigError(HealthCheckError):
    """Loading cluster access config or creating the kube client failed."""

    reason = REASON_KUBE_CONFIG


class ServiceAccountTokenMissing(HealthCheckError):
    """No usable service account token secret was found."""

    reason = REASON_TOKEN_MISSING


class QuerierClientError(HealthCheckError):
    """The Thanos Querier client could not be created from its route."""

    reason = REASON_QUERIER_CLIENT


class QuerierQueryFailed(HealthCheckError):
    """The query request failed or was rejected by the querier."""

    reason = REASON_QUERIER_QUERY


class QueryResponseError(HealthCheckError):
    """The querier answered with a body that does not parse."""

    reason = REASON_QUERIER_RESPONSE


class AlertsFiringError(HealthCheckError):
    """Critical alerts are firing around the monitoring stack."""

    reason = REASON_ALERTS_FIRING

    def __init__(self, count: int):
        self.count = count
        super().__init__("alerts around monitoring stack are firing")
