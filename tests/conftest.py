"""
Pytest configuration and fixtures for monitoring-status tests.
"""

from __future__ import annotations

import base64
import json
import logging
import os
from typing import Callable, Dict, Generator, List, Optional
from unittest.mock import MagicMock

import httpx
import pytest

from monitoringstatus.config import StatusConfig, reset_config
from monitoringstatus.credentials import DOCKERCFG_ANNOTATION


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def clean_env() -> Generator[None, None, None]:
    """Drop MONITORING_STATUS_* variables and the config singleton around each test."""
    original = {k: v for k, v in os.environ.items() if k.startswith("MONITORING_STATUS_")}
    for key in original:
        os.environ.pop(key)
    reset_config()

    yield

    reset_config()
    package_logger = logging.getLogger("monitoringstatus")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)
    for key in [k for k in os.environ if k.startswith("MONITORING_STATUS_")]:
        os.environ.pop(key)
    os.environ.update(original)


@pytest.fixture
def status_config() -> StatusConfig:
    """Config with defaults, isolated from any .env file."""
    return StatusConfig(_env_file=None)


# ============================================================================
# Kubernetes Mock Fixtures
# ============================================================================


def make_secret(
    name: str,
    token: Optional[str] = "sekret",
    annotations: Optional[Dict[str, str]] = None,
) -> MagicMock:
    """Mock V1Secret with a base64-encoded token, as the API returns it."""
    secret = MagicMock()
    secret.metadata.name = name
    secret.metadata.annotations = annotations
    if token is None:
        secret.data = {}
    else:
        secret.data = {"token": base64.b64encode(token.encode()).decode()}
    return secret


@pytest.fixture
def monitoring_secrets() -> List[MagicMock]:
    """Token secrets of cluster-monitoring-operator as OpenShift creates them."""
    return [
        make_secret("cluster-monitoring-operator-dockercfg-q8r2x", token=None),
        make_secret(
            "cluster-monitoring-operator-token-xyz",
            token="registry-token",
            annotations={DOCKERCFG_ANNOTATION: "cluster-monitoring-operator-dockercfg-q8r2x"},
        ),
        make_secret("cluster-monitoring-operator-token-abc", token="query-token"),
    ]


@pytest.fixture
def mock_core_api(monitoring_secrets: List[MagicMock]) -> MagicMock:
    """Mock CoreV1Api listing the monitoring secrets."""
    api = MagicMock()
    api.list_namespaced_secret.return_value.items = monitoring_secrets
    return api


@pytest.fixture
def mock_custom_api() -> MagicMock:
    """Mock CustomObjectsApi returning the thanos-querier route."""
    api = MagicMock()
    api.get_namespaced_custom_object.return_value = {
        "apiVersion": "route.openshift.io/v1",
        "kind": "Route",
        "metadata": {"name": "thanos-querier", "namespace": "openshift-monitoring"},
        "spec": {"host": "thanos-querier-openshift-monitoring.apps.example.com"},
    }
    return api


# ============================================================================
# Querier Fixtures
# ============================================================================


def alerts_body(count: int) -> dict:
    """Prometheus instant query response with ``count`` ALERTS series."""
    return {
        "status": "success",
        "data": {
            "resultType": "vector",
            "result": [
                {
                    "metric": {
                        "__name__": "ALERTS",
                        "alertname": f"CriticalAlert{i}",
                        "alertstate": "firing",
                        "namespace": "openshift-monitoring",
                        "severity": "critical",
                    },
                    "value": [1700000000.0, "1"],
                }
                for i in range(count)
            ],
        },
    }


@pytest.fixture
def querier_transport() -> Callable[..., httpx.MockTransport]:
    """Build a MockTransport answering every query with a fixed response.

    Requests are recorded on the returned transport's ``requests`` list.
    """

    def factory(body=None, status_code: int = 200, raw: Optional[bytes] = None) -> httpx.MockTransport:
        requests: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if raw is not None:
                return httpx.Response(status_code, content=raw)
            return httpx.Response(status_code, content=json.dumps(body).encode())

        transport = httpx.MockTransport(handler)
        transport.requests = requests
        return transport

    return factory


@pytest.fixture
def secret_factory() -> Callable[..., MagicMock]:
    return make_secret


@pytest.fixture
def alerts_response() -> Callable[[int], dict]:
    return alerts_body
