"""
Centralized configuration for monitoring-status.

Uses Pydantic BaseSettings for environment variable integration
and validation. The status check receives a StatusConfig explicitly;
nothing reads the global instance behind the caller's back.

Configuration sources (in order of precedence):
1. Explicit constructor arguments
2. Environment variables (MONITORING_STATUS_*)
3. .env file
4. Default values

Example:
    from monitoringstatus.config import get_config

    config = get_config()
    print(config.querier_route)  # From MONITORING_STATUS_QUERIER_ROUTE or default

    # Override at runtime
    config = get_config(include_user_workload=True)
"""

from __future__ import annotations

import logging
import os
from typing import List, Literal, Optional

from kubernetes import client
from kubernetes import config as kube_config
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from monitoringstatus.errors import KubeConfigError

logger = logging.getLogger(__name__)


class StatusConfig(BaseSettings):
    """
    Configuration for the monitoring status check.

    All settings can be overridden via environment variables
    prefixed with MONITORING_STATUS_.

    Example:
        export MONITORING_STATUS_KUBECONFIG=~/.kube/config
        export MONITORING_STATUS_LOG_FORMAT=text
    """

    model_config = SettingsConfigDict(
        env_prefix="MONITORING_STATUS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Cluster access
    kubeconfig: Optional[str] = Field(
        default=None,
        description="Path to kubeconfig file (in-cluster config is tried first if not set)",
    )
    kube_context: Optional[str] = Field(
        default=None,
        description="Kubeconfig context to use",
    )

    # Credential lookup
    monitoring_namespace: str = Field(
        default="openshift-monitoring",
        min_length=1,
        description="Namespace of the monitoring stack and its service account",
    )
    service_account: str = Field(
        default="cluster-monitoring-operator",
        min_length=1,
        description="Service account whose token authenticates the query",
    )

    # Alert query
    querier_namespace: str = Field(
        default="openshift-monitoring",
        min_length=1,
        description="Namespace of the Thanos Querier route",
    )
    querier_route: str = Field(
        default="thanos-querier",
        min_length=1,
        description="Name of the Thanos Querier route",
    )
    alert_severity: str = Field(
        default="critical",
        min_length=1,
        description="Severity label of the alerts that degrade the stack",
    )
    include_user_workload: bool = Field(
        default=False,
        description="Also count alerts from the user workload monitoring namespace",
    )
    user_workload_namespace: str = Field(
        default="openshift-user-workload-monitoring",
        description="Namespace of user workload monitoring",
    )
    query_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="HTTP timeout for the alert query",
    )
    verify_tls: bool = Field(
        default=False,
        description="Verify the route's TLS certificate (router certs are often self-signed)",
    )

    # Logging
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="info",
        description="Logging level",
    )
    log_format: Literal["json", "text"] = Field(
        default="json",
        description="Log output format (json for Loki, text for console)",
    )

    @field_validator("kubeconfig")
    @classmethod
    def expand_path(cls, v: Optional[str]) -> Optional[str]:
        """Expand ~ and environment variables in paths."""
        if v is None:
            return v
        return os.path.expanduser(os.path.expandvars(v))

    @property
    def alert_namespaces(self) -> List[str]:
        """Namespaces whose critical alerts count towards degradation."""
        namespaces = [self.monitoring_namespace]
        if self.include_user_workload and self.user_workload_namespace:
            namespaces.append(self.user_workload_namespace)
        return namespaces


# Global singleton
_config: Optional[StatusConfig] = None


def get_config(**overrides) -> StatusConfig:
    """
    Get the global configuration instance.

    Creates a singleton on first call. Subsequent calls return
    the same instance unless overrides are provided.

    Args:
        **overrides: Override any config values

    Returns:
        StatusConfig instance
    """
    global _config

    if overrides or _config is None:
        _config = StatusConfig(**overrides)

    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None


def load_cluster_configuration(config: StatusConfig) -> client.Configuration:
    """
    Build a kubernetes client Configuration for the given settings.

    An explicit kubeconfig path or context skips the in-cluster config;
    otherwise in-cluster config is tried first, then the default kubeconfig.

    Raises:
        KubeConfigError: if no usable cluster access config is found
    """
    configuration = client.Configuration()

    if config.kubeconfig is None and config.kube_context is None:
        try:
            kube_config.load_incluster_config(client_configuration=configuration)
            logger.debug("Using in-cluster configuration")
            return configuration
        except kube_config.ConfigException:
            logger.debug("Not running in cluster, falling back to kubeconfig")

    try:
        kube_config.load_kube_config(
            config_file=config.kubeconfig,
            context=config.kube_context,
            client_configuration=configuration,
        )
    except (kube_config.ConfigException, OSError) as e:
        raise KubeConfigError("loading cluster access config failed") from e

    logger.debug(f"Using kubeconfig {config.kubeconfig or 'default'}")
    return configuration
