"""
monitoring-status - Degraded-state detection for the cluster monitoring stack.

Reports the monitoring stack as degraded when critical alerts are firing in
the monitoring namespace, or when the alert state cannot be determined at all.

Key steps:
- Look up the cluster-monitoring-operator service account token
- Resolve the Thanos Querier route and run one ALERTS query
- Reduce the result count to (degraded, reason, error)

Example usage:
    from monitoringstatus import HealthChecker, get_config

    status = HealthChecker(get_config()).check()
    if status.degraded:
        print(status.reason, status.error)
"""

__version__ = "0.1.0"
__all__ = [
    "HealthChecker",
    "DegradationStatus",
    "StatusConfig",
    "get_config",
    "is_degraded",
    "__version__",
]


# Lazy imports to avoid loading the kubernetes client at import time
def __getattr__(name: str):
    if name in ("HealthChecker", "DegradationStatus", "is_degraded"):
        from monitoringstatus import status
        return getattr(status, name)
    if name in ("StatusConfig", "get_config"):
        from monitoringstatus import config
        return getattr(config, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
