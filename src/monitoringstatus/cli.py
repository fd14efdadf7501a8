"""
monitoring-status CLI - Report whether the monitoring stack is degraded.

Commands:
    monitoring-status check    Run the degraded-state check
    monitoring-status query    Print the alert query the check issues
"""

from __future__ import annotations

import json
import sys
from typing import Any, Dict, Optional

import click

from monitoringstatus.config import StatusConfig
from monitoringstatus.log import configure_logging
from monitoringstatus.prometheus import build_alerts_query
from monitoringstatus.status import HealthChecker


def _build_config(**options: Any) -> StatusConfig:
    overrides: Dict[str, Any] = {k: v for k, v in options.items() if v is not None}
    return StatusConfig(**overrides)


@click.group()
@click.version_option(package_name="monitoring-status")
def main():
    """Degraded-state check for the cluster monitoring stack."""
    pass


@main.command("check")
@click.option("--kubeconfig", type=click.Path(dir_okay=False), help="Path to kubeconfig file")
@click.option("--context", "kube_context", help="Kubeconfig context to use")
@click.option("--namespace", "-n", "monitoring_namespace", help="Monitoring namespace")
@click.option("--service-account", help="Service account whose token is used")
@click.option("--include-user-workload", is_flag=True,
              help="Also count alerts from user workload monitoring")
@click.option("--verify-tls", is_flag=True, help="Verify the route certificate")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text")
@click.option("--log-format", type=click.Choice(["json", "text"]), default=None)
def check(
    kubeconfig: Optional[str],
    kube_context: Optional[str],
    monitoring_namespace: Optional[str],
    service_account: Optional[str],
    include_user_workload: bool,
    verify_tls: bool,
    output_format: str,
    log_format: Optional[str],
):
    """Check whether the monitoring stack is degraded.

    Exits 0 when healthy and 1 when degraded, including when the
    alert state could not be determined.

    \b
    Examples:
        monitoring-status check
        monitoring-status check --kubeconfig ~/.kube/config --format json
    """
    config = _build_config(
        kubeconfig=kubeconfig,
        kube_context=kube_context,
        monitoring_namespace=monitoring_namespace,
        service_account=service_account,
        include_user_workload=include_user_workload or None,
        verify_tls=verify_tls or None,
        log_format=log_format,
    )
    # stdout carries the status document only
    configure_logging(config.log_level, config.log_format, stream=sys.stderr)

    status = HealthChecker(config).check()

    if output_format == "json":
        click.echo(json.dumps(status.to_dict(), indent=2))
    elif status.degraded:
        click.echo(click.style(f"✗ Degraded ({status.reason})", fg="red", bold=True))
        click.echo(f"  {status.message}")
    else:
        click.echo(click.style("✓ Healthy", fg="green", bold=True))

    if status.degraded:
        sys.exit(1)


@main.command("query")
@click.option("--namespace", "-n", "monitoring_namespace", help="Monitoring namespace")
@click.option("--include-user-workload", is_flag=True,
              help="Also count alerts from user workload monitoring")
def query(monitoring_namespace: Optional[str], include_user_workload: bool):
    """Print the PromQL expression the check runs."""
    config = _build_config(
        monitoring_namespace=monitoring_namespace,
        include_user_workload=include_user_workload or None,
    )
    click.echo(build_alerts_query(config.alert_namespaces, config.alert_severity))


if __name__ == "__main__":
    main()
