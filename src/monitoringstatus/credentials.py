"""
Service account token lookup.

Finds the token secret of a service account by listing the secrets of its
namespace. Token secrets are named ``<service-account>-token-<suffix>``.
The service account also owns a token secret annotated with
``openshift.io/create-dockercfg-secrets``; that one authenticates against the
internal image registry and is skipped.

If several secrets pass the filter, the first one in the order the API
returns them wins. The API does not guarantee that order.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any

from kubernetes.client.rest import ApiException

from monitoringstatus.errors import ServiceAccountTokenMissing

logger = logging.getLogger(__name__)

# Marks the token secret used for the internal registry
DOCKERCFG_ANNOTATION = "openshift.io/create-dockercfg-secrets"


def token_secret_prefix(service_account: str) -> str:
    """Name fragment every token secret of ``service_account`` contains."""
    return f"{service_account}-token-"


def is_service_account_token(secret: Any, service_account: str) -> bool:
    """
    Check whether a secret is a usable token of the service account.

    Both must hold:
    - the secret name contains ``<service_account>-token-``
    - the registry (dockercfg) annotation is absent
    """
    name = secret.metadata.name or ""
    annotations = secret.metadata.annotations or {}
    return token_secret_prefix(service_account) in name and DOCKERCFG_ANNOTATION not in annotations


def get_service_account_token(core_api: Any, namespace: str, service_account: str) -> str:
    """
    Return the bearer token of a service account.

    Args:
        core_api: kubernetes CoreV1Api (or compatible)
        namespace: namespace the service account lives in
        service_account: service account name

    Returns:
        The decoded token string

    Raises:
        ValueError: if namespace or service_account is empty
        ServiceAccountTokenMissing: if listing fails or no secret matches
    """
    if not namespace or not service_account:
        raise ValueError("namespace and service_account must be non-empty")

    try:
        secrets = core_api.list_namespaced_secret(namespace)
    except ApiException as e:
        raise ServiceAccountTokenMissing(
            f"listing secrets in {namespace} failed"
        ) from e

    for secret in secrets.items:
        if not is_service_account_token(secret, service_account):
            continue

        encoded = (secret.data or {}).get("token")
        if not encoded:
            raise ServiceAccountTokenMissing(
                f"secret {namespace}/{secret.metadata.name} has no token"
            )
        try:
            token = base64.b64decode(encoded).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise ServiceAccountTokenMissing(
                f"secret {namespace}/{secret.metadata.name} holds an undecodable token"
            ) from e

        logger.debug(f"Using token secret {namespace}/{secret.metadata.name}")
        return token

    raise ServiceAccountTokenMissing(
        f"cannot find token for {namespace}/{service_account} service account"
    )
