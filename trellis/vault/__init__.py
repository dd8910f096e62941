"""Vault bootstrap: namespace, KV mount, policies, and per-service AppRoles."""

from __future__ import annotations

from .bootstrap import (
    APPROLE_PATH,
    VaultBootstrapConfig,
    VaultBootstrapper,
    approle_secret_path,
)
from .client import SecretStore, VaultClient, VaultConfig
from .errors import (
    VaultAPIError,
    VaultConfigError,
    VaultMountConflictError,
    VaultResponseShapeError,
)
from .models import AppRoleSettings, MountInfo
from .policy import CI_POLICY_NAME, ci_policy, service_policy, service_policy_name

__all__ = [
    "APPROLE_PATH",
    "CI_POLICY_NAME",
    "AppRoleSettings",
    "MountInfo",
    "SecretStore",
    "VaultAPIError",
    "VaultBootstrapConfig",
    "VaultBootstrapper",
    "VaultClient",
    "VaultConfig",
    "VaultConfigError",
    "VaultMountConflictError",
    "VaultResponseShapeError",
    "approle_secret_path",
    "ci_policy",
    "service_policy",
    "service_policy_name",
]
