"""Bootstrap Vault for the service catalogue.

The bootstrapper is idempotent: every step reads the current state first and
writes only when it is missing or has drifted. Global prerequisites (namespace,
KV mount, AppRole auth, CI policy) propagate their errors because nothing else
can succeed without them; per-service failures are recorded and the run moves
on to the next service.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from trellis.common.env import env_bool, env_str
from trellis.common.outcomes import Action, ProvisionResult
from trellis.logging import get_logger, log_info, log_warning

from .errors import VaultMountConflictError
from .models import AppRoleSettings
from .policy import (
    CI_POLICY_NAME,
    ci_policy,
    normalise_policy,
    service_policy,
    service_policy_name,
)

if typ.TYPE_CHECKING:
    from trellis.services.models import Service, ServiceCatalogue

    from .client import VaultClient

logger = get_logger(__name__)

APPROLE_PATH = "approle"
DEFAULT_KV_MOUNT = "secret"
DEFAULT_TOKEN_TTL_S = 3600
DEFAULT_TOKEN_MAX_TTL_S = 4 * 3600


def approle_secret_path(service: str) -> str:
    """Return the KV path holding a service's AppRole credentials."""
    return f"services/{service}/approle"


@dc.dataclass(frozen=True, slots=True)
class VaultBootstrapConfig:
    """Behaviour of a Vault bootstrap run.

    Attributes
    ----------
    kv_mount
        Path of the KV v2 secrets engine holding service secrets.
    namespace
        Namespace to ensure before anything else; None skips the step.
    token_ttl_s, token_max_ttl_s
        Token lifetimes applied to every service AppRole.
    dry_run
        Record intended changes without writing to Vault.

    """

    kv_mount: str = DEFAULT_KV_MOUNT
    namespace: str | None = None
    token_ttl_s: int = DEFAULT_TOKEN_TTL_S
    token_max_ttl_s: int = DEFAULT_TOKEN_MAX_TTL_S
    dry_run: bool = False

    @classmethod
    def from_env(cls) -> VaultBootstrapConfig:
        """Read ``TRELLIS_VAULT_KV_MOUNT``, ``VAULT_NAMESPACE``, ``TRELLIS_DRY_RUN``."""
        return cls(
            kv_mount=env_str("TRELLIS_VAULT_KV_MOUNT", DEFAULT_KV_MOUNT),
            namespace=env_str("VAULT_NAMESPACE") or None,
            dry_run=env_bool("TRELLIS_DRY_RUN"),
        )


def _role_matches(observed: AppRoleSettings, desired: AppRoleSettings) -> bool:
    return (
        sorted(observed.token_policies) == sorted(desired.token_policies)
        and observed.token_ttl == desired.token_ttl
        and observed.token_max_ttl == desired.token_max_ttl
        and observed.secret_id_ttl == desired.secret_id_ttl
    )


class VaultBootstrapper:
    """Create or update Vault resources for every catalogued service."""

    def __init__(self, client: VaultClient, config: VaultBootstrapConfig) -> None:
        """Wire the bootstrapper to a Vault client."""
        self._client = client
        self._config = config

    def run(self, catalogue: ServiceCatalogue) -> ProvisionResult:
        """Apply the bootstrap steps and return the recorded outcome."""
        result = ProvisionResult()
        if self._config.namespace and not self._ensure_namespace(
            result, self._config.namespace
        ):
            self._plan_fresh_namespace(result, catalogue)
            return result
        self._ensure_kv_mount(result)
        self._ensure_approle_auth(result)
        self._ensure_policy(
            result,
            "*",
            CI_POLICY_NAME,
            ci_policy(catalogue.names, self._config.kv_mount),
        )

        for service in catalogue.services:
            try:
                self._bootstrap_service(result, service)
            except Exception as exc:  # noqa: BLE001 - isolate per-service failures
                log_warning(
                    logger,
                    "%s: Vault bootstrap failed: %s",
                    service.name,
                    exc,
                    exc_info=exc,
                )
                result.record(
                    service.name,
                    "service",
                    service.name,
                    Action.FAILED,
                    str(exc) or type(exc).__name__,
                )
        return result

    def desired_role(self, service: Service) -> AppRoleSettings:
        """Return the AppRole settings a service should have."""
        return AppRoleSettings(
            token_policies=[service_policy_name(service.name), *service.policies],
            token_ttl=self._config.token_ttl_s,
            token_max_ttl=self._config.token_max_ttl_s,
            secret_id_ttl=0,
        )

    def _bootstrap_service(self, result: ProvisionResult, service: Service) -> None:
        self._ensure_policy(
            result,
            service.name,
            service_policy_name(service.name),
            service_policy(service.name, self._config.kv_mount),
        )
        self._ensure_role(result, service)
        self._ensure_role_credentials(result, service)

    def _ensure_namespace(self, result: ProvisionResult, name: str) -> bool:
        """Ensure the namespace and return False when it only exists in a dry run."""
        if self._client.namespace_exists(name):
            result.record("*", "namespace", name, Action.UNCHANGED)
            return True
        result.record("*", "namespace", name, Action.CREATED)
        if self._config.dry_run:
            return False
        self._client.create_namespace(name)
        log_info(logger, "Created Vault namespace %s", name)
        return True

    def _plan_fresh_namespace(
        self, result: ProvisionResult, catalogue: ServiceCatalogue
    ) -> None:
        # Nothing can be read inside a namespace that does not exist yet.
        mount = self._config.kv_mount
        result.record("*", "mount", mount, Action.CREATED, "kv v2")
        result.record("*", "auth", APPROLE_PATH, Action.CREATED)
        result.record("*", "policy", CI_POLICY_NAME, Action.CREATED)
        for service in catalogue.services:
            name = service.name
            result.record(name, "policy", service_policy_name(name), Action.CREATED)
            result.record(name, "approle", name, Action.CREATED)
            result.record(name, "secret", approle_secret_path(name), Action.CREATED)

    def _ensure_kv_mount(self, result: ProvisionResult) -> None:
        path = self._config.kv_mount
        mount = self._client.list_mounts().get(f"{path}/")
        if mount is None:
            if not self._config.dry_run:
                self._client.enable_kv_v2(path)
            result.record("*", "mount", path, Action.CREATED, "kv v2")
            return
        version = (mount.options or {}).get("version")
        if mount.type != "kv" or version != "2":
            found = f"{mount.type} v{version}" if version else mount.type
            raise VaultMountConflictError.occupied(path, found)
        result.record("*", "mount", path, Action.UNCHANGED)

    def _ensure_approle_auth(self, result: ProvisionResult) -> None:
        method = self._client.list_auth_methods().get(f"{APPROLE_PATH}/")
        if method is None:
            if not self._config.dry_run:
                self._client.enable_auth(APPROLE_PATH, "approle")
            result.record("*", "auth", APPROLE_PATH, Action.CREATED)
            return
        if method.type != "approle":
            raise VaultMountConflictError.occupied(APPROLE_PATH, method.type)
        result.record("*", "auth", APPROLE_PATH, Action.UNCHANGED)

    def _ensure_policy(
        self, result: ProvisionResult, service: str, name: str, text: str
    ) -> None:
        current = self._client.read_policy(name)
        if current is not None and normalise_policy(current) == normalise_policy(
            text
        ):
            result.record(service, "policy", name, Action.UNCHANGED)
            return
        action = Action.CREATED if current is None else Action.UPDATED
        if not self._config.dry_run:
            self._client.write_policy(name, text)
        result.record(service, "policy", name, action)

    def _ensure_role(self, result: ProvisionResult, service: Service) -> None:
        desired = self.desired_role(service)
        current = self._client.read_approle(service.name)
        if current is not None and _role_matches(current, desired):
            result.record(service.name, "approle", service.name, Action.UNCHANGED)
            return
        action = Action.CREATED if current is None else Action.UPDATED
        if not self._config.dry_run:
            self._client.write_approle(service.name, desired)
        result.record(service.name, "approle", service.name, action)

    def _ensure_role_credentials(
        self, result: ProvisionResult, service: Service
    ) -> None:
        path = approle_secret_path(service.name)
        mount = self._config.kv_mount
        if self._client.kv_read(mount, path) is not None:
            result.record(service.name, "secret", path, Action.UNCHANGED)
            return
        if not self._config.dry_run:
            role_id = self._client.read_role_id(service.name)
            secret_id = self._client.generate_secret_id(service.name)
            self._client.kv_write(
                mount, path, {"role_id": role_id, "secret_id": secret_id}
            )
        result.record(service.name, "secret", path, Action.CREATED)
