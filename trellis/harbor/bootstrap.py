"""Ensure a Harbor project and CI robot account for every service.

Robot secrets are only returned by Harbor at creation time, so a newly created
robot's credentials are written to Vault immediately. An existing robot whose
secret is in Vault is left alone; one whose secret never reached Vault gets a
fresh Harbor-generated secret, which is then stored.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from trellis.common.env import env_bool, env_str
from trellis.common.outcomes import Action, ProvisionResult
from trellis.logging import get_logger, log_info, log_warning
from trellis.vault.bootstrap import DEFAULT_KV_MOUNT

from .errors import HarborConflictError

if typ.TYPE_CHECKING:
    from trellis.services.models import Service, ServiceCatalogue
    from trellis.vault.client import SecretStore

    from .client import HarborClient

logger = get_logger(__name__)


def robot_name(service: str) -> str:
    """Return the CI robot account name for ``service``."""
    return f"ci-{service}"


def harbor_secret_path(service: str) -> str:
    """Return the KV path holding a service's robot credentials."""
    return f"services/{service}/harbor"


@dc.dataclass(frozen=True, slots=True)
class HarborBootstrapConfig:
    """Behaviour of a Harbor bootstrap run."""

    kv_mount: str = DEFAULT_KV_MOUNT
    dry_run: bool = False

    @classmethod
    def from_env(cls) -> HarborBootstrapConfig:
        """Read ``TRELLIS_VAULT_KV_MOUNT`` and ``TRELLIS_DRY_RUN``."""
        return cls(
            kv_mount=env_str("TRELLIS_VAULT_KV_MOUNT", DEFAULT_KV_MOUNT),
            dry_run=env_bool("TRELLIS_DRY_RUN"),
        )


class HarborBootstrapper:
    """Create Harbor projects and robots and distribute robot secrets."""

    def __init__(
        self,
        client: HarborClient,
        secrets: SecretStore,
        config: HarborBootstrapConfig,
    ) -> None:
        """Wire the bootstrapper to Harbor and the Vault secret store."""
        self._client = client
        self._secrets = secrets
        self._config = config

    def run(self, catalogue: ServiceCatalogue) -> ProvisionResult:
        """Bootstrap every service, isolating per-service failures."""
        result = ProvisionResult()
        for service in catalogue.services:
            try:
                self._ensure_project(result, service)
                self._ensure_robot(result, service)
            except Exception as exc:  # noqa: BLE001 - isolate per-service failures
                log_warning(
                    logger,
                    "%s: Harbor bootstrap failed: %s",
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

    def _ensure_project(self, result: ProvisionResult, service: Service) -> None:
        project = service.project
        if self._client.project_exists(project):
            result.record(service.name, "project", project, Action.UNCHANGED)
            return
        if self._config.dry_run:
            result.record(service.name, "project", project, Action.CREATED)
            return
        try:
            self._client.create_project(project)
        except HarborConflictError:
            result.record(
                service.name, "project", project, Action.UNCHANGED, "already exists"
            )
            return
        log_info(logger, "Created Harbor project %s", project)
        result.record(service.name, "project", project, Action.CREATED)

    def _ensure_robot(self, result: ProvisionResult, service: Service) -> None:
        name = robot_name(service.name)
        path = harbor_secret_path(service.name)
        robot = self._client.find_robot(name)
        if robot is not None:
            if self._secrets.kv_read(self._config.kv_mount, path) is not None:
                result.record(service.name, "robot", name, Action.UNCHANGED)
                return
            detail = "secret missing from Vault"
            if self._config.dry_run:
                result.record(service.name, "robot", name, Action.UPDATED, detail)
                result.record(service.name, "secret", path, Action.CREATED)
                return
            credentials = self._client.refresh_robot_secret(robot)
            log_info(logger, "Refreshed secret of Harbor robot %s", robot.name)
            result.record(service.name, "robot", name, Action.UPDATED, detail)
        elif self._config.dry_run:
            result.record(service.name, "robot", name, Action.CREATED)
            result.record(service.name, "secret", path, Action.CREATED)
            return
        else:
            credentials = self._client.create_robot(name, service.project)
            result.record(service.name, "robot", name, Action.CREATED)

        self._secrets.kv_write(
            self._config.kv_mount,
            path,
            {"username": credentials.name, "secret": credentials.secret},
        )
        result.record(service.name, "secret", path, Action.CREATED)
