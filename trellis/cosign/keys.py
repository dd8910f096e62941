"""Generate cosign signing keys and store them in Vault per service.

``cosign generate-key-pair`` writes ``cosign.key`` and ``cosign.pub`` into its
working directory and reads the private key password from ``COSIGN_PASSWORD``.
Keys are generated in a temporary directory that is removed afterwards, so key
material only ever persists in Vault.
"""

from __future__ import annotations

import dataclasses as dc
import os
import secrets
import shutil
import subprocess
import tempfile
import typing as typ
from pathlib import Path

from trellis.common.env import env_bool, env_str
from trellis.common.outcomes import Action, ProvisionResult
from trellis.logging import get_logger, log_info, log_warning
from trellis.vault.bootstrap import DEFAULT_KV_MOUNT

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from trellis.services.models import ServiceCatalogue
    from trellis.vault.client import SecretStore

logger = get_logger(__name__)

COSIGN_EXE = "cosign"
PRIVATE_KEY_FILE = "cosign.key"
PUBLIC_KEY_FILE = "cosign.pub"
_PASSWORD_BYTES = 32


class ExecutableNotFoundError(Exception):
    """Required CLI tool is not installed."""


class CosignError(RuntimeError):
    """Raised when cosign fails to produce a key pair."""

    @classmethod
    def failed(cls, returncode: int, stderr: str) -> CosignError:
        """Return an error for a non-zero cosign exit."""
        detail = stderr.strip() or "no output"
        return cls(f"cosign generate-key-pair exited with {returncode}: {detail}")

    @classmethod
    def missing_output(cls, path: Path) -> CosignError:
        """Return an error for a key file cosign did not write."""
        return cls(f"cosign did not write {path.name}")


def require_exe(name: str) -> None:
    """Verify a CLI tool is available in PATH.

    Raises
    ------
    ExecutableNotFoundError
        If the executable is not found in PATH.

    """
    if shutil.which(name) is None:
        msg = f"Required executable '{name}' not found in PATH"
        raise ExecutableNotFoundError(msg)


@dc.dataclass(frozen=True, slots=True)
class CosignKeyPair:
    """PEM-encoded cosign key pair; the private key is password-encrypted."""

    private_key: str
    public_key: str


def generate_password() -> str:
    """Return a random password for a new private key."""
    return secrets.token_urlsafe(_PASSWORD_BYTES)


def generate_key_pair(password: str) -> CosignKeyPair:
    """Run ``cosign generate-key-pair`` and return the generated keys.

    Raises
    ------
    ExecutableNotFoundError
        If ``cosign`` is not on PATH.
    CosignError
        If cosign exits non-zero or does not write both key files.

    """
    require_exe(COSIGN_EXE)
    with tempfile.TemporaryDirectory(prefix="trellis-cosign-") as workdir:
        env = dict(os.environ)
        env["COSIGN_PASSWORD"] = password
        result = subprocess.run(  # noqa: S603
            [COSIGN_EXE, "generate-key-pair"],
            cwd=workdir,
            env=env,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            raise CosignError.failed(result.returncode, result.stderr or "")

        private_path = Path(workdir) / PRIVATE_KEY_FILE
        public_path = Path(workdir) / PUBLIC_KEY_FILE
        for path in (private_path, public_path):
            if not path.is_file():
                raise CosignError.missing_output(path)
        return CosignKeyPair(
            private_key=private_path.read_text(encoding="utf-8"),
            public_key=public_path.read_text(encoding="utf-8"),
        )


def cosign_secret_path(service: str) -> str:
    """Return the KV path holding a service's cosign keys."""
    return f"services/{service}/cosign"


@dc.dataclass(frozen=True, slots=True)
class CosignKeysConfig:
    """Behaviour of a cosign key provisioning run."""

    kv_mount: str = DEFAULT_KV_MOUNT
    dry_run: bool = False

    @classmethod
    def from_env(cls) -> CosignKeysConfig:
        """Read ``TRELLIS_VAULT_KV_MOUNT`` and ``TRELLIS_DRY_RUN``."""
        return cls(
            kv_mount=env_str("TRELLIS_VAULT_KV_MOUNT", DEFAULT_KV_MOUNT),
            dry_run=env_bool("TRELLIS_DRY_RUN"),
        )


class CosignKeyProvisioner:
    """Ensure every service has a cosign key pair stored in Vault.

    Existing keys are never rotated; a service whose secret is present is
    reported unchanged.
    """

    def __init__(
        self,
        secrets_store: SecretStore,
        config: CosignKeysConfig,
        *,
        generate: cabc.Callable[[str], CosignKeyPair] = generate_key_pair,
    ) -> None:
        """Wire the provisioner to the Vault secret store."""
        self._secrets = secrets_store
        self._config = config
        self._generate = generate

    def run(self, catalogue: ServiceCatalogue) -> ProvisionResult:
        """Provision keys for every service, isolating per-service failures."""
        result = ProvisionResult()
        for service in catalogue.services:
            path = cosign_secret_path(service.name)
            try:
                action = self._ensure_keys(path)
            except Exception as exc:  # noqa: BLE001 - isolate per-service failures
                log_warning(
                    logger,
                    "%s: cosign key provisioning failed: %s",
                    service.name,
                    exc,
                    exc_info=exc,
                )
                result.record(
                    service.name,
                    "secret",
                    path,
                    Action.FAILED,
                    str(exc) or type(exc).__name__,
                )
                continue
            result.record(service.name, "secret", path, action)
        return result

    def _ensure_keys(self, path: str) -> Action:
        mount = self._config.kv_mount
        if self._secrets.kv_read(mount, path) is not None:
            return Action.UNCHANGED
        if self._config.dry_run:
            return Action.CREATED

        password = generate_password()
        keys = self._generate(password)
        self._secrets.kv_write(
            mount,
            path,
            {
                "private_key": keys.private_key,
                "public_key": keys.public_key,
                "password": password,
            },
        )
        log_info(logger, "Stored cosign key pair at %s/%s", mount, path)
        return Action.CREATED
