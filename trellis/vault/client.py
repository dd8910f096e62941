"""Vault HTTP API client covering the endpoints the bootstrap scripts need."""

from __future__ import annotations

import dataclasses
import typing as typ

import httpx
import msgspec

from trellis.common.env import env_str

from .errors import VaultAPIError, VaultConfigError, VaultResponseShapeError
from .models import (
    AppRoleResponse,
    AppRoleSettings,
    ErrorBody,
    KvReadResponse,
    MountInfo,
    MountsResponse,
    PolicyResponse,
    RoleIdResponse,
    SecretIdResponse,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import types

T = typ.TypeVar("T")
_HTTP_NOT_FOUND = 404
_HTTP_ERROR_STATUS_THRESHOLD = 400


class SecretStore(typ.Protocol):
    """KV v2 reads and writes used to distribute credentials."""

    def kv_read(self, mount: str, path: str) -> dict[str, str] | None:
        """Return the latest secret at ``path`` or None when absent."""
        ...

    def kv_write(self, mount: str, path: str, data: cabc.Mapping[str, str]) -> None:
        """Write a new version of the secret at ``path``."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class VaultConfig:
    """Connection settings for the Vault HTTP API."""

    address: str
    token: str
    namespace: str | None = None
    timeout_s: float = 20.0

    @classmethod
    def from_env(cls) -> VaultConfig:
        """Build configuration from the ``VAULT_*`` environment variables."""
        address = env_str("VAULT_ADDR")
        if not address:
            raise VaultConfigError.missing_address()
        token = env_str("VAULT_TOKEN")
        if not token:
            raise VaultConfigError.missing_token()
        return cls(
            address=address,
            token=token,
            namespace=env_str("VAULT_NAMESPACE") or None,
        )


class VaultClient:
    """Synchronous Vault client.

    Requests carry ``X-Vault-Namespace`` when a namespace is configured,
    except namespace management calls which are issued against the parent.
    """

    def __init__(
        self,
        config: VaultConfig,
        *,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialise the client with the provided connection settings."""
        self._config = config
        self._base = f"{config.address.rstrip('/')}/v1"
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=config.timeout_s)
        self._headers = {"X-Vault-Token": config.token}

    def close(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> typ.Self:
        """Return the client for use as a context manager."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        """Close owned resources on exit."""
        self.close()

    # -- namespaces --------------------------------------------------------

    def namespace_exists(self, name: str) -> bool:
        """Return True when the namespace ``name`` exists."""
        response = self._request(
            "GET", f"sys/namespaces/{name}", namespaced=False, allow_missing=True
        )
        return response is not None

    def create_namespace(self, name: str) -> None:
        """Create the namespace ``name``."""
        self._request("POST", f"sys/namespaces/{name}", namespaced=False)

    # -- mounts ------------------------------------------------------------

    def list_mounts(self) -> dict[str, MountInfo]:
        """Return secrets engine mounts keyed by path (with trailing ``/``)."""
        response = self._request("GET", "sys/mounts")
        return self._decode(response, "sys/mounts", MountsResponse).data

    def enable_kv_v2(self, path: str) -> None:
        """Mount a KV version 2 secrets engine at ``path``."""
        self._request(
            "POST",
            f"sys/mounts/{path}",
            json={"type": "kv", "options": {"version": "2"}},
        )

    def list_auth_methods(self) -> dict[str, MountInfo]:
        """Return enabled auth methods keyed by path (with trailing ``/``)."""
        response = self._request("GET", "sys/auth")
        return self._decode(response, "sys/auth", MountsResponse).data

    def enable_auth(self, path: str, method_type: str) -> None:
        """Enable an auth method of ``method_type`` at ``path``."""
        self._request("POST", f"sys/auth/{path}", json={"type": method_type})

    # -- policies ----------------------------------------------------------

    def read_policy(self, name: str) -> str | None:
        """Return the ACL policy text for ``name`` or None when absent."""
        path = f"sys/policies/acl/{name}"
        response = self._request("GET", path, allow_missing=True)
        if response is None:
            return None
        return self._decode(response, path, PolicyResponse).data.policy

    def write_policy(self, name: str, policy: str) -> None:
        """Create or replace the ACL policy ``name``."""
        self._request("PUT", f"sys/policies/acl/{name}", json={"policy": policy})

    # -- AppRole -----------------------------------------------------------

    def read_approle(self, name: str) -> AppRoleSettings | None:
        """Return the AppRole ``name`` settings or None when absent."""
        path = f"auth/approle/role/{name}"
        response = self._request("GET", path, allow_missing=True)
        if response is None:
            return None
        return self._decode(response, path, AppRoleResponse).data

    def write_approle(self, name: str, settings: AppRoleSettings) -> None:
        """Create or update the AppRole ``name``."""
        self._request(
            "POST",
            f"auth/approle/role/{name}",
            json=msgspec.to_builtins(settings),
        )

    def read_role_id(self, name: str) -> str:
        """Return the role ID of the AppRole ``name``."""
        path = f"auth/approle/role/{name}/role-id"
        response = self._request("GET", path)
        return self._decode(response, path, RoleIdResponse).data.role_id

    def generate_secret_id(self, name: str) -> str:
        """Generate and return a new secret ID for the AppRole ``name``."""
        path = f"auth/approle/role/{name}/secret-id"
        response = self._request("POST", path)
        return self._decode(response, path, SecretIdResponse).data.secret_id

    # -- KV v2 -------------------------------------------------------------

    def kv_read(self, mount: str, path: str) -> dict[str, str] | None:
        """Return the latest version of a KV v2 secret or None when absent."""
        request_path = f"{mount}/data/{path}"
        response = self._request("GET", request_path, allow_missing=True)
        if response is None:
            return None
        return self._decode(response, request_path, KvReadResponse).data.data

    def kv_write(self, mount: str, path: str, data: cabc.Mapping[str, str]) -> None:
        """Write a new version of a KV v2 secret."""
        self._request("POST", f"{mount}/data/{path}", json={"data": dict(data)})

    # -- plumbing ----------------------------------------------------------

    @typ.overload
    def _request(
        self,
        method: str,
        path: str,
        *,
        json: object | None = None,
        namespaced: bool = True,
        allow_missing: typ.Literal[False] = False,
    ) -> httpx.Response: ...

    @typ.overload
    def _request(
        self,
        method: str,
        path: str,
        *,
        json: object | None = None,
        namespaced: bool = True,
        allow_missing: typ.Literal[True],
    ) -> httpx.Response | None: ...

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: object | None = None,
        namespaced: bool = True,
        allow_missing: bool = False,
    ) -> httpx.Response | None:
        headers = dict(self._headers)
        if namespaced and self._config.namespace:
            headers["X-Vault-Namespace"] = self._config.namespace
        response = self._client.request(
            method, f"{self._base}/{path}", json=json, headers=headers
        )
        if allow_missing and response.status_code == _HTTP_NOT_FOUND:
            return None
        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise VaultAPIError.http_error(
                response.status_code, path, _error_messages(response)
            )
        return response

    @staticmethod
    def _decode(response: httpx.Response, path: str, type_: type[T]) -> T:
        try:
            return msgspec.json.decode(response.content, type=type_)
        except msgspec.DecodeError as exc:
            raise VaultResponseShapeError.invalid(path, exc) from exc


def _error_messages(response: httpx.Response) -> list[str]:
    try:
        return msgspec.json.decode(response.content, type=ErrorBody).errors
    except msgspec.DecodeError:
        return []
