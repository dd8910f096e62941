"""Unit tests for the Vault HTTP client."""

from __future__ import annotations

import secrets
import typing as typ

import httpx
import pytest

from tests.helpers.fakes import json_body
from trellis.vault import (
    AppRoleSettings,
    VaultAPIError,
    VaultClient,
    VaultConfig,
    VaultConfigError,
    VaultResponseShapeError,
)

_TOKEN = secrets.token_hex(8)


def _make_client(
    handler: typ.Callable[[httpx.Request], httpx.Response],
    *,
    namespace: str | None = None,
) -> tuple[VaultClient, list[httpx.Request]]:
    requests: list[httpx.Request] = []

    def _record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    client = VaultClient(
        VaultConfig(
            address="https://vault.example.test/", token=_TOKEN, namespace=namespace
        ),
        http_client=httpx.Client(transport=httpx.MockTransport(_record)),
    )
    return client, requests


def test_requests_carry_token_and_namespace() -> None:
    """The token and namespace headers are sent on namespaced calls."""
    client, requests = _make_client(
        lambda _request: httpx.Response(200, json={"data": {}}), namespace="ci"
    )

    client.list_mounts()

    request = requests[0]
    assert request.url.path == "/v1/sys/mounts"
    assert request.headers["X-Vault-Token"] == _TOKEN
    assert request.headers["X-Vault-Namespace"] == "ci"


def test_namespace_calls_skip_namespace_header() -> None:
    """Namespace management is issued against the parent namespace."""
    client, requests = _make_client(
        lambda request: httpx.Response(404 if request.method == "GET" else 200),
        namespace="ci",
    )

    assert client.namespace_exists("ci") is False
    client.create_namespace("ci")

    assert [r.method for r in requests] == ["GET", "POST"]
    assert all("X-Vault-Namespace" not in r.headers for r in requests)
    assert requests[1].url.path == "/v1/sys/namespaces/ci"


def test_list_mounts_decodes_mount_types() -> None:
    """Mounts are keyed by path with trailing slash."""
    client, _ = _make_client(
        lambda _request: httpx.Response(
            200,
            json={
                "request_id": "x",
                "data": {
                    "secret/": {"type": "kv", "options": {"version": "2"}},
                    "sys/": {"type": "system", "options": None},
                },
            },
        )
    )

    mounts = client.list_mounts()

    assert mounts["secret/"].type == "kv"
    assert mounts["secret/"].options == {"version": "2"}
    assert mounts["sys/"].options is None


def test_enable_kv_v2_posts_version_option() -> None:
    """KV v2 mounts send the version option."""
    client, requests = _make_client(lambda _request: httpx.Response(204))

    client.enable_kv_v2("secret")

    assert requests[0].url.path == "/v1/sys/mounts/secret"
    assert json_body(requests[0]) == {"type": "kv", "options": {"version": "2"}}


def test_read_policy_returns_none_on_404() -> None:
    """Absent policies read as None."""
    client, _ = _make_client(lambda _request: httpx.Response(404, json={"errors": []}))

    assert client.read_policy("svc-a") is None


def test_read_and_write_policy() -> None:
    """Policies are read from and written to sys/policies/acl."""
    client, requests = _make_client(
        lambda request: httpx.Response(
            200,
            json={"data": {"name": "svc-a", "policy": "path \"x\" {}"}},
        )
        if request.method == "GET"
        else httpx.Response(204)
    )

    assert client.read_policy("svc-a") == 'path "x" {}'
    client.write_policy("svc-a", "policy text")

    assert requests[1].method == "PUT"
    assert requests[1].url.path == "/v1/sys/policies/acl/svc-a"
    assert json_body(requests[1]) == {"policy": "policy text"}


def test_write_approle_sends_settings() -> None:
    """AppRole settings are posted as plain JSON."""
    client, requests = _make_client(lambda _request: httpx.Response(204))

    client.write_approle(
        "billing",
        AppRoleSettings(token_policies=["svc-billing"], token_ttl=3600),
    )

    assert requests[0].url.path == "/v1/auth/approle/role/billing"
    assert json_body(requests[0]) == {
        "token_policies": ["svc-billing"],
        "token_ttl": 3600,
        "token_max_ttl": 0,
        "secret_id_ttl": 0,
    }


def test_role_id_and_secret_id() -> None:
    """Role and secret IDs are unwrapped from the data envelope."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/role-id"):
            return httpx.Response(200, json={"data": {"role_id": "rid"}})
        return httpx.Response(
            200, json={"data": {"secret_id": "sid", "secret_id_accessor": "acc"}}
        )

    client, requests = _make_client(handler)

    assert client.read_role_id("billing") == "rid"
    assert client.generate_secret_id("billing") == "sid"
    assert requests[1].method == "POST"


def test_kv_read_and_write_use_data_paths() -> None:
    """KV v2 operations go through the ``data/`` prefix."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(
                200, json={"data": {"data": {"k": "v"}, "metadata": {"version": 3}}}
            )
        return httpx.Response(200, json={"data": {"version": 4}})

    client, requests = _make_client(handler)

    assert client.kv_read("secret", "services/a/harbor") == {"k": "v"}
    client.kv_write("secret", "services/a/harbor", {"k": "w"})

    assert requests[0].url.path == "/v1/secret/data/services/a/harbor"
    assert json_body(requests[1]) == {"data": {"k": "w"}}


def test_kv_read_returns_none_on_404() -> None:
    """Absent secrets read as None."""
    client, _ = _make_client(lambda _request: httpx.Response(404, json={"errors": []}))

    assert client.kv_read("secret", "services/a/cosign") is None


def test_errors_include_vault_messages() -> None:
    """Vault's errors array is included in the exception message."""
    client, _ = _make_client(
        lambda _request: httpx.Response(403, json={"errors": ["permission denied"]})
    )

    with pytest.raises(VaultAPIError, match="permission denied") as excinfo:
        client.list_auth_methods()

    assert excinfo.value.status_code == 403


def test_unexpected_shape_raises_shape_error() -> None:
    """Bodies that do not match the envelope raise a shape error."""
    client, _ = _make_client(lambda _request: httpx.Response(200, json={"data": 1}))

    with pytest.raises(VaultResponseShapeError):
        client.read_role_id("billing")


def test_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Address and token are required; namespace is optional."""
    monkeypatch.delenv("VAULT_ADDR", raising=False)
    with pytest.raises(VaultConfigError, match="VAULT_ADDR"):
        VaultConfig.from_env()

    monkeypatch.setenv("VAULT_ADDR", "https://vault.example.test")
    monkeypatch.delenv("VAULT_TOKEN", raising=False)
    with pytest.raises(VaultConfigError, match="VAULT_TOKEN"):
        VaultConfig.from_env()

    monkeypatch.setenv("VAULT_TOKEN", _TOKEN)
    monkeypatch.delenv("VAULT_NAMESPACE", raising=False)
    assert VaultConfig.from_env().namespace is None
