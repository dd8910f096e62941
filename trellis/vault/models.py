"""Typed Vault HTTP API payloads."""

from __future__ import annotations

import msgspec


class ErrorBody(msgspec.Struct, kw_only=True, frozen=True):
    """Vault error document: ``{"errors": [...]}``."""

    errors: list[str] = msgspec.field(default_factory=list)


class MountInfo(msgspec.Struct, kw_only=True, frozen=True):
    """A secrets engine or auth method mount."""

    type: str
    options: dict[str, str] | None = None


class MountsResponse(msgspec.Struct, kw_only=True, frozen=True):
    """Body of ``GET sys/mounts`` and ``GET sys/auth``; keys end with ``/``."""

    data: dict[str, MountInfo] = msgspec.field(default_factory=dict)


class PolicyData(msgspec.Struct, kw_only=True, frozen=True):
    """ACL policy returned by ``GET sys/policies/acl/{name}``."""

    name: str = ""
    policy: str = ""


class PolicyResponse(msgspec.Struct, kw_only=True, frozen=True):
    """Envelope of :class:`PolicyData`."""

    data: PolicyData


class AppRoleSettings(msgspec.Struct, kw_only=True, frozen=True):
    """AppRole settings managed by the bootstrapper; TTLs are in seconds."""

    token_policies: list[str] = msgspec.field(default_factory=list)
    token_ttl: int = 0
    token_max_ttl: int = 0
    secret_id_ttl: int = 0


class AppRoleResponse(msgspec.Struct, kw_only=True, frozen=True):
    """Envelope of :class:`AppRoleSettings`."""

    data: AppRoleSettings


class RoleIdData(msgspec.Struct, kw_only=True, frozen=True):
    """Role identifier of an AppRole."""

    role_id: str


class RoleIdResponse(msgspec.Struct, kw_only=True, frozen=True):
    """Envelope of :class:`RoleIdData`."""

    data: RoleIdData


class SecretIdData(msgspec.Struct, kw_only=True, frozen=True):
    """Freshly generated AppRole secret identifier."""

    secret_id: str
    secret_id_accessor: str = ""


class SecretIdResponse(msgspec.Struct, kw_only=True, frozen=True):
    """Envelope of :class:`SecretIdData`."""

    data: SecretIdData


class KvSecret(msgspec.Struct, kw_only=True, frozen=True):
    """Inner ``data`` of a KV v2 read."""

    data: dict[str, str] = msgspec.field(default_factory=dict)


class KvReadResponse(msgspec.Struct, kw_only=True, frozen=True):
    """Envelope of :class:`KvSecret`."""

    data: KvSecret
