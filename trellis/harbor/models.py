"""Typed Harbor v2.0 API payloads."""

from __future__ import annotations

import msgspec


class ErrorItem(msgspec.Struct, kw_only=True, frozen=True):
    """One entry of a Harbor error document."""

    code: str = ""
    message: str = ""


class ErrorBody(msgspec.Struct, kw_only=True, frozen=True):
    """Harbor error document: ``{"errors": [{"code": ..., "message": ...}]}``."""

    errors: list[ErrorItem] = msgspec.field(default_factory=list)


class ProjectCreateRequest(msgspec.Struct, kw_only=True, frozen=True):
    """Body of ``POST /projects``."""

    project_name: str
    metadata: dict[str, str] = msgspec.field(
        default_factory=lambda: {"public": "false"}
    )


class RobotAccess(msgspec.Struct, kw_only=True, frozen=True):
    """A resource/action grant inside a robot permission."""

    resource: str
    action: str


class RobotPermission(msgspec.Struct, kw_only=True, frozen=True):
    """Permissions a robot holds within one project."""

    namespace: str
    access: list[RobotAccess]
    kind: str = "project"


class RobotCreateRequest(msgspec.Struct, kw_only=True, frozen=True):
    """Body of ``POST /robots`` for a system-level robot account."""

    name: str
    permissions: list[RobotPermission]
    level: str = "system"
    duration: int = -1
    disable: bool = False
    description: str = ""


class Robot(msgspec.Struct, kw_only=True, frozen=True):
    """Robot account as listed by ``GET /robots`` (secrets are never returned)."""

    id: int
    name: str
    disable: bool = False


class RobotCredentials(msgspec.Struct, kw_only=True, frozen=True):
    """Credentials returned once, when a robot account is created."""

    id: int
    name: str
    secret: str


class RobotSecret(msgspec.Struct, kw_only=True, frozen=True):
    """Body and response of ``PATCH /robots/{id}``.

    An empty ``secret`` asks Harbor to generate a new one.
    """

    secret: str = ""


def push_pull_permission(project: str) -> RobotPermission:
    """Return a permission allowing image push and pull on ``project``."""
    return RobotPermission(
        namespace=project,
        access=[
            RobotAccess(resource="repository", action="push"),
            RobotAccess(resource="repository", action="pull"),
        ],
    )
