"""Harbor v2.0 REST client for projects and robot accounts."""

from __future__ import annotations

import dataclasses
import typing as typ

import httpx
import msgspec

from trellis.common.env import env_str

from .errors import (
    HarborAPIError,
    HarborConfigError,
    HarborConflictError,
    HarborResponseShapeError,
)
from .models import (
    ErrorBody,
    ProjectCreateRequest,
    Robot,
    RobotCreateRequest,
    RobotCredentials,
    RobotSecret,
    push_pull_permission,
)

if typ.TYPE_CHECKING:
    import types

T = typ.TypeVar("T")
_HTTP_NOT_FOUND = 404
_HTTP_CONFLICT = 409
_HTTP_ERROR_STATUS_THRESHOLD = 400
ROBOT_PREFIX = "robot$"


@dataclasses.dataclass(frozen=True, slots=True)
class HarborConfig:
    """Connection settings for the Harbor API."""

    url: str
    username: str
    password: str
    timeout_s: float = 20.0

    @classmethod
    def from_env(cls) -> HarborConfig:
        """Build configuration from the ``HARBOR_*`` environment variables."""
        values = {}
        for variable in ("HARBOR_URL", "HARBOR_USERNAME", "HARBOR_PASSWORD"):
            value = env_str(variable)
            if not value:
                raise HarborConfigError.missing(variable)
            values[variable] = value
        return cls(
            url=values["HARBOR_URL"],
            username=values["HARBOR_USERNAME"],
            password=values["HARBOR_PASSWORD"],
        )


class HarborClient:
    """Synchronous Harbor client using HTTP basic authentication."""

    def __init__(
        self,
        config: HarborConfig,
        *,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialise the client with the provided connection settings."""
        self._base = f"{config.url.rstrip('/')}/api/v2.0"
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=config.timeout_s)
        self._auth = httpx.BasicAuth(config.username, config.password)

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

    def project_exists(self, name: str) -> bool:
        """Return True when the project ``name`` exists."""
        response = self._send("HEAD", "/projects", params={"project_name": name})
        if response.status_code == _HTTP_NOT_FOUND:
            return False
        self._raise_for_status(response, "/projects")
        return True

    def create_project(self, name: str) -> None:
        """Create a private project.

        Raises
        ------
        HarborConflictError
            If a project with this name already exists.

        """
        response = self._send(
            "POST",
            "/projects",
            content=msgspec.json.encode(ProjectCreateRequest(project_name=name)),
        )
        if response.status_code == _HTTP_CONFLICT:
            raise HarborConflictError.exists("project", name)
        self._raise_for_status(response, "/projects")

    def find_robot(self, name: str) -> Robot | None:
        """Return the system robot ``name`` (with or without prefix) or None."""
        response = self._send("GET", "/robots", params={"q": f"name={name}"})
        self._raise_for_status(response, "/robots")
        robots = self._decode(response, "/robots", list[Robot])
        wanted = {name, f"{ROBOT_PREFIX}{name}"}
        return next((robot for robot in robots if robot.name in wanted), None)

    def create_robot(self, name: str, project: str) -> RobotCredentials:
        """Create a system robot with push and pull on ``project``."""
        request = RobotCreateRequest(
            name=name,
            permissions=[push_pull_permission(project)],
            description=f"CI robot for {project}",
        )
        response = self._send(
            "POST", "/robots", content=msgspec.json.encode(request)
        )
        if response.status_code == _HTTP_CONFLICT:
            raise HarborConflictError.exists("robot", name)
        self._raise_for_status(response, "/robots")
        return self._decode(response, "/robots", RobotCredentials)

    def refresh_robot_secret(self, robot: Robot) -> RobotCredentials:
        """Replace the secret of ``robot`` with a Harbor-generated one."""
        path = f"/robots/{robot.id}"
        response = self._send("PATCH", path, content=msgspec.json.encode(RobotSecret()))
        self._raise_for_status(response, path)
        refreshed = self._decode(response, path, RobotSecret)
        if not refreshed.secret:
            raise HarborResponseShapeError.invalid(path, "empty secret")
        return RobotCredentials(id=robot.id, name=robot.name, secret=refreshed.secret)

    def _send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        content: bytes | None = None,
    ) -> httpx.Response:
        headers = {"Accept": "application/json"}
        if content is not None:
            headers["Content-Type"] = "application/json"
        return self._client.request(
            method,
            f"{self._base}{path}",
            params=params,
            content=content,
            headers=headers,
            auth=self._auth,
        )

    @staticmethod
    def _raise_for_status(response: httpx.Response, path: str) -> None:
        if response.status_code < _HTTP_ERROR_STATUS_THRESHOLD:
            return
        detail = None
        try:
            body = msgspec.json.decode(response.content, type=ErrorBody)
        except msgspec.DecodeError:
            body = ErrorBody()
        if body.errors:
            detail = "; ".join(error.message for error in body.errors)
        raise HarborAPIError.http_error(response.status_code, path, detail)

    @staticmethod
    def _decode(response: httpx.Response, path: str, type_: type[T]) -> T:
        try:
            return msgspec.json.decode(response.content, type=type_)
        except msgspec.DecodeError as exc:
            raise HarborResponseShapeError.invalid(path, exc) from exc
