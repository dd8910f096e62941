"""GitHub REST client used to discover repositories and read their contents."""

from __future__ import annotations

import dataclasses
import os
import typing as typ
from urllib.parse import quote

import httpx
import msgspec

from .errors import GitHubAPIError, GitHubConfigError, GitHubResponseShapeError
from .models import ContentEntry, RepositoryCandidate

if typ.TYPE_CHECKING:
    import types

_PAGE_SIZE = 100
T = typ.TypeVar("T")
_HTTP_NOT_FOUND = 404
_HTTP_ERROR_STATUS_THRESHOLD = 400
_API_VERSION = "2022-11-28"
_DEFAULT_API_URL = "https://api.github.com"


class RepositoryLister(typ.Protocol):
    """Interface for listing an organisation's repositories."""

    def list_org_repositories(self, org: str) -> list[RepositoryCandidate]:
        """Return every repository of ``org`` sorted by full name."""
        ...


class ContentLookup(typ.Protocol):
    """Interface for fetching content metadata at a path and reference."""

    def get_content(
        self, repo: RepositoryCandidate, path: str, *, ref: str
    ) -> ContentEntry | None:
        """Return metadata for ``path`` at ``ref``, or None when absent."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubRestConfig:
    """Configuration for the GitHub REST API client."""

    token: str
    api_url: str = _DEFAULT_API_URL
    timeout_s: float = 20.0
    user_agent: str = "trellis/0.1"

    @classmethod
    def from_env(cls) -> GitHubRestConfig:
        """Build configuration using ``TRELLIS_GITHUB_*`` env vars."""
        token = os.environ.get("TRELLIS_GITHUB_TOKEN", "").strip()
        if not token:
            raise GitHubConfigError.missing_token()
        api_url = os.environ.get("TRELLIS_GITHUB_API_URL", "").strip()
        return cls(token=token, api_url=api_url or _DEFAULT_API_URL)


def _error_detail(response: httpx.Response) -> str | None:
    """Extract GitHub's ``message`` field from an error body, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str):
            return message
    return None


def _content_path(path: str) -> str:
    return quote(path.strip("/"), safe="/")


class GitHubRestClient:
    """Synchronous GitHub REST client.

    Implements :class:`RepositoryLister` and :class:`ContentLookup`.
    """

    def __init__(
        self,
        config: GitHubRestConfig,
        *,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialise the client with the provided API configuration."""
        if not config.token.strip():
            raise GitHubConfigError.empty_token()

        self._config = config
        self._base = config.api_url.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(
            timeout=config.timeout_s,
            headers={
                "Authorization": f"Bearer {config.token}",
                "User-Agent": config.user_agent,
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": _API_VERSION,
            },
        )

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

    def list_org_repositories(self, org: str) -> list[RepositoryCandidate]:
        """Return every repository of ``org`` sorted by full name.

        Pages of 100 are requested until GitHub returns a short page.
        """
        path = f"/orgs/{org}/repos"
        repositories: list[RepositoryCandidate] = []
        page = 1
        while True:
            response = self._get(
                path,
                params={
                    "type": "all",
                    "sort": "full_name",
                    "direction": "asc",
                    "per_page": _PAGE_SIZE,
                    "page": page,
                },
            )
            batch = self._decode(response, path, list[RepositoryCandidate])
            repositories.extend(batch)
            if len(batch) < _PAGE_SIZE:
                return repositories
            page += 1

    def get_content(
        self, repo: RepositoryCandidate, path: str, *, ref: str
    ) -> ContentEntry | None:
        """Return metadata for ``path`` at ``ref``, or None when GitHub 404s.

        Directory listings are reported as a single ``dir`` entry for the
        requested path.
        """
        request_path = f"/repos/{repo.full_name}/contents/{_content_path(path)}"
        response = self._get(request_path, params={"ref": ref}, allow_missing=True)
        if response is None:
            return None

        decoded = self._decode(
            response, request_path, ContentEntry | list[ContentEntry]
        )
        if isinstance(decoded, list):
            name = path.rstrip("/").rsplit("/", 1)[-1]
            return ContentEntry(type="dir", path=path.strip("/"), name=name)
        return decoded

    @typ.overload
    def _get(
        self,
        path: str,
        *,
        params: dict[str, typ.Any],
        allow_missing: typ.Literal[False] = False,
    ) -> httpx.Response: ...

    @typ.overload
    def _get(
        self,
        path: str,
        *,
        params: dict[str, typ.Any],
        allow_missing: typ.Literal[True],
    ) -> httpx.Response | None: ...

    def _get(
        self,
        path: str,
        *,
        params: dict[str, typ.Any],
        allow_missing: bool = False,
    ) -> httpx.Response | None:
        response = self._client.get(f"{self._base}{path}", params=params)
        if allow_missing and response.status_code == _HTTP_NOT_FOUND:
            return None
        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise GitHubAPIError.http_error(
                response.status_code, path, _error_detail(response)
            )
        return response

    @staticmethod
    def _decode(response: httpx.Response, path: str, type_: type[T]) -> T:
        try:
            return msgspec.json.decode(response.content, type=type_)
        except msgspec.DecodeError as exc:
            raise GitHubResponseShapeError.invalid(path, exc) from exc
