"""Unit tests for the GitHub REST client."""

from __future__ import annotations

import secrets
import typing as typ

import httpx
import pytest

from tests.helpers.fakes import make_repo
from trellis.github import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubResponseShapeError,
    GitHubRestClient,
    GitHubRestConfig,
)

_TOKEN = secrets.token_hex(8)
_API = "https://github.example.test"


def _make_client(
    handler: typ.Callable[[httpx.Request], httpx.Response],
) -> tuple[GitHubRestClient, list[httpx.Request]]:
    requests: list[httpx.Request] = []

    def _record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    http_client = httpx.Client(transport=httpx.MockTransport(_record))
    client = GitHubRestClient(
        GitHubRestConfig(token=_TOKEN, api_url=_API), http_client=http_client
    )
    return client, requests


def _repo_payload(index: int) -> dict[str, typ.Any]:
    name = f"repo-{index:03d}"
    return {
        "name": name,
        "full_name": f"acme/{name}",
        "default_branch": "main",
        "clone_url": f"https://github.com/acme/{name}.git",
        "archived": False,
        "fork": False,
        "private": True,
    }


def test_list_org_repositories_follows_pages_until_short_page() -> None:
    """Pages of 100 are requested until a short page arrives."""

    def handler(request: httpx.Request) -> httpx.Response:
        page = int(request.url.params["page"])
        count = 100 if page == 1 else 3
        start = (page - 1) * 100
        return httpx.Response(
            200, json=[_repo_payload(start + i) for i in range(count)]
        )

    client, requests = _make_client(handler)

    repos = client.list_org_repositories("acme")

    assert len(repos) == 103
    assert repos[0].full_name == "acme/repo-000"
    assert [r.url.params["page"] for r in requests] == ["1", "2"]
    first = requests[0]
    assert first.url.path == "/orgs/acme/repos"
    assert first.url.params["per_page"] == "100"
    assert first.url.params["sort"] == "full_name"


def test_list_org_repositories_raises_on_http_error() -> None:
    """Listing failures surface as GitHubAPIError with the status code."""
    client, _ = _make_client(
        lambda _request: httpx.Response(403, json={"message": "Bad credentials"})
    )

    with pytest.raises(GitHubAPIError, match="Bad credentials") as excinfo:
        client.list_org_repositories("acme")

    assert excinfo.value.status_code == 403


def test_list_org_repositories_rejects_unexpected_shape() -> None:
    """Non-list bodies raise a shape error rather than a decode error."""
    client, _ = _make_client(lambda _request: httpx.Response(200, json={"x": 1}))

    with pytest.raises(GitHubResponseShapeError):
        client.list_org_repositories("acme")


def test_get_content_returns_file_entry_at_ref() -> None:
    """File metadata is decoded and the ref is passed as a query parameter."""
    client, requests = _make_client(
        lambda _request: httpx.Response(
            200,
            json={
                "type": "file",
                "path": ".buildkite/pipeline.yml",
                "name": "pipeline.yml",
                "sha": "abc",
            },
        )
    )

    entry = client.get_content(
        make_repo("widget"), ".buildkite/pipeline.yml", ref="develop"
    )

    assert entry is not None
    assert entry.is_file
    assert requests[0].url.path == "/repos/acme/widget/contents/.buildkite/pipeline.yml"
    assert requests[0].url.params["ref"] == "develop"


def test_get_content_returns_none_on_404() -> None:
    """A missing path is not an error."""
    client, _ = _make_client(
        lambda _request: httpx.Response(404, json={"message": "Not Found"})
    )

    assert client.get_content(make_repo("widget"), "buildkite.yml", ref="main") is None


def test_get_content_reports_directory_listing_as_dir() -> None:
    """A directory listing collapses to a single dir entry."""
    client, _ = _make_client(
        lambda _request: httpx.Response(
            200,
            json=[{"type": "file", "path": ".buildkite/pipeline.yml", "name": "p"}],
        )
    )

    entry = client.get_content(make_repo("widget"), ".buildkite", ref="main")

    assert entry is not None
    assert entry.is_dir
    assert entry.path == ".buildkite"


def test_get_content_raises_on_server_error() -> None:
    """Errors other than 404 propagate."""
    client, _ = _make_client(lambda _request: httpx.Response(502, text="bad gateway"))

    with pytest.raises(GitHubAPIError) as excinfo:
        client.get_content(make_repo("widget"), "buildkite.yml", ref="main")

    assert excinfo.value.status_code == 502


def test_config_from_env_requires_token(monkeypatch: pytest.MonkeyPatch) -> None:
    """A missing token is a configuration error."""
    monkeypatch.delenv("TRELLIS_GITHUB_TOKEN", raising=False)

    with pytest.raises(GitHubConfigError, match="TRELLIS_GITHUB_TOKEN"):
        GitHubRestConfig.from_env()


def test_config_from_env_reads_api_url(monkeypatch: pytest.MonkeyPatch) -> None:
    """The API URL defaults to api.github.com and can be overridden."""
    monkeypatch.setenv("TRELLIS_GITHUB_TOKEN", _TOKEN)
    monkeypatch.delenv("TRELLIS_GITHUB_API_URL", raising=False)
    assert GitHubRestConfig.from_env().api_url == "https://api.github.com"

    monkeypatch.setenv("TRELLIS_GITHUB_API_URL", _API)
    assert GitHubRestConfig.from_env().api_url == _API


def test_client_rejects_blank_token() -> None:
    """Blank tokens are refused before any request is made."""
    with pytest.raises(GitHubConfigError):
        GitHubRestClient(GitHubRestConfig(token="  "))
