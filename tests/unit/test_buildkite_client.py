"""Unit tests for the Buildkite REST client."""

from __future__ import annotations

import secrets
import typing as typ

import httpx
import pytest

from tests.helpers.fakes import json_body
from trellis.buildkite import (
    BuildkiteAPIError,
    BuildkiteClient,
    BuildkiteConfig,
    BuildkiteConfigError,
    BuildkiteResponseShapeError,
    ErrorBody,
    FieldError,
    PipelineCreateRequest,
    PipelineExistsError,
    is_already_exists,
)

_TOKEN = secrets.token_hex(8)
_PIPELINES_PATH = "/v2/organizations/acme-ci/pipelines"


def _make_client(
    handler: typ.Callable[[httpx.Request], httpx.Response],
) -> tuple[BuildkiteClient, list[httpx.Request]]:
    requests: list[httpx.Request] = []

    def _record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    client = BuildkiteClient(
        BuildkiteConfig(
            token=_TOKEN, org="acme-ci", api_url="https://bk.example.test"
        ),
        http_client=httpx.Client(transport=httpx.MockTransport(_record)),
    )
    return client, requests


def _pipeline_payload(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "slug": "widget",
        "name": "widget",
        "repository": "https://github.com/acme/widget.git",
        "default_branch": "main",
        "branch_configuration": "main",
        "configuration": "steps: []",
        "url": "https://api.buildkite.com/v2/organizations/acme-ci/pipelines/widget",
    }
    payload.update(overrides)
    return payload


def _create_request() -> PipelineCreateRequest:
    return PipelineCreateRequest(
        name="widget",
        slug="widget",
        repository="https://github.com/acme/widget.git",
        default_branch="main",
        branch_configuration="main",
        configuration="steps: []\n",
    )


def test_get_pipeline_decodes_observed_state() -> None:
    """GET by slug decodes the compared fields."""
    client, requests = _make_client(
        lambda _request: httpx.Response(
            200, json=_pipeline_payload(branch_configuration=None)
        )
    )

    observed = client.get_pipeline("widget")

    assert observed is not None
    assert observed.slug == "widget"
    assert observed.branch_configuration is None
    assert requests[0].url.path == f"{_PIPELINES_PATH}/widget"


def test_get_pipeline_returns_none_on_404() -> None:
    """Absent pipelines are reported as None."""
    client, _ = _make_client(
        lambda _request: httpx.Response(404, json={"message": "No pipeline found"})
    )

    assert client.get_pipeline("widget") is None


def test_get_pipeline_raises_on_server_error() -> None:
    """Other errors raise BuildkiteAPIError carrying the message."""
    client, _ = _make_client(
        lambda _request: httpx.Response(500, json={"message": "Oops"})
    )

    with pytest.raises(BuildkiteAPIError, match="Oops") as excinfo:
        client.get_pipeline("widget")

    assert excinfo.value.status_code == 500


def test_create_pipeline_posts_full_definition() -> None:
    """Creation sends name, slug, repository, branches, and provider settings."""
    client, requests = _make_client(
        lambda _request: httpx.Response(201, json=_pipeline_payload())
    )

    client.create_pipeline(_create_request())

    request = requests[0]
    assert request.method == "POST"
    assert request.url.path == _PIPELINES_PATH
    body = json_body(request)
    assert body["slug"] == "widget"
    assert body["default_branch"] == "main"
    assert body["branch_configuration"] == "main"
    assert body["provider_settings"] == {
        "trigger_mode": "code",
        "build_pull_requests": True,
        "build_pull_request_forks": False,
        "build_tags": False,
    }


def test_create_pipeline_maps_already_exists_code() -> None:
    """A 422 with an already_exists code raises PipelineExistsError."""
    client, _ = _make_client(
        lambda _request: httpx.Response(
            422,
            json={
                "message": "Validation Failed",
                "errors": [
                    {"field": "slug", "code": "already_exists", "message": "taken"}
                ],
            },
        )
    )

    with pytest.raises(PipelineExistsError) as excinfo:
        client.create_pipeline(_create_request())

    assert excinfo.value.slug == "widget"


def test_create_pipeline_other_validation_errors_are_api_errors() -> None:
    """A 422 for other reasons is a plain API error."""
    client, _ = _make_client(
        lambda _request: httpx.Response(
            422,
            json={"message": "Validation Failed", "errors": ["Repository is blank"]},
        )
    )

    with pytest.raises(BuildkiteAPIError) as excinfo:
        client.create_pipeline(_create_request())

    assert not isinstance(excinfo.value, PipelineExistsError)


def test_update_pipeline_patches_only_changes() -> None:
    """PATCH carries exactly the changed fields."""
    client, requests = _make_client(
        lambda _request: httpx.Response(
            200, json=_pipeline_payload(branch_configuration="develop")
        )
    )

    observed = client.update_pipeline("widget", {"branch_configuration": "develop"})

    assert observed.branch_configuration == "develop"
    assert requests[0].method == "PATCH"
    assert requests[0].url.path == f"{_PIPELINES_PATH}/widget"
    assert json_body(requests[0]) == {"branch_configuration": "develop"}


def test_decode_failure_raises_shape_error() -> None:
    """Unexpected bodies raise BuildkiteResponseShapeError."""
    client, _ = _make_client(lambda _request: httpx.Response(200, json=["nope"]))

    with pytest.raises(BuildkiteResponseShapeError):
        client.get_pipeline("widget")


@pytest.mark.parametrize(
    ("body", "expected"),
    [
        (ErrorBody(errors=[FieldError(code="already_exists")]), True),
        (ErrorBody(message="Slug has already been taken"), True),
        (ErrorBody(errors=["Name has already been taken"]), True),
        (ErrorBody(message="Validation Failed", errors=["Repository is blank"]), False),
        (ErrorBody(), False),
    ],
)
def test_is_already_exists(body: ErrorBody, *, expected: bool) -> None:
    """Structured codes are preferred; free text is a fallback."""
    assert is_already_exists(body) is expected


def test_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Token and org are required; the API URL has a default."""
    monkeypatch.delenv("TRELLIS_BUILDKITE_TOKEN", raising=False)
    with pytest.raises(BuildkiteConfigError, match="TRELLIS_BUILDKITE_TOKEN"):
        BuildkiteConfig.from_env()

    monkeypatch.setenv("TRELLIS_BUILDKITE_TOKEN", _TOKEN)
    monkeypatch.delenv("TRELLIS_BUILDKITE_ORG", raising=False)
    with pytest.raises(BuildkiteConfigError, match="TRELLIS_BUILDKITE_ORG"):
        BuildkiteConfig.from_env()

    monkeypatch.setenv("TRELLIS_BUILDKITE_ORG", "acme-ci")
    monkeypatch.delenv("TRELLIS_BUILDKITE_API_URL", raising=False)
    config = BuildkiteConfig.from_env()
    assert config.org == "acme-ci"
    assert config.api_url == "https://api.buildkite.com"
