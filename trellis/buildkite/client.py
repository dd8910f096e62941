"""Buildkite REST client for reading, creating, and patching pipelines."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses
import os
import typing as typ

import httpx
import msgspec

from .errors import (
    BuildkiteAPIError,
    BuildkiteConfigError,
    BuildkiteResponseShapeError,
    PipelineExistsError,
)
from .models import ErrorBody, FieldError, ObservedPipeline, PipelineCreateRequest

if typ.TYPE_CHECKING:
    import types

_DEFAULT_API_URL = "https://api.buildkite.com"
_HTTP_NOT_FOUND = 404
_HTTP_UNPROCESSABLE = 422
_HTTP_ERROR_STATUS_THRESHOLD = 400
_ALREADY_EXISTS_CODE = "already_exists"
_ALREADY_TAKEN_TEXT = "has already been taken"


class PipelineStore(typ.Protocol):
    """Interface over the Buildkite pipeline endpoints used by the reconciler."""

    def get_pipeline(self, slug: str) -> ObservedPipeline | None:
        """Return the pipeline for ``slug`` or None when it does not exist."""
        ...

    def create_pipeline(self, request: PipelineCreateRequest) -> ObservedPipeline:
        """Create a pipeline and return its stored state."""
        ...

    def update_pipeline(
        self, slug: str, changes: cabc.Mapping[str, str]
    ) -> ObservedPipeline:
        """Patch only ``changes`` on the pipeline and return its stored state."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class BuildkiteConfig:
    """Configuration for the Buildkite REST API client."""

    token: str
    org: str
    api_url: str = _DEFAULT_API_URL
    timeout_s: float = 20.0
    user_agent: str = "trellis/0.1"

    @classmethod
    def from_env(cls) -> BuildkiteConfig:
        """Build configuration from ``TRELLIS_BUILDKITE_*`` env vars."""
        token = os.environ.get("TRELLIS_BUILDKITE_TOKEN", "").strip()
        if not token:
            raise BuildkiteConfigError.missing_token()
        org = os.environ.get("TRELLIS_BUILDKITE_ORG", "").strip()
        if not org:
            raise BuildkiteConfigError.missing_org()
        api_url = os.environ.get("TRELLIS_BUILDKITE_API_URL", "").strip()
        return cls(token=token, org=org, api_url=api_url or _DEFAULT_API_URL)


def _decode_error_body(response: httpx.Response) -> ErrorBody:
    try:
        return msgspec.json.decode(response.content, type=ErrorBody)
    except msgspec.DecodeError:
        return ErrorBody()


def _mentions_already_taken(body: ErrorBody) -> bool:
    """Match Buildkite's free-text wording for slug or name conflicts.

    Only consulted when no structured ``already_exists`` code is present.
    """
    texts = [body.message]
    texts.extend(
        error.message if isinstance(error, FieldError) else error
        for error in body.errors
    )
    return any(_ALREADY_TAKEN_TEXT in text.lower() for text in texts)


def is_already_exists(body: ErrorBody) -> bool:
    """Return True when a validation error reports an existing pipeline."""
    if any(
        isinstance(error, FieldError) and error.code == _ALREADY_EXISTS_CODE
        for error in body.errors
    ):
        return True
    return _mentions_already_taken(body)


class BuildkiteClient:
    """Synchronous Buildkite REST client implementing :class:`PipelineStore`."""

    def __init__(
        self,
        config: BuildkiteConfig,
        *,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialise the client with the provided API configuration."""
        self._config = config
        self._pipelines_url = (
            f"{config.api_url.rstrip('/')}/v2/organizations/{config.org}/pipelines"
        )
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(
            timeout=config.timeout_s,
            headers={
                "Authorization": f"Bearer {config.token}",
                "User-Agent": config.user_agent,
                "Accept": "application/json",
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

    def get_pipeline(self, slug: str) -> ObservedPipeline | None:
        """Return the pipeline for ``slug`` or None on 404."""
        url = f"{self._pipelines_url}/{slug}"
        response = self._client.get(url)
        if response.status_code == _HTTP_NOT_FOUND:
            return None
        self._raise_for_status(response, url)
        return self._decode(response, url)

    def create_pipeline(self, request: PipelineCreateRequest) -> ObservedPipeline:
        """Create a pipeline.

        Raises
        ------
        PipelineExistsError
            If Buildkite rejects the request because the pipeline exists.

        """
        response = self._client.post(
            self._pipelines_url,
            content=msgspec.json.encode(request),
            headers={"Content-Type": "application/json"},
        )
        if response.status_code == _HTTP_UNPROCESSABLE and is_already_exists(
            _decode_error_body(response)
        ):
            raise PipelineExistsError(request.slug, status_code=response.status_code)
        self._raise_for_status(response, self._pipelines_url)
        return self._decode(response, self._pipelines_url)

    def update_pipeline(
        self, slug: str, changes: cabc.Mapping[str, str]
    ) -> ObservedPipeline:
        """Patch only ``changes`` on the pipeline identified by ``slug``."""
        url = f"{self._pipelines_url}/{slug}"
        response = self._client.patch(url, json=dict(changes))
        self._raise_for_status(response, url)
        return self._decode(response, url)

    @staticmethod
    def _raise_for_status(response: httpx.Response, url: str) -> None:
        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            body = _decode_error_body(response)
            raise BuildkiteAPIError.http_error(
                response.status_code, url, body.message or None
            )

    @staticmethod
    def _decode(response: httpx.Response, url: str) -> ObservedPipeline:
        try:
            return msgspec.json.decode(response.content, type=ObservedPipeline)
        except msgspec.DecodeError as exc:
            raise BuildkiteResponseShapeError.invalid(url, exc) from exc
