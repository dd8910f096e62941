"""Typed Buildkite REST payloads."""

from __future__ import annotations

import msgspec


class ProviderSettings(msgspec.Struct, frozen=True, kw_only=True):
    """GitHub provider trigger settings applied to every created pipeline."""

    trigger_mode: str = "code"
    build_pull_requests: bool = True
    build_pull_request_forks: bool = False
    build_tags: bool = False


class ObservedPipeline(msgspec.Struct, frozen=True, kw_only=True):
    """Snapshot of a pipeline as returned by ``GET .../pipelines/{slug}``.

    Buildkite omits or nulls ``branch_configuration`` and ``configuration``
    for pipelines that never set them.
    """

    slug: str
    name: str = ""
    repository: str = ""
    default_branch: str | None = None
    branch_configuration: str | None = None
    configuration: str | None = None


class PipelineCreateRequest(msgspec.Struct, frozen=True, kw_only=True):
    """Body of ``POST /v2/organizations/{org}/pipelines``."""

    name: str
    slug: str
    repository: str
    default_branch: str
    branch_configuration: str
    configuration: str
    provider_settings: ProviderSettings = msgspec.field(
        default_factory=ProviderSettings
    )


class FieldError(msgspec.Struct, frozen=True, kw_only=True):
    """Entry of the ``errors`` array in a 422 validation response."""

    field: str = ""
    code: str = ""
    message: str = ""


class ErrorBody(msgspec.Struct, frozen=True, kw_only=True):
    """Buildkite error document."""

    message: str = ""
    errors: list[FieldError | str] = msgspec.field(default_factory=list)
