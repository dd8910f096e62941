"""Buildkite REST client and pipeline payload models."""

from __future__ import annotations

from .client import BuildkiteClient, BuildkiteConfig, PipelineStore, is_already_exists
from .errors import (
    BuildkiteAPIError,
    BuildkiteConfigError,
    BuildkiteResponseShapeError,
    PipelineExistsError,
)
from .models import (
    ErrorBody,
    FieldError,
    ObservedPipeline,
    PipelineCreateRequest,
    ProviderSettings,
)

__all__ = [
    "BuildkiteAPIError",
    "BuildkiteClient",
    "BuildkiteConfig",
    "BuildkiteConfigError",
    "BuildkiteResponseShapeError",
    "ErrorBody",
    "FieldError",
    "ObservedPipeline",
    "PipelineCreateRequest",
    "PipelineExistsError",
    "PipelineStore",
    "ProviderSettings",
    "is_already_exists",
]
