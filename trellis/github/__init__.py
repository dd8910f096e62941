"""GitHub REST client, payload models, and pipeline file locator."""

from __future__ import annotations

from .client import ContentLookup, GitHubRestClient, GitHubRestConfig, RepositoryLister
from .errors import GitHubAPIError, GitHubConfigError, GitHubResponseShapeError
from .locator import PipelineFileLocator
from .models import ContentEntry, RepositoryCandidate

__all__ = [
    "ContentEntry",
    "ContentLookup",
    "GitHubAPIError",
    "GitHubConfigError",
    "GitHubResponseShapeError",
    "GitHubRestClient",
    "GitHubRestConfig",
    "PipelineFileLocator",
    "RepositoryCandidate",
    "RepositoryLister",
]
