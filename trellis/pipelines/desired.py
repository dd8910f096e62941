"""Desired Buildkite pipeline state derived from a GitHub repository."""

from __future__ import annotations

import dataclasses
import typing as typ

from trellis.buildkite.models import PipelineCreateRequest, ProviderSettings
from trellis.common.slug import pipeline_slug

if typ.TYPE_CHECKING:
    from trellis.github.models import RepositoryCandidate

_UPLOAD_TEMPLATE = """\
steps:
  - label: ":pipeline: Upload"
    command: "buildkite-agent pipeline upload {path}"
"""


@dataclasses.dataclass(frozen=True, slots=True)
class DesiredPipelineState:
    """Pipeline definition a repository should have in Buildkite."""

    slug: str
    name: str
    repository: str
    branch: str
    configuration: str


def build_pipeline_configuration(path: str) -> str:
    """Return the single-step upload definition for a trigger file.

    Examples
    --------
    >>> print(build_pipeline_configuration(".buildkite/pipeline.yml"), end="")
    steps:
      - label: ":pipeline: Upload"
        command: "buildkite-agent pipeline upload .buildkite/pipeline.yml"

    """
    return _UPLOAD_TEMPLATE.format(path=path)


def resolve_branch(repo: RepositoryCandidate, fallback: str) -> str:
    """Return the repository's default branch, or ``fallback`` when blank."""
    branch = (repo.default_branch or "").strip()
    return branch or fallback


def desired_state_for(
    repo: RepositoryCandidate, pipeline_path: str, *, branch: str
) -> DesiredPipelineState:
    """Build the desired pipeline state for ``repo``.

    ``branch`` must already have the fallback applied (see
    :func:`resolve_branch`) so creation and comparison agree.
    """
    return DesiredPipelineState(
        slug=pipeline_slug(repo.name),
        name=repo.name,
        repository=repo.clone_url,
        branch=branch,
        configuration=build_pipeline_configuration(pipeline_path),
    )


def create_request_for(state: DesiredPipelineState) -> PipelineCreateRequest:
    """Return the Buildkite creation body for ``state``."""
    return PipelineCreateRequest(
        name=state.name,
        slug=state.slug,
        repository=state.repository,
        default_branch=state.branch,
        branch_configuration=state.branch,
        configuration=state.configuration,
        provider_settings=ProviderSettings(
            trigger_mode="code",
            build_pull_requests=True,
            build_pull_request_forks=False,
            build_tags=False,
        ),
    )
