"""Configuration for the Buildkite pipeline synchronisation pass.

Usage
-----
Create a configuration with defaults:

>>> config = PipelineSyncConfig(github_org="acme")
>>> config.fallback_branch
'main'

Or load from environment variables:

>>> import os
>>> os.environ["TRELLIS_GITHUB_ORG"] = "acme"
>>> os.environ["TRELLIS_DRY_RUN"] = "yes"
>>> PipelineSyncConfig.from_env().dry_run
True

"""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

from trellis.common.env import env_bool, env_list, env_str
from trellis.github.errors import GitHubConfigError

DEFAULT_PIPELINE_CANDIDATES: tuple[str, ...] = (
    ".buildkite/pipeline.yml",
    ".buildkite/pipeline.yaml",
    "buildkite.yml",
    "buildkite.yaml",
)
DEFAULT_REQUIRED_FOLDER = ".buildkite"
DEFAULT_FALLBACK_BRANCH = "main"
DEFAULT_REPORT_DIR = Path("reports")


@dc.dataclass(frozen=True, slots=True)
class PipelineSyncConfig:
    """Behaviour of one pipeline synchronisation pass.

    Attributes
    ----------
    github_org
        Organisation whose repositories are the source of truth.
    candidates
        Relative trigger-file paths, checked strictly in this order.
    require_folder
        When set, repositories without ``required_folder`` are skipped.
    required_folder
        Folder whose presence the gate checks.
    include_archived
        Process archived repositories as well.
    include_forks
        Process forked repositories as well.
    fallback_branch
        Branch used when a repository reports no default branch.
    report_dir
        Directory receiving the CSV and JSON report files.
    dry_run
        Record intended creates and patches without calling Buildkite.

    """

    github_org: str
    candidates: tuple[str, ...] = DEFAULT_PIPELINE_CANDIDATES
    require_folder: bool = False
    required_folder: str = DEFAULT_REQUIRED_FOLDER
    include_archived: bool = False
    include_forks: bool = False
    fallback_branch: str = DEFAULT_FALLBACK_BRANCH
    report_dir: Path = DEFAULT_REPORT_DIR
    dry_run: bool = False

    @classmethod
    def from_env(cls, *, github_org: str | None = None) -> PipelineSyncConfig:
        """Create configuration from environment variables.

        ``github_org`` takes precedence over ``TRELLIS_GITHUB_ORG``.

        Reads ``TRELLIS_GITHUB_ORG`` (required unless given),
        ``TRELLIS_PIPELINE_CANDIDATES``, ``TRELLIS_REQUIRE_FOLDER``,
        ``TRELLIS_REQUIRED_FOLDER``,
        ``TRELLIS_INCLUDE_ARCHIVED``, ``TRELLIS_INCLUDE_FORKS``,
        ``TRELLIS_FALLBACK_BRANCH``, ``TRELLIS_REPORT_DIR``, and
        ``TRELLIS_DRY_RUN``.

        Raises
        ------
        GitHubConfigError
            If ``TRELLIS_GITHUB_ORG`` is unset.
        EnvVarError
            If a boolean variable holds an unrecognised value.

        """
        github_org = github_org or env_str("TRELLIS_GITHUB_ORG")
        if not github_org:
            raise GitHubConfigError.missing_org()

        return cls(
            github_org=github_org,
            candidates=env_list(
                "TRELLIS_PIPELINE_CANDIDATES", DEFAULT_PIPELINE_CANDIDATES
            ),
            require_folder=env_bool("TRELLIS_REQUIRE_FOLDER"),
            required_folder=env_str(
                "TRELLIS_REQUIRED_FOLDER", DEFAULT_REQUIRED_FOLDER
            ),
            include_archived=env_bool("TRELLIS_INCLUDE_ARCHIVED"),
            include_forks=env_bool("TRELLIS_INCLUDE_FORKS"),
            fallback_branch=env_str(
                "TRELLIS_FALLBACK_BRANCH", DEFAULT_FALLBACK_BRANCH
            ),
            report_dir=Path(env_str("TRELLIS_REPORT_DIR", str(DEFAULT_REPORT_DIR))),
            dry_run=env_bool("TRELLIS_DRY_RUN"),
        )
