"""Buildkite pipeline synchronisation from GitHub repositories.

Usage
-----
Run one pass with real clients::

    from trellis.buildkite import BuildkiteClient, BuildkiteConfig
    from trellis.github import GitHubRestClient, GitHubRestConfig
    from trellis.pipelines import PipelineSyncConfig, sync_pipelines

    config = PipelineSyncConfig.from_env()
    with (
        GitHubRestClient(GitHubRestConfig.from_env()) as github,
        BuildkiteClient(BuildkiteConfig.from_env()) as buildkite,
    ):
        outcome = sync_pipelines(
            config, lister=github, contents=github, pipelines=buildkite
        )

"""

from __future__ import annotations

from .config import DEFAULT_PIPELINE_CANDIDATES, PipelineSyncConfig
from .desired import (
    DesiredPipelineState,
    build_pipeline_configuration,
    create_request_for,
    desired_state_for,
    resolve_branch,
)
from .diff import COMPARED_FIELDS, diff_pipeline, normalise_text
from .models import REPORT_FIELDS, RecordDraft, ReconciliationRecord
from .reconciler import DRY_RUN_REASON, NO_PIPELINE_FILE_REASON, PipelineReconciler
from .report import (
    PipelineSyncReport,
    ReportPaths,
    ReportWriter,
    render_csv,
    render_json,
    summarise,
)
from .sync import PipelineSyncOutcome, format_record, sync_pipelines

__all__ = [
    "COMPARED_FIELDS",
    "DEFAULT_PIPELINE_CANDIDATES",
    "DRY_RUN_REASON",
    "NO_PIPELINE_FILE_REASON",
    "REPORT_FIELDS",
    "DesiredPipelineState",
    "PipelineReconciler",
    "PipelineSyncConfig",
    "PipelineSyncOutcome",
    "PipelineSyncReport",
    "RecordDraft",
    "ReconciliationRecord",
    "ReportPaths",
    "ReportWriter",
    "build_pipeline_configuration",
    "create_request_for",
    "desired_state_for",
    "diff_pipeline",
    "format_record",
    "normalise_text",
    "render_csv",
    "render_json",
    "resolve_branch",
    "summarise",
    "sync_pipelines",
]
