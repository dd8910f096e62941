"""End-to-end pipeline synchronisation: reconcile, print, and write reports."""

from __future__ import annotations

import dataclasses
import typing as typ

from trellis.common.outcomes import summary_lines
from trellis.common.time import report_timestamp
from trellis.github.locator import PipelineFileLocator
from trellis.logging import get_logger, log_info

from .reconciler import PipelineReconciler
from .report import PipelineSyncReport, ReportPaths, ReportWriter

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from trellis.buildkite.client import PipelineStore
    from trellis.github.client import ContentLookup, RepositoryLister

    from .config import PipelineSyncConfig
    from .models import ReconciliationRecord

logger = get_logger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class PipelineSyncOutcome:
    """Records and report locations produced by one pass."""

    report: PipelineSyncReport
    paths: ReportPaths

    @property
    def exit_code(self) -> int:
        """Return 1 when any repository failed, else 0."""
        return 1 if self.report.failed else 0


def format_record(record: ReconciliationRecord) -> str:
    """Return the console line for one repository outcome."""
    line = f"{record.action:<9} {record.full_name} [{record.pipeline_slug}]"
    if record.reason:
        line = f"{line} {record.reason}"
    if record.changed_fields:
        line = f"{line} ({record.changed_fields})"
    return line


def sync_pipelines(  # noqa: PLR0913
    config: PipelineSyncConfig,
    *,
    lister: RepositoryLister,
    contents: ContentLookup,
    pipelines: PipelineStore,
    echo: cabc.Callable[[str], None] = print,
    timestamp: str | None = None,
) -> PipelineSyncOutcome:
    """Run one reconciliation pass and write its CSV and JSON reports."""
    reconciler = PipelineReconciler(
        config,
        lister=lister,
        locator=PipelineFileLocator(contents),
        pipelines=pipelines,
        on_record=lambda record: echo(format_record(record)),
    )
    report = reconciler.run()

    for line in summary_lines(report.counts()):
        echo(line)

    paths = ReportWriter(config.report_dir).write(
        report.records, timestamp=timestamp or report_timestamp()
    )
    echo(f"reports: {paths.csv} {paths.json}")
    log_info(logger, "Wrote pipeline sync reports to %s", config.report_dir)
    return PipelineSyncOutcome(report=report, paths=paths)
