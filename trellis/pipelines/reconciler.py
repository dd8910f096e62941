"""Reconcile Buildkite pipelines against an organisation's GitHub repositories.

For each eligible repository the reconciler locates a trigger file, derives the
desired pipeline, reads the current pipeline by slug, and then creates it,
patches only the fields that drifted, or leaves it alone. Failures are caught
at the repository boundary so one repository never aborts the batch.
"""

from __future__ import annotations

import typing as typ

from trellis.common.outcomes import Action
from trellis.common.slug import pipeline_slug
from trellis.logging import get_logger, log_info, log_warning

from .desired import create_request_for, desired_state_for, resolve_branch
from .diff import diff_pipeline
from .models import RecordDraft, ReconciliationRecord
from .report import PipelineSyncReport

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from trellis.buildkite.client import PipelineStore
    from trellis.github.client import RepositoryLister
    from trellis.github.locator import PipelineFileLocator
    from trellis.github.models import RepositoryCandidate

    from .config import PipelineSyncConfig

    RecordCallback: typ.TypeAlias = cabc.Callable[[ReconciliationRecord], None]

logger = get_logger(__name__)

DRY_RUN_REASON = "dryrun"
NO_PIPELINE_FILE_REASON = "no pipeline file found"


class PipelineReconciler:
    """Bring Buildkite pipelines in line with GitHub repositories.

    Parameters
    ----------
    config
        Behaviour of the pass (candidates, gates, fallback branch, dry run).
    lister
        Source of repository candidates.
    locator
        Trigger-file locator backed by the GitHub contents API.
    pipelines
        Buildkite pipeline reads and writes.
    on_record
        Optional callback invoked with each record as soon as it is sealed.

    """

    def __init__(
        self,
        config: PipelineSyncConfig,
        *,
        lister: RepositoryLister,
        locator: PipelineFileLocator,
        pipelines: PipelineStore,
        on_record: RecordCallback | None = None,
    ) -> None:
        """Wire the reconciler to its collaborators."""
        self._config = config
        self._lister = lister
        self._locator = locator
        self._pipelines = pipelines
        self._on_record = on_record

    def eligible(
        self, repositories: cabc.Iterable[RepositoryCandidate]
    ) -> list[RepositoryCandidate]:
        """Drop archived repositories and forks unless configured otherwise."""
        return [
            repo
            for repo in repositories
            if (self._config.include_archived or not repo.archived)
            and (self._config.include_forks or not repo.fork)
        ]

    def run(self) -> PipelineSyncReport:
        """Process every eligible repository in listing order."""
        repositories = self._lister.list_org_repositories(self._config.github_org)
        candidates = self.eligible(repositories)
        log_info(
            logger,
            "Reconciling %d of %d repositories in %s (dry_run=%s)",
            len(candidates),
            len(repositories),
            self._config.github_org,
            self._config.dry_run,
        )

        report = PipelineSyncReport()
        claimed_slugs: dict[str, str] = {}
        for repo in candidates:
            record = self.reconcile_repository(repo, claimed_slugs=claimed_slugs)
            report.add(record)
            if self._on_record is not None:
                self._on_record(record)
        return report

    def reconcile_repository(
        self,
        repo: RepositoryCandidate,
        *,
        claimed_slugs: dict[str, str] | None = None,
    ) -> ReconciliationRecord:
        """Reconcile one repository and return its sealed record.

        ``claimed_slugs`` maps slugs already used in this pass to the
        repository that claimed them; a second claimant fails.
        """
        slug = pipeline_slug(repo.name)
        draft = RecordDraft(
            repository=repo.name, full_name=repo.full_name, pipeline_slug=slug
        )
        try:
            record = self._reconcile(
                repo, draft, {} if claimed_slugs is None else claimed_slugs
            )
        except Exception as exc:  # noqa: BLE001 - isolate per-repository failures
            log_warning(
                logger,
                "%s: reconciliation failed: %s",
                repo.full_name,
                exc,
                exc_info=exc,
            )
            return draft.finish(Action.FAILED, str(exc) or type(exc).__name__)

        log_info(
            logger,
            "%s: %s (%s)",
            repo.full_name,
            record.action,
            record.reason,
        )
        return record

    def _reconcile(
        self,
        repo: RepositoryCandidate,
        draft: RecordDraft,
        claimed_slugs: dict[str, str],
    ) -> ReconciliationRecord:
        slug = draft.pipeline_slug
        if not slug:
            return draft.finish(
                Action.FAILED, "repository name yields an empty pipeline slug"
            )
        owner = claimed_slugs.setdefault(slug, repo.full_name)
        if owner != repo.full_name:
            return draft.finish(
                Action.FAILED, f"pipeline slug collision with {owner}"
            )

        branch = resolve_branch(repo, self._config.fallback_branch)
        if self._config.require_folder and not self._locator.has_folder(
            repo, ref=branch, folder=self._config.required_folder
        ):
            return draft.finish(
                Action.SKIPPED,
                f"missing required folder {self._config.required_folder}",
            )

        path = self._locator.locate(
            repo, ref=branch, candidates=self._config.candidates
        )
        if path is None:
            return draft.finish(Action.SKIPPED, NO_PIPELINE_FILE_REASON)
        draft.found(path)

        desired = desired_state_for(repo, path, branch=branch)
        observed = self._pipelines.get_pipeline(slug)

        if observed is None:
            if self._config.dry_run:
                return draft.finish(Action.CREATED, DRY_RUN_REASON)
            self._pipelines.create_pipeline(create_request_for(desired))
            return draft.finish(Action.CREATED, "pipeline created")

        changes = diff_pipeline(desired, observed)
        if not changes:
            return draft.finish(Action.UNCHANGED, "pipeline up to date")

        changed_fields = tuple(changes)
        if self._config.dry_run:
            return draft.finish(Action.UPDATED, DRY_RUN_REASON, changed_fields)
        self._pipelines.update_pipeline(slug, changes)
        return draft.finish(Action.UPDATED, "pipeline updated", changed_fields)
