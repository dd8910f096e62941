"""Report rows produced by a pipeline synchronisation pass."""

from __future__ import annotations

import dataclasses

import msgspec

from trellis.common.outcomes import Action


class ReconciliationRecord(msgspec.Struct, frozen=True, kw_only=True):
    """Outcome for one repository; field order is the report column order.

    Attributes
    ----------
    repository : str
        Repository name.
    full_name : str
        Owner-qualified repository name.
    pipeline_slug : str
        Buildkite slug derived from the repository name.
    pipeline_file_found : bool
        Whether a trigger file was located.
    pipeline_file_path : str
        Located trigger file path, empty when none was found.
    action : Action
        Terminal action taken for the repository.
    reason : str
        Human-readable explanation of the action.
    changed_fields : str
        Comma-joined names of patched fields for updates.

    """

    repository: str
    full_name: str
    pipeline_slug: str
    pipeline_file_found: bool = False
    pipeline_file_path: str = ""
    action: Action
    reason: str = ""
    changed_fields: str = ""


REPORT_FIELDS: tuple[str, ...] = ReconciliationRecord.__struct_fields__


@dataclasses.dataclass(slots=True)
class RecordDraft:
    """Mutable row under construction while a repository is processed.

    A draft is sealed into an immutable :class:`ReconciliationRecord` exactly
    once via :meth:`finish`.
    """

    repository: str
    full_name: str
    pipeline_slug: str
    pipeline_file_path: str | None = None

    def found(self, path: str) -> None:
        """Note the located trigger file."""
        self.pipeline_file_path = path

    def finish(
        self,
        action: Action,
        reason: str,
        changed_fields: tuple[str, ...] = (),
    ) -> ReconciliationRecord:
        """Seal the draft into a report row."""
        return ReconciliationRecord(
            repository=self.repository,
            full_name=self.full_name,
            pipeline_slug=self.pipeline_slug,
            pipeline_file_found=self.pipeline_file_path is not None,
            pipeline_file_path=self.pipeline_file_path or "",
            action=action,
            reason=reason,
            changed_fields=",".join(changed_fields),
        )
