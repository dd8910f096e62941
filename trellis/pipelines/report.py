r"""Accumulate reconciliation records and write the run's report files.

Both artefacts are rendered from the same ordered record list::

    {report_dir}/pipeline-sync-{timestamp}.csv
    {report_dir}/pipeline-sync-{timestamp}.json

Usage
-----
>>> from pathlib import Path
>>> report = PipelineSyncReport()
>>> writer = ReportWriter(Path("reports"))
>>> paths = writer.write(report.records, timestamp="20250102T030405Z")

"""

from __future__ import annotations

import csv
import dataclasses
import enum
import io
import typing as typ

import msgspec

from trellis.common.outcomes import Action, count_actions

from .models import REPORT_FIELDS, ReconciliationRecord

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

REPORT_PREFIX = "pipeline-sync"


class PipelineSyncReport:
    """Ordered, append-only collection of reconciliation records."""

    def __init__(self) -> None:
        """Start with an empty record list."""
        self._records: list[ReconciliationRecord] = []

    def add(self, record: ReconciliationRecord) -> None:
        """Append a record in processing order."""
        self._records.append(record)

    @property
    def records(self) -> tuple[ReconciliationRecord, ...]:
        """Return the records in processing order."""
        return tuple(self._records)

    def counts(self) -> dict[Action, int]:
        """Return per-action counts folded from the records."""
        return summarise(self._records)

    @property
    def failed(self) -> bool:
        """Return True when any repository failed."""
        return self.counts()[Action.FAILED] > 0


def summarise(records: cabc.Iterable[ReconciliationRecord]) -> dict[Action, int]:
    """Group records by action and count them."""
    return count_actions(record.action for record in records)


def _csv_cell(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, enum.Enum):
        return str(value.value)
    return str(value)


def render_csv(records: cabc.Iterable[ReconciliationRecord]) -> str:
    """Render records as CSV with a single header row."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(REPORT_FIELDS)
    for record in records:
        writer.writerow(_csv_cell(getattr(record, name)) for name in REPORT_FIELDS)
    return buffer.getvalue()


def render_json(records: cabc.Iterable[ReconciliationRecord]) -> bytes:
    """Render records as an indented JSON array of flat objects."""
    encoded = msgspec.json.encode(list(records))
    return msgspec.json.format(encoded, indent=2) + b"\n"


@dataclasses.dataclass(frozen=True, slots=True)
class ReportPaths:
    """Locations of the files written for one run."""

    csv: Path
    json: Path


class ReportWriter:
    """Write CSV and JSON reports into a directory.

    Parameters
    ----------
    base_path
        Directory for report files; created on first write.

    """

    def __init__(self, base_path: Path) -> None:
        """Initialise the writer with a base directory path."""
        self._base_path = base_path

    def write(
        self,
        records: cabc.Sequence[ReconciliationRecord],
        *,
        timestamp: str,
    ) -> ReportPaths:
        """Write both report files for ``records`` and return their paths."""
        self._base_path.mkdir(parents=True, exist_ok=True)
        stem = f"{REPORT_PREFIX}-{timestamp}"
        paths = ReportPaths(
            csv=self._base_path / f"{stem}.csv",
            json=self._base_path / f"{stem}.json",
        )
        paths.csv.write_text(render_csv(records), encoding="utf-8")
        paths.json.write_bytes(render_json(records))
        return paths
