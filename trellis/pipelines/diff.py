"""Field-level comparison between desired and observed pipelines."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from trellis.buildkite.models import ObservedPipeline

    from .desired import DesiredPipelineState

COMPARED_FIELDS: tuple[str, ...] = (
    "repository",
    "branch_configuration",
    "configuration",
)


def normalise_text(value: str | None) -> str:
    r"""Fold line endings to ``\n`` and strip surrounding whitespace.

    Examples
    --------
    >>> normalise_text("steps:\r\n  - x\r\n\n")
    'steps:\n  - x'

    """
    if value is None:
        return ""
    return value.replace("\r\n", "\n").replace("\r", "\n").strip()


def _desired_values(desired: DesiredPipelineState) -> dict[str, str]:
    return {
        "repository": desired.repository,
        "branch_configuration": desired.branch,
        "configuration": desired.configuration,
    }


def diff_pipeline(
    desired: DesiredPipelineState, observed: ObservedPipeline
) -> dict[str, str]:
    """Return the desired value of every compared field that differs.

    Keys follow :data:`COMPARED_FIELDS` order, so the result doubles as a
    sparse PATCH body.
    """
    wanted = _desired_values(desired)
    return {
        field: wanted[field]
        for field in COMPARED_FIELDS
        if normalise_text(wanted[field]) != normalise_text(getattr(observed, field))
    }
