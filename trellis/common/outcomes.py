"""Outcome types shared by every create-or-update script."""

from __future__ import annotations

import collections
import dataclasses
import enum
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class Action(enum.StrEnum):
    """Terminal outcome of reconciling one remote resource."""

    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"
    FAILED = "failed"


def count_actions(actions: cabc.Iterable[Action]) -> dict[Action, int]:
    """Fold outcomes into a count per action, listing every action once.

    Examples
    --------
    >>> count_actions([Action.CREATED, Action.CREATED])[Action.CREATED]
    2

    """
    tally = collections.Counter(actions)
    return {action: tally.get(action, 0) for action in Action}


def summary_lines(counts: dict[Action, int]) -> list[str]:
    """Render one ``action: count`` line per action in declaration order."""
    return [f"{action}: {counts.get(action, 0)}" for action in Action]


@dataclasses.dataclass(frozen=True, slots=True)
class ProvisionStep:
    """One provisioning step applied (or attempted) for a service."""

    service: str
    resource: str
    name: str
    action: Action
    detail: str = ""

    def describe(self) -> str:
        """Return a console line for the step."""
        line = f"{self.action:<9} {self.resource} {self.name}"
        return f"{line} ({self.detail})" if self.detail else line


@dataclasses.dataclass(slots=True)
class ProvisionResult:
    """Ordered steps recorded by a provisioning run."""

    steps: list[ProvisionStep] = dataclasses.field(default_factory=list)

    def record(  # noqa: PLR0913
        self,
        service: str,
        resource: str,
        name: str,
        action: Action,
        detail: str = "",
    ) -> ProvisionStep:
        """Append a step and return it."""
        step = ProvisionStep(service, resource, name, action, detail)
        self.steps.append(step)
        return step

    def counts(self) -> dict[Action, int]:
        """Return per-action counts derived from the recorded steps."""
        return count_actions(step.action for step in self.steps)

    @property
    def failed(self) -> bool:
        """Return True when at least one step failed."""
        return any(step.action is Action.FAILED for step in self.steps)
