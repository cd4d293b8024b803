"""
Grouping of checked analysis steps into same-kind runs.

Steps of the same kind that follow each other are executed together, e.g.
all variant filters of the first group are applied in a single pass over the
variant stream.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .steps import AnalysisStep, StepKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepGroup:
    """A non-empty, ordered run of steps sharing one kind."""

    kind: StepKind
    steps: Tuple[AnalysisStep, ...]

    def __post_init__(self):
        if not self.steps:
            raise ValueError("A step group cannot be empty")
        mixed = [step for step in self.steps if step.kind is not self.kind]
        if mixed:
            raise ValueError(f"Steps {mixed} do not belong in a {self.kind.value} group")

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self):
        return iter(self.steps)


def group_steps(steps: Sequence[AnalysisStep]) -> List[StepGroup]:
    """Split ``steps`` into maximal contiguous runs of the same kind.

    Concatenating the steps of the returned groups reproduces ``steps``.

    Parameters
    ----------
    steps : Sequence[AnalysisStep]
        Checked analysis steps

    Returns
    -------
    List[StepGroup]
        Groups in step order; empty for an empty step list
    """
    if not steps:
        logger.debug("No analysis steps to group.")
        return []

    groups: List[StepGroup] = []
    current_kind = steps[0].kind
    current: List[AnalysisStep] = []
    for step in steps:
        if step.kind is not current_kind:
            logger.debug(f"Making new group for {step.kind.value} steps")
            groups.append(StepGroup(current_kind, tuple(current)))
            current = []
            current_kind = step.kind
        current.append(step)
    groups.append(StepGroup(current_kind, tuple(current)))
    return groups
