"""
Analysis steps - the units of work of an analysis pipeline.

Every step carries a fixed ``StepType`` tag set on its class. The tag is the
only thing the engine dispatches on: the step kind is looked up from the tag,
so a step can never change kind and never belongs to more than one kind.
"""

import logging
from abc import ABC
from enum import Enum
from typing import ClassVar, Dict, FrozenSet

logger = logging.getLogger(__name__)


class StepType(Enum):
    """Closed set of step tags."""

    VARIANT_FILTER = "variant_filter"
    GENE_FILTER = "gene_filter"
    PRIORITISER = "prioritiser"
    PRIORITY_SCORE_FILTER = "priority_score_filter"
    INHERITANCE_FILTER = "inheritance_filter"
    INHERITANCE_DEPENDENT_PRIORITISER = "inheritance_dependent_prioritiser"


class StepKind(Enum):
    """Execution kind of a step, used to group and order steps."""

    VARIANT_FILTER = "VARIANT_FILTER"
    GENE_ONLY_DEPENDENT = "GENE_ONLY_DEPENDENT"
    INHERITANCE_MODE_DEPENDENT = "INHERITANCE_MODE_DEPENDENT"


STEP_KINDS: Dict[StepType, StepKind] = {
    StepType.VARIANT_FILTER: StepKind.VARIANT_FILTER,
    StepType.GENE_FILTER: StepKind.GENE_ONLY_DEPENDENT,
    StepType.PRIORITISER: StepKind.GENE_ONLY_DEPENDENT,
    StepType.PRIORITY_SCORE_FILTER: StepKind.GENE_ONLY_DEPENDENT,
    StepType.INHERITANCE_FILTER: StepKind.INHERITANCE_MODE_DEPENDENT,
    StepType.INHERITANCE_DEPENDENT_PRIORITISER: StepKind.INHERITANCE_MODE_DEPENDENT,
}

PRIORITISER_TYPES = frozenset(
    {StepType.PRIORITISER, StepType.INHERITANCE_DEPENDENT_PRIORITISER}
)

FILTER_TYPES = frozenset(
    {
        StepType.VARIANT_FILTER,
        StepType.GENE_FILTER,
        StepType.PRIORITY_SCORE_FILTER,
        StepType.INHERITANCE_FILTER,
    }
)


def step_kind(step: "AnalysisStep") -> StepKind:
    """Return the kind of a step. Total over every constructible step."""
    return STEP_KINDS[step.step_type]


class AnalysisStep(ABC):
    """Base class of all filters and prioritisers.

    Subclasses set ``step_type`` at class level. ``required_data_sources``
    names the data source categories (``frequency``, ``pathogenicity``) that
    must be declared in the analysis for the step to be meaningful.
    """

    step_type: ClassVar[StepType]
    required_data_sources: ClassVar[FrozenSet[str]] = frozenset()

    @property
    def kind(self) -> StepKind:
        return step_kind(self)

    def is_variant_filter(self) -> bool:
        return self.kind is StepKind.VARIANT_FILTER

    def is_gene_only_dependent(self) -> bool:
        return self.kind is StepKind.GENE_ONLY_DEPENDENT

    def is_inheritance_mode_dependent(self) -> bool:
        return self.kind is StepKind.INHERITANCE_MODE_DEPENDENT

    def is_prioritiser(self) -> bool:
        return self.step_type in PRIORITISER_TYPES

    def is_filter(self) -> bool:
        return self.step_type in FILTER_TYPES

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
