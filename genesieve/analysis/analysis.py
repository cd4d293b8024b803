"""
Immutable analysis configuration.

An AnalysisConfig is built once from the step declaration surface (see
``parser``) and never mutated. Use ``copy_with`` to derive a variant.
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Set, Tuple

from ..models import ModeOfInheritance
from .steps import AnalysisStep

logger = logging.getLogger(__name__)


class AnalysisMode(Enum):
    """Memory/completeness trade-off of a run."""

    FULL = "FULL"
    SPARSE = "SPARSE"
    PASS_ONLY = "PASS_ONLY"

    @classmethod
    def parse(cls, value) -> "AnalysisMode":
        if isinstance(value, cls):
            return value
        try:
            return cls[str(value).strip().upper().replace("-", "_")]
        except KeyError:
            raise ValueError(
                f"Unknown analysis mode '{value}'. Expected one of {[m.name for m in cls]}"
            )


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration of one analysis.

    Attributes
    ----------
    steps : Tuple[AnalysisStep, ...]
        Steps in declared order
    mode_of_inheritance : ModeOfInheritance
        Mode the genes are analysed for
    analysis_mode : AnalysisMode
        Execution strategy selector
    frequency_sources : FrozenSet[str]
        Declared population frequency sources
    pathogenicity_sources : FrozenSet[str]
        Declared pathogenicity predictors
    proband : str, optional
        Proband sample name; may be omitted for single sample sources
    pedigree : Dict[str, Dict[str, Any]]
        Pedigree keyed by sample id, in the ``ped_reader`` format
    hpo_ids : Tuple[str, ...]
        Phenotype terms handed to prioritisers
    progress_interval : int
        Number of streamed records between progress log lines
    threads : int
        Workers used to build the reference gene index
    """

    steps: Tuple[AnalysisStep, ...] = ()
    mode_of_inheritance: ModeOfInheritance = ModeOfInheritance.ANY
    analysis_mode: AnalysisMode = AnalysisMode.PASS_ONLY
    frequency_sources: FrozenSet[str] = frozenset()
    pathogenicity_sources: FrozenSet[str] = frozenset()
    proband: Optional[str] = None
    pedigree: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    hpo_ids: Tuple[str, ...] = ()
    progress_interval: int = 100_000
    threads: int = 1

    def __post_init__(self):
        object.__setattr__(self, "steps", tuple(self.steps))
        object.__setattr__(self, "hpo_ids", tuple(self.hpo_ids))
        object.__setattr__(self, "frequency_sources", frozenset(self.frequency_sources))
        object.__setattr__(self, "pathogenicity_sources", frozenset(self.pathogenicity_sources))
        if self.progress_interval < 1:
            raise ValueError(f"progress_interval must be positive, got {self.progress_interval}")

    def copy_with(self, **changes) -> "AnalysisConfig":
        """Return a copy with the given fields replaced."""
        return dataclasses.replace(self, **changes)

    @property
    def main_priority_type(self) -> Optional[str]:
        """Priority type of the first declared prioritiser, if any."""
        for step in self.steps:
            if step.is_prioritiser():
                return step.priority_type
        return None

    def declared_data_sources(self) -> Set[str]:
        """Data source categories with at least one declared source."""
        declared = set()
        if self.frequency_sources:
            declared.add("frequency")
        if self.pathogenicity_sources:
            declared.add("pathogenicity")
        return declared

    def has_variant_filter(self) -> bool:
        return any(step.is_variant_filter() for step in self.steps)
