"""Gene-level filters."""

import logging
from typing import Iterable

from ..analysis.steps import StepType
from ..models import FilterResult, Gene, ModeOfInheritance
from .base import GeneFilter

logger = logging.getLogger(__name__)


class GeneSymbolFilter(GeneFilter):
    """Pass only genes whose symbol is in a list of genes of interest."""

    def __init__(self, gene_symbols: Iterable[str]):
        self.gene_symbols = frozenset(symbol.strip() for symbol in gene_symbols if symbol.strip())

    @property
    def filter_type(self) -> str:
        return "gene_symbol"

    def run_filter(self, gene: Gene) -> FilterResult:
        if gene.symbol in self.gene_symbols:
            return FilterResult.pass_(self.filter_type)
        return FilterResult.fail(self.filter_type)

    def __repr__(self) -> str:
        return f"GeneSymbolFilter(genes={sorted(self.gene_symbols)})"


class PriorityScoreFilter(GeneFilter):
    """Pass genes scored at least ``min_priority_score`` by the prioritiser of ``priority_type``.

    A gene never scored by that prioritiser fails.
    """

    step_type = StepType.PRIORITY_SCORE_FILTER

    def __init__(self, priority_type: str, min_priority_score: float):
        self.priority_type = priority_type
        self.min_priority_score = float(min_priority_score)

    @property
    def filter_type(self) -> str:
        return "priority_score"

    def run_filter(self, gene: Gene) -> FilterResult:
        score = gene.priority_scores.get(self.priority_type)
        if score is not None and score >= self.min_priority_score:
            return FilterResult.pass_(self.filter_type)
        return FilterResult.fail(self.filter_type)

    def __repr__(self) -> str:
        return (
            f"PriorityScoreFilter(priority_type='{self.priority_type}', "
            f"min_priority_score={self.min_priority_score})"
        )


class InheritanceFilter(GeneFilter):
    """Pass genes compatible with the analysed mode of inheritance.

    Needs the inheritance analysis to have run, which the runner guarantees for
    every inheritance-mode dependent step.
    """

    step_type = StepType.INHERITANCE_FILTER

    def __init__(self, mode_of_inheritance: ModeOfInheritance = ModeOfInheritance.ANY):
        self.mode_of_inheritance = mode_of_inheritance

    @property
    def filter_type(self) -> str:
        return "inheritance"

    def run_filter(self, gene: Gene) -> FilterResult:
        if gene.is_compatible_with(self.mode_of_inheritance):
            return FilterResult.pass_(self.filter_type)
        return FilterResult.fail(self.filter_type)

    def __repr__(self) -> str:
        return f"InheritanceFilter(mode={self.mode_of_inheritance.name})"
