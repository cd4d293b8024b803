"""
Filter base classes.

A filter only decides pass or fail. Recording the outcome against a variant
or gene is done by the filter runners in ``filter_runner``.
"""

from abc import abstractmethod

from ..analysis.steps import AnalysisStep, StepType
from ..models import FilterResult, Gene, VariantRecord


class VariantFilter(AnalysisStep):
    """Filter applied to a single variant."""

    step_type = StepType.VARIANT_FILTER

    @property
    @abstractmethod
    def filter_type(self) -> str:
        """Identifier recorded in a variant's filter history."""

    @abstractmethod
    def run_filter(self, variant: VariantRecord) -> FilterResult:
        """Return the outcome of this filter for ``variant``."""


class GeneFilter(AnalysisStep):
    """Filter applied to a whole gene."""

    step_type = StepType.GENE_FILTER

    @property
    @abstractmethod
    def filter_type(self) -> str:
        """Identifier recorded in a gene's filter results."""

    @abstractmethod
    def run_filter(self, gene: Gene) -> FilterResult:
        """Return the outcome of this filter for ``gene``."""
