"""
Execution strategies.

A strategy decides two things for a run:

- the variant group policy: how the filters of a variant filter group are
  applied to each variant and which streamed variants are kept;
- the final selection policy: which genes and variants make it into the
  result.

| Strategy | Filters per variant        | Kept variants           |
|----------|----------------------------|-------------------------|
| FULL     | all, full history          | all                     |
| SPARSE   | until the first failure    | all, partial history    |
| PASS_ONLY| until the first failure    | passed only             |
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Sequence, Tuple

from ..filters.filter_runner import run_all_variant_filters, run_variant_filters_until_failure
from ..models import Gene, VariantRecord
from .analysis import AnalysisMode

logger = logging.getLogger(__name__)

VariantPredicate = Callable[[VariantRecord], bool]


class AnalysisStrategy(ABC):
    """Variant group and final selection policies of a run."""

    mode: AnalysisMode

    @abstractmethod
    def apply_filters(self, variant_filters: Sequence, variant: VariantRecord) -> VariantRecord:
        """Run a variant filter group over one variant, recording outcomes."""

    def is_associated_with_known_gene(self, genes: Dict[str, Gene]) -> VariantPredicate:
        """Predicate keeping streamed variants annotated to a gene of the index."""

        def predicate(variant: VariantRecord) -> bool:
            return variant.gene_symbol in genes

        return predicate

    def run_variant_filters(self, variant_filters: Sequence) -> VariantPredicate:
        """Predicate applying the filter group to a streamed variant.

        Returns True for variants the stream should retain.
        """

        def predicate(variant: VariantRecord) -> bool:
            self.apply_filters(variant_filters, variant)
            return True

        return predicate

    def select_final(
        self, genes: Dict[str, Gene], variants: List[VariantRecord]
    ) -> Tuple[List[Gene], List[VariantRecord]]:
        """Return the genes and variants to report. Default: genes with variants, all variants."""
        return [gene for gene in genes.values() if gene.has_variants()], list(variants)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class SimpleStrategy(AnalysisStrategy):
    """Run every filter on every variant and keep everything."""

    mode = AnalysisMode.FULL

    def apply_filters(self, variant_filters: Sequence, variant: VariantRecord) -> VariantRecord:
        return run_all_variant_filters(variant_filters, variant)


class SparseStrategy(AnalysisStrategy):
    """Stop filtering a variant at its first failure, but keep every variant."""

    mode = AnalysisMode.SPARSE

    def apply_filters(self, variant_filters: Sequence, variant: VariantRecord) -> VariantRecord:
        return run_variant_filters_until_failure(variant_filters, variant)


class PassOnlyStrategy(AnalysisStrategy):
    """Keep only passing variants in genes that passed gene filtering so far."""

    mode = AnalysisMode.PASS_ONLY

    def apply_filters(self, variant_filters: Sequence, variant: VariantRecord) -> VariantRecord:
        return run_variant_filters_until_failure(variant_filters, variant)

    def is_associated_with_known_gene(self, genes: Dict[str, Gene]) -> VariantPredicate:
        def predicate(variant: VariantRecord) -> bool:
            gene = genes.get(variant.gene_symbol)
            return gene is not None and gene.passed_filters()

        return predicate

    def run_variant_filters(self, variant_filters: Sequence) -> VariantPredicate:
        def predicate(variant: VariantRecord) -> bool:
            return self.apply_filters(variant_filters, variant).passed_filters()

        return predicate

    def select_final(
        self, genes: Dict[str, Gene], variants: List[VariantRecord]
    ) -> Tuple[List[Gene], List[VariantRecord]]:
        final_genes = []
        for gene in genes.values():
            if not gene.has_variants():
                continue
            gene.remove_failed_variants()
            if gene.has_variants() and gene.passed_filters():
                final_genes.append(gene)

        retained = {id(variant) for gene in final_genes for variant in gene.variants}
        final_variants = [variant for variant in variants if id(variant) in retained]
        return final_genes, final_variants


_STRATEGIES = {
    AnalysisMode.FULL: SimpleStrategy,
    AnalysisMode.SPARSE: SparseStrategy,
    AnalysisMode.PASS_ONLY: PassOnlyStrategy,
}


def strategy_for(mode: AnalysisMode) -> AnalysisStrategy:
    """Return a fresh strategy instance for an analysis mode."""
    return _STRATEGIES[AnalysisMode.parse(mode)]()
