"""
Filter runners.

These functions apply filters and thread each outcome into the filter
history of the variant or gene being filtered. Exceptions raised by a filter
propagate unchanged.
"""

import logging
from typing import Iterable, List, Sequence

from ..models import Gene, VariantRecord

logger = logging.getLogger(__name__)


def run_variant_filter(variant_filter, variant: VariantRecord) -> bool:
    """Apply one variant filter and record the outcome. Returns True on pass."""
    return variant.add_filter_result(variant_filter.run_filter(variant))


def run_all_variant_filters(
    variant_filters: Sequence, variant: VariantRecord
) -> VariantRecord:
    """Apply every filter to the variant regardless of earlier outcomes."""
    for variant_filter in variant_filters:
        run_variant_filter(variant_filter, variant)
    return variant


def run_variant_filters_until_failure(
    variant_filters: Sequence, variant: VariantRecord
) -> VariantRecord:
    """Apply filters in order while the variant keeps passing.

    Filters after the first failure are not run and are absent from the
    variant's filter history.
    """
    for variant_filter in variant_filters:
        if not variant.passed_filters():
            break
        run_variant_filter(variant_filter, variant)
    return variant


def run_gene_filter(gene_filter, genes: Iterable[Gene]) -> List[Gene]:
    """Apply a gene filter to every gene, returning the genes that passed."""
    passed = []
    for gene in genes:
        if gene.add_filter_result(gene_filter.run_filter(gene)):
            passed.append(gene)
    logger.debug(f"{gene_filter} passed {len(passed)} genes")
    return passed
