"""
Variant and gene filters for genesieve.

Filters are analysis steps: variant filters run while variants are streamed,
gene filters run over the assembled gene list.
"""

from .base import GeneFilter, VariantFilter
from .gene_filters import GeneSymbolFilter, InheritanceFilter, PriorityScoreFilter
from .variant_filters import (
    FrequencyFilter,
    IntervalFilter,
    PathogenicityFilter,
    QualityFilter,
    VariantEffectFilter,
)

__all__ = [
    "VariantFilter",
    "GeneFilter",
    "QualityFilter",
    "IntervalFilter",
    "FrequencyFilter",
    "PathogenicityFilter",
    "VariantEffectFilter",
    "GeneSymbolFilter",
    "PriorityScoreFilter",
    "InheritanceFilter",
]
