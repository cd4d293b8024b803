"""
Per-record lookups applied while variants are streamed.

Both helpers mutate the record they are given and return it, so they compose
with ``map`` over the variant stream.
"""

import logging
from typing import Dict, FrozenSet, Optional

from ..models import Gene, VariantEffect, VariantRecord
from .regions import RegionIndex

logger = logging.getLogger(__name__)

REANNOTATED_EFFECTS = frozenset(
    {VariantEffect.INTERGENIC_VARIANT, VariantEffect.UPSTREAM_GENE_VARIANT}
)


class RegulatoryRegionAnnotator:
    """Mark intergenic and upstream variants that hit a regulatory feature."""

    def __init__(self, regulatory_regions: RegionIndex):
        self.regulatory_regions = regulatory_regions
        self.annotated = 0

    def __call__(self, variant: VariantRecord) -> VariantRecord:
        if variant.variant_effect not in REANNOTATED_EFFECTS:
            return variant
        if self.regulatory_regions.has_region_containing(variant.contig, variant.pos):
            variant.variant_effect = VariantEffect.REGULATORY_REGION_VARIANT
            self.annotated += 1
        return variant


class GeneReassigner:
    """Move regulatory region variants to the best scoring gene of their TAD.

    The score used is the one of the main (first declared) prioritiser. Until
    that prioritiser has scored the genes, variants keep their gene.

    Parameters
    ----------
    main_priority_type : str, optional
        Priority type of the main prioritiser
    genes : Dict[str, Gene]
        Reference gene index
    tads : RegionIndex[FrozenSet[str]]
        Topologically associated domains
    """

    def __init__(
        self,
        main_priority_type: Optional[str],
        genes: Dict[str, Gene],
        tads: RegionIndex,
    ):
        self.main_priority_type = main_priority_type
        self.genes = genes
        self.tads = tads
        self.reassigned = 0

    def _score(self, symbol: str) -> Optional[float]:
        gene = self.genes.get(symbol)
        if gene is None:
            return None
        return gene.priority_scores.get(self.main_priority_type)

    def _candidate_symbols(self, variant: VariantRecord) -> FrozenSet[str]:
        symbols: FrozenSet[str] = frozenset()
        for region in self.tads.regions_containing(variant.contig, variant.pos):
            symbols |= region.payload
        return symbols

    def __call__(self, variant: VariantRecord) -> VariantRecord:
        if self.main_priority_type is None or not len(self.tads):
            return variant
        if variant.variant_effect is not VariantEffect.REGULATORY_REGION_VARIANT:
            return variant

        best_symbol = variant.gene_symbol
        best_score = self._score(variant.gene_symbol)
        for symbol in sorted(self._candidate_symbols(variant)):
            score = self._score(symbol)
            if score is not None and (best_score is None or score > best_score):
                best_symbol, best_score = symbol, score

        if best_symbol != variant.gene_symbol:
            logger.debug(f"Reassigning {variant} to {best_symbol} (score {best_score})")
            variant.gene_symbol = best_symbol
            self.reassigned += 1
        return variant
