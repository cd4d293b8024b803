"""
Gene scoring and ranking.

The scorer combines three numbers per gene:

- priority score: product of all prioritiser scores attached to the gene
  (0 when no prioritiser ran)
- variant score: score of the best passed variant, or of the best compound
  heterozygous pair when the analysis is autosomal recessive
- combined score: mean of the two, or the variant score alone when no
  prioritiser ran

Genes are ranked by combined score, highest first, ties broken by symbol.
"""

import logging
import math
from typing import List, Optional, Sequence

from .filters.variant_filters import HIGH_IMPACT_EFFECTS
from .genotype_utils import is_het, is_hom_alt
from .models import Gene, ModeOfInheritance, VariantRecord

logger = logging.getLogger(__name__)

# Allele frequencies above this percentage score 0
MAX_SCORED_FREQUENCY_PERCENT = 2.0


def frequency_score(frequency: Optional[float]) -> float:
    """Score rarity in [0, 1]; unknown frequency counts as novel."""
    if frequency is None or frequency <= 0:
        return 1.0
    percent = frequency * 100
    if percent > MAX_SCORED_FREQUENCY_PERCENT:
        return 0.0
    return max(0.0, 1.13533 - 0.13533 * math.exp(percent))


def pathogenicity_score(variant: VariantRecord) -> float:
    if variant.variant_effect in HIGH_IMPACT_EFFECTS:
        return 1.0
    if variant.pathogenicity is None:
        return 0.0
    return min(1.0, max(0.0, variant.pathogenicity))


def variant_score(variant: VariantRecord) -> float:
    return frequency_score(variant.frequency) * pathogenicity_score(variant)


class RawScoreGeneScorer:
    """Scores and ranks the final genes of a run.

    Parameters
    ----------
    mode_of_inheritance : ModeOfInheritance
        Mode the analysis was run for
    proband : str, optional
        Sample whose genotypes decide het/hom calls for recessive scoring
    """

    def __init__(
        self,
        mode_of_inheritance: ModeOfInheritance = ModeOfInheritance.ANY,
        proband: Optional[str] = None,
    ):
        self.mode_of_inheritance = mode_of_inheritance
        self.proband = proband

    def _proband_genotype(self, variant: VariantRecord) -> str:
        if self.proband is None:
            return "./."
        return variant.genotypes.get(self.proband, "./.")

    def _recessive_variant_score(self, variants: Sequence[VariantRecord]) -> float:
        hom_scores, het_scores = [], []
        for variant in variants:
            gt = self._proband_genotype(variant)
            if is_hom_alt(gt):
                hom_scores.append(variant_score(variant))
            elif is_het(gt):
                het_scores.append(variant_score(variant))
        best_hom = max(hom_scores, default=0.0)
        het_scores.sort(reverse=True)
        best_comp_het = (het_scores[0] + het_scores[1]) / 2 if len(het_scores) > 1 else 0.0
        return max(best_hom, best_comp_het)

    def calculate_variant_score(self, gene: Gene) -> float:
        variants = gene.passed_variants
        if not variants:
            return 0.0
        if self.mode_of_inheritance is ModeOfInheritance.AUTOSOMAL_RECESSIVE and self.proband:
            return self._recessive_variant_score(variants)
        return max(variant_score(variant) for variant in variants)

    @staticmethod
    def calculate_priority_score(gene: Gene) -> float:
        if not gene.priority_scores:
            return 0.0
        return math.prod(gene.priority_scores.values())

    def score_gene(self, gene: Gene) -> None:
        gene.variant_score = self.calculate_variant_score(gene)
        gene.priority_score = self.calculate_priority_score(gene)
        if gene.priority_scores:
            gene.combined_score = (gene.priority_score + gene.variant_score) / 2
        else:
            gene.combined_score = gene.variant_score

    def score_genes(self, genes: Sequence[Gene]) -> List[Gene]:
        """Score ``genes`` in place and return them ranked."""
        for gene in genes:
            self.score_gene(gene)
        ranked = sorted(genes, key=lambda g: (-g.combined_score, g.symbol))
        logger.info(f"Scored and ranked {len(ranked)} genes")
        return ranked
