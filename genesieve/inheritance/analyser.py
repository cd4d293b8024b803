"""
Gene inheritance-mode compatibility analysis.

For every gene the analyser decides which modes of inheritance its passed
variants support, given the pedigree:

- Autosomal dominant: an autosomal variant heterozygous in every affected
  sample and absent from every unaffected sample
- Autosomal recessive: an autosomal variant homozygous in every affected
  sample and homozygous in no unaffected sample, or a compound heterozygous
  pair of variants (one inherited from each parent when parents are known)
- X dominant / X recessive: the X chromosome equivalents, with hemizygous
  males counted as homozygous for X recessive
- Mitochondrial: a variant present in every affected sample

Results are written to ``Gene.compatible_modes`` and to the
``compatible_modes`` of the supporting variants.
"""

import logging
from itertools import combinations
from typing import Any, Dict, List, Optional, Sequence, Set

from ..genotype_utils import is_het, is_hom_alt, is_missing, is_ref, is_variant
from ..models import Gene, ModeOfInheritance, VariantRecord
from ..ped_reader import affected_samples, get_parents, is_male, unaffected_samples

logger = logging.getLogger(__name__)

SEX_CHROMOSOMES = frozenset({"X", "Y"})
MITOCHONDRIAL_CHROMOSOME = "MT"

ALL_MODES = (
    ModeOfInheritance.AUTOSOMAL_DOMINANT,
    ModeOfInheritance.AUTOSOMAL_RECESSIVE,
    ModeOfInheritance.X_DOMINANT,
    ModeOfInheritance.X_RECESSIVE,
    ModeOfInheritance.MITOCHONDRIAL,
)


def _is_autosomal(variant: VariantRecord) -> bool:
    return variant.contig not in SEX_CHROMOSOMES and variant.contig != MITOCHONDRIAL_CHROMOSOME


def singleton_pedigree(proband: str) -> Dict[str, Dict[str, Any]]:
    """Pedigree of a single affected proband of unknown sex."""
    return {
        proband: {
            "family_id": "",
            "sample_id": proband,
            "father_id": "0",
            "mother_id": "0",
            "sex": "0",
            "affected_status": "2",
        }
    }


class InheritanceModeAnalyser:
    """Computes the inheritance modes each gene is compatible with.

    Parameters
    ----------
    pedigree : Dict[str, Dict[str, Any]]
        Pedigree in the ``ped_reader`` format, restricted to genotyped samples
    proband : str, optional
        Proband used as the single affected sample when the pedigree is empty
    """

    def __init__(self, pedigree: Dict[str, Dict[str, Any]], proband: Optional[str] = None):
        if not pedigree and proband:
            pedigree = singleton_pedigree(proband)
        self.pedigree = pedigree
        self.affected = affected_samples(pedigree)
        self.unaffected = unaffected_samples(pedigree)
        if proband and proband not in self.affected and proband in pedigree:
            logger.warning(f"Proband {proband} is not marked as affected in the pedigree")

    def _genotypes(self, variant: VariantRecord, samples: Sequence[str]) -> List[str]:
        return [variant.genotypes.get(sample, "./.") for sample in samples]

    def _all_affected(self, variant: VariantRecord, predicate) -> bool:
        genotypes = self._genotypes(variant, self.affected)
        return bool(genotypes) and all(predicate(gt) for gt in genotypes)

    def _no_unaffected(self, variant: VariantRecord, predicate) -> bool:
        return not any(predicate(gt) for gt in self._genotypes(variant, self.unaffected))

    def is_autosomal_dominant(self, variant: VariantRecord) -> bool:
        return (
            _is_autosomal(variant)
            and self._all_affected(variant, is_het)
            and self._no_unaffected(variant, is_variant)
        )

    def is_autosomal_recessive_homozygous(self, variant: VariantRecord) -> bool:
        return (
            _is_autosomal(variant)
            and self._all_affected(variant, is_hom_alt)
            and self._no_unaffected(variant, is_hom_alt)
        )

    def is_x_dominant(self, variant: VariantRecord) -> bool:
        return (
            variant.contig == "X"
            and self._all_affected(variant, is_variant)
            and self._no_unaffected(variant, is_variant)
        )

    def is_x_recessive(self, variant: VariantRecord) -> bool:
        if variant.contig != "X":
            return False
        for sample in self.affected:
            gt = variant.genotypes.get(sample, "./.")
            if not (is_hom_alt(gt) or (is_male(sample, self.pedigree) and is_variant(gt))):
                return False
        for sample in self.unaffected:
            gt = variant.genotypes.get(sample, "./.")
            if is_hom_alt(gt) or (is_male(sample, self.pedigree) and is_variant(gt)):
                return False
        return bool(self.affected)

    def is_mitochondrial(self, variant: VariantRecord) -> bool:
        return variant.contig == MITOCHONDRIAL_CHROMOSOME and self._all_affected(
            variant, is_variant
        )

    def _inherited_from_different_parents(
        self, first: VariantRecord, second: VariantRecord
    ) -> bool:
        for sample in self.affected:
            father, mother = get_parents(sample, self.pedigree)
            if father is None or mother is None:
                continue
            father_gts = (first.genotypes.get(father, "./."), second.genotypes.get(father, "./."))
            mother_gts = (first.genotypes.get(mother, "./."), second.genotypes.get(mother, "./."))
            if any(is_missing(gt) for gt in father_gts + mother_gts):
                continue
            cis_father = is_variant(father_gts[0]) and is_ref(mother_gts[0])
            cis_mother = is_variant(mother_gts[1]) and is_ref(father_gts[1])
            trans_father = is_variant(father_gts[1]) and is_ref(mother_gts[1])
            trans_mother = is_variant(mother_gts[0]) and is_ref(father_gts[0])
            if not ((cis_father and cis_mother) or (trans_father and trans_mother)):
                return False
        return True

    def compound_heterozygous_pairs(self, variants: Sequence[VariantRecord]) -> List[tuple]:
        """Return pairs of autosomal variants compatible with compound heterozygosity."""
        candidates = [
            v for v in variants if _is_autosomal(v) and self._all_affected(v, is_het)
        ]
        pairs = []
        for first, second in combinations(candidates, 2):
            carries_both = any(
                is_variant(first.genotypes.get(s, "./."))
                and is_variant(second.genotypes.get(s, "./."))
                for s in self.unaffected
            )
            if carries_both:
                continue
            if self._inherited_from_different_parents(first, second):
                pairs.append((first, second))
        return pairs

    def _modes_to_check(self, mode_of_inheritance: ModeOfInheritance) -> Sequence[ModeOfInheritance]:
        if mode_of_inheritance is ModeOfInheritance.ANY:
            return ALL_MODES
        return (mode_of_inheritance,)

    def analyse_gene(
        self, gene: Gene, mode_of_inheritance: ModeOfInheritance = ModeOfInheritance.ANY
    ) -> Set[ModeOfInheritance]:
        """Set and return the modes ``gene`` is compatible with."""
        variants = gene.passed_variants
        single_variant_checks = {
            ModeOfInheritance.AUTOSOMAL_DOMINANT: self.is_autosomal_dominant,
            ModeOfInheritance.AUTOSOMAL_RECESSIVE: self.is_autosomal_recessive_homozygous,
            ModeOfInheritance.X_DOMINANT: self.is_x_dominant,
            ModeOfInheritance.X_RECESSIVE: self.is_x_recessive,
            ModeOfInheritance.MITOCHONDRIAL: self.is_mitochondrial,
        }

        modes: Set[ModeOfInheritance] = set()
        for mode in self._modes_to_check(mode_of_inheritance):
            check = single_variant_checks[mode]
            for variant in variants:
                if check(variant):
                    variant.compatible_modes.add(mode)
                    modes.add(mode)

        if ModeOfInheritance.AUTOSOMAL_RECESSIVE in self._modes_to_check(mode_of_inheritance):
            for first, second in self.compound_heterozygous_pairs(variants):
                first.compatible_modes.add(ModeOfInheritance.AUTOSOMAL_RECESSIVE)
                second.compatible_modes.add(ModeOfInheritance.AUTOSOMAL_RECESSIVE)
                modes.add(ModeOfInheritance.AUTOSOMAL_RECESSIVE)

        gene.compatible_modes = modes
        return modes

    def analyse(
        self,
        genes: Sequence[Gene],
        mode_of_inheritance: ModeOfInheritance = ModeOfInheritance.ANY,
    ) -> int:
        """Analyse every gene in one pass.

        Returns
        -------
        int
            Number of genes compatible with at least one analysed mode
        """
        if not self.affected:
            logger.warning("No affected samples available, no gene can be inheritance compatible")

        compatible = 0
        for gene in genes:
            if self.analyse_gene(gene, mode_of_inheritance):
                compatible += 1
        logger.info(
            f"Inheritance analysis ({mode_of_inheritance.name}) found {compatible} of "
            f"{len(genes)} genes compatible"
        )
        return compatible
