"""
Genotype string helpers for inheritance analysis.

Genotypes are VCF style strings such as ``0/1``, ``1|1`` or ``./.``. Any
non-zero allele counts as an alternate allele, so ``1/2`` is a carrier
genotype.
"""

from typing import Optional, Tuple

MISSING_GENOTYPES = frozenset({"", ".", "./.", ".|."})


def parse_genotype(gt: str) -> Tuple[Optional[int], ...]:
    """
    Parse a genotype string into allele indices.

    Parameters
    ----------
    gt : str
        Genotype string (e.g., "0/1", "1|1", "./.", "1" for haploid calls)

    Returns
    -------
    Tuple[Optional[int], ...]
        One entry per allele, None where the allele is missing. An
        unparseable genotype gives an empty tuple.
    """
    if gt is None:
        return ()
    gt = str(gt).strip()
    if gt in MISSING_GENOTYPES:
        return (None, None)

    separator = "|" if "|" in gt else "/"
    alleles = []
    for part in gt.split(separator):
        if part == ".":
            alleles.append(None)
            continue
        try:
            alleles.append(int(part))
        except ValueError:
            return ()
    return tuple(alleles)


def is_missing(gt: str) -> bool:
    """Check if genotype is missing or unknown."""
    alleles = parse_genotype(gt)
    return not alleles or any(allele is None for allele in alleles)


def alt_allele_count(gt: str) -> int:
    """Number of called alternate alleles, 0 for missing genotypes."""
    return sum(1 for allele in parse_genotype(gt) if allele)


def is_ref(gt: str) -> bool:
    """Check if genotype is homozygous reference (0/0, or 0 when haploid)."""
    return not is_missing(gt) and alt_allele_count(gt) == 0


def is_het(gt: str) -> bool:
    """Check if genotype is heterozygous for an alternate allele (0/1, 1/2 ...)."""
    alleles = parse_genotype(gt)
    if is_missing(gt) or len(alleles) != 2:
        return False
    return alleles[0] != alleles[1] and alt_allele_count(gt) > 0


def is_hom_alt(gt: str) -> bool:
    """Check if every allele is the same alternate allele (1/1, or 1 when haploid)."""
    alleles = parse_genotype(gt)
    if is_missing(gt):
        return False
    return len(set(alleles)) == 1 and alleles[0] != 0


def is_variant(gt: str) -> bool:
    """Check if genotype contains any alternate allele."""
    return alt_allele_count(gt) > 0


def is_phased(gt: str) -> bool:
    """Check if genotype is phased (uses | separator)."""
    return "|" in str(gt)
