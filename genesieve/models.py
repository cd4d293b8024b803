"""
Core data model for a gene prioritisation run.

A ``VariantRecord`` is created by the variant source, owned by the streaming
stage while variant filters run over it and then handed to exactly one
``Gene``. Genes live for the whole run and are emitted in the ``RunResult``.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

logger = logging.getLogger(__name__)


class FilterStatus(Enum):
    """Overall filtering state of a variant or gene."""

    UNFILTERED = "unfiltered"
    PASSED = "passed"
    FAILED = "failed"


class ModeOfInheritance(Enum):
    """Mendelian modes of inheritance a gene can be compatible with."""

    ANY = "any"
    AUTOSOMAL_DOMINANT = "AD"
    AUTOSOMAL_RECESSIVE = "AR"
    X_DOMINANT = "XD"
    X_RECESSIVE = "XR"
    MITOCHONDRIAL = "MT"

    @classmethod
    def parse(cls, value: str) -> "ModeOfInheritance":
        """Parse a mode from its name (``AUTOSOMAL_DOMINANT``) or abbreviation (``AD``)."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for mode in cls:
            if text.upper() == mode.name or text.upper() == mode.value.upper():
                return mode
        raise ValueError(f"Unknown mode of inheritance: '{value}'")


class VariantEffect(Enum):
    """Sequence Ontology consequence terms understood by the engine."""

    TRANSCRIPT_ABLATION = "transcript_ablation"
    STOP_GAINED = "stop_gained"
    FRAMESHIFT_VARIANT = "frameshift_variant"
    SPLICE_ACCEPTOR_VARIANT = "splice_acceptor_variant"
    SPLICE_DONOR_VARIANT = "splice_donor_variant"
    START_LOST = "start_lost"
    STOP_LOST = "stop_lost"
    MISSENSE_VARIANT = "missense_variant"
    INFRAME_INSERTION = "inframe_insertion"
    INFRAME_DELETION = "inframe_deletion"
    SPLICE_REGION_VARIANT = "splice_region_variant"
    SYNONYMOUS_VARIANT = "synonymous_variant"
    FIVE_PRIME_UTR_VARIANT = "5_prime_UTR_variant"
    THREE_PRIME_UTR_VARIANT = "3_prime_UTR_variant"
    NON_CODING_TRANSCRIPT_EXON_VARIANT = "non_coding_transcript_exon_variant"
    INTRON_VARIANT = "intron_variant"
    UPSTREAM_GENE_VARIANT = "upstream_gene_variant"
    DOWNSTREAM_GENE_VARIANT = "downstream_gene_variant"
    REGULATORY_REGION_VARIANT = "regulatory_region_variant"
    INTERGENIC_VARIANT = "intergenic_variant"
    SEQUENCE_VARIANT = "sequence_variant"

    @classmethod
    def parse(cls, value: Optional[str]) -> "VariantEffect":
        """Parse an SO term, falling back to ``SEQUENCE_VARIANT`` for unknown terms."""
        if isinstance(value, cls):
            return value
        if not value:
            return cls.SEQUENCE_VARIANT
        # VEP style multi-consequence strings, e.g. "missense_variant&splice_region_variant"
        term = str(value).split("&")[0].strip()
        for effect in cls:
            if effect.value.lower() == term.lower() or effect.name == term.upper():
                return effect
        logger.debug(f"Unrecognised variant effect '{value}', using sequence_variant")
        return cls.SEQUENCE_VARIANT

    @property
    def is_non_coding(self) -> bool:
        return self in NON_CODING_EFFECTS


NON_CODING_EFFECTS = frozenset(
    {
        VariantEffect.FIVE_PRIME_UTR_VARIANT,
        VariantEffect.THREE_PRIME_UTR_VARIANT,
        VariantEffect.NON_CODING_TRANSCRIPT_EXON_VARIANT,
        VariantEffect.INTRON_VARIANT,
        VariantEffect.UPSTREAM_GENE_VARIANT,
        VariantEffect.DOWNSTREAM_GENE_VARIANT,
        VariantEffect.REGULATORY_REGION_VARIANT,
        VariantEffect.INTERGENIC_VARIANT,
    }
)


def normalise_chrom(chrom) -> str:
    """Return a chromosome name without a ``chr`` prefix, e.g. ``chrX`` -> ``X``."""
    text = str(chrom).strip()
    if text.lower().startswith("chr"):
        text = text[3:]
    if text.upper() == "M":
        return "MT"
    return text.upper() if text.upper() in ("X", "Y", "MT") else text


@dataclass(frozen=True)
class FilterResult:
    """Outcome of one filter applied to one variant or gene."""

    filter_type: str
    status: FilterStatus

    @classmethod
    def pass_(cls, filter_type: str) -> "FilterResult":
        return cls(filter_type, FilterStatus.PASSED)

    @classmethod
    def fail(cls, filter_type: str) -> "FilterResult":
        return cls(filter_type, FilterStatus.FAILED)

    def passed(self) -> bool:
        return self.status is FilterStatus.PASSED


@dataclass(eq=False)
class VariantRecord:
    """A single annotated variant call.

    Attributes
    ----------
    chrom, pos, ref, alt : str, int, str, str
        Variant coordinates.
    gene_symbol : str
        Symbol of the gene the variant is annotated to, ``"."`` if none.
    variant_effect : VariantEffect
        Most severe predicted consequence.
    quality : float
        Call quality (QUAL).
    frequency : float, optional
        Maximum population allele frequency as a fraction, None if unknown.
    pathogenicity : float, optional
        Best pathogenicity prediction in [0, 1], None if unknown.
    genotypes : Dict[str, str]
        Sample name to genotype string (``0/1``, ``1|1`` ...).
    filter_results : List[FilterResult]
        History of every filter actually applied to this variant, in order.
    """

    chrom: str
    pos: int
    ref: str
    alt: str
    gene_symbol: str = "."
    variant_effect: VariantEffect = VariantEffect.SEQUENCE_VARIANT
    quality: float = 0.0
    frequency: Optional[float] = None
    pathogenicity: Optional[float] = None
    genotypes: Dict[str, str] = field(default_factory=dict)
    filter_results: List[FilterResult] = field(default_factory=list)
    compatible_modes: Set[ModeOfInheritance] = field(default_factory=set)

    @property
    def contig(self) -> str:
        return normalise_chrom(self.chrom)

    @property
    def is_non_coding(self) -> bool:
        return self.variant_effect.is_non_coding

    def add_filter_result(self, filter_result: FilterResult) -> bool:
        """Record a filter outcome and return whether it passed."""
        self.filter_results.append(filter_result)
        return filter_result.passed()

    def passed_filters(self) -> bool:
        """True when no applied filter failed. A variant with no filters applied has passed."""
        return all(result.passed() for result in self.filter_results)

    def passed_filter(self, filter_type: str) -> bool:
        applied = [r for r in self.filter_results if r.filter_type == filter_type]
        return bool(applied) and all(r.passed() for r in applied)

    @property
    def applied_filter_types(self) -> List[str]:
        return [r.filter_type for r in self.filter_results]

    @property
    def failed_filter_types(self) -> List[str]:
        return [r.filter_type for r in self.filter_results if not r.passed()]

    @property
    def filter_status(self) -> FilterStatus:
        if not self.filter_results:
            return FilterStatus.UNFILTERED
        return FilterStatus.PASSED if self.passed_filters() else FilterStatus.FAILED

    def is_compatible_with(self, mode: ModeOfInheritance) -> bool:
        return mode is ModeOfInheritance.ANY or mode in self.compatible_modes

    def __str__(self) -> str:
        return f"{self.chrom}:{self.pos}:{self.ref}>{self.alt} ({self.gene_symbol})"


@dataclass(frozen=True)
class GeneIdentifier:
    """Reference gene definition used to build the gene index."""

    symbol: str
    gene_id: str = ""


@dataclass(eq=False)
class Gene:
    """A candidate gene and the variants assigned to it.

    Variants keep the order in which they were assigned, which is the order of
    the variant source.
    """

    symbol: str
    gene_id: str = ""
    variants: List[VariantRecord] = field(default_factory=list)
    filter_results: List[FilterResult] = field(default_factory=list)
    priority_scores: Dict[str, float] = field(default_factory=dict)
    compatible_modes: Set[ModeOfInheritance] = field(default_factory=set)
    priority_score: float = 1.0
    variant_score: float = 0.0
    combined_score: float = 0.0

    @classmethod
    def from_identifier(cls, identifier: GeneIdentifier) -> "Gene":
        return cls(symbol=identifier.symbol, gene_id=identifier.gene_id)

    def add_variant(self, variant: VariantRecord) -> None:
        self.variants.append(variant)

    def has_variants(self) -> bool:
        return bool(self.variants)

    @property
    def passed_variants(self) -> List[VariantRecord]:
        return [v for v in self.variants if v.passed_filters()]

    def remove_failed_variants(self) -> None:
        self.variants = self.passed_variants

    def add_filter_result(self, filter_result: FilterResult) -> bool:
        """Record a gene filter outcome. A failed filter type stays failed."""
        self.filter_results.append(filter_result)
        return filter_result.passed()

    def _is_unfiltered(self) -> bool:
        return not self.failed_filter_types and not self.variants

    @property
    def failed_filter_types(self) -> List[str]:
        return list(dict.fromkeys(r.filter_type for r in self.filter_results if not r.passed()))

    @property
    def passed_filter_types(self) -> List[str]:
        failed = set(self.failed_filter_types)
        return list(
            dict.fromkeys(
                r.filter_type for r in self.filter_results if r.filter_type not in failed
            )
        )

    def passed_filters(self) -> bool:
        """Unfiltered, or no failed gene filter and at least one passed variant."""
        if self._is_unfiltered():
            return True
        return not self.failed_filter_types and any(v.passed_filters() for v in self.variants)

    def passed_filter(self, filter_type: str) -> bool:
        if filter_type in self.failed_filter_types:
            return False
        if filter_type in self.passed_filter_types:
            return True
        return any(v.passed_filter(filter_type) for v in self.variants)

    @property
    def filter_status(self) -> FilterStatus:
        if not self.filter_results and all(
            v.filter_status is FilterStatus.UNFILTERED for v in self.variants
        ):
            return FilterStatus.UNFILTERED
        return FilterStatus.PASSED if self.passed_filters() else FilterStatus.FAILED

    def add_priority_score(self, priority_type: str, score: float) -> None:
        self.priority_scores[priority_type] = float(score)

    def is_compatible_with(self, mode: ModeOfInheritance) -> bool:
        return mode is ModeOfInheritance.ANY or mode in self.compatible_modes

    def __repr__(self) -> str:
        return (
            f"Gene(symbol='{self.symbol}', variants={len(self.variants)}, "
            f"status={self.filter_status.value}, scores={self.priority_scores})"
        )


@dataclass(frozen=True)
class RunResult:
    """Immutable snapshot of a completed run."""

    genes: Tuple[Gene, ...]
    variants: Tuple[VariantRecord, ...]
    sample_names: Tuple[str, ...] = ()
    proband: Optional[str] = None
    mode_of_inheritance: ModeOfInheritance = ModeOfInheritance.ANY
    analysis_mode: str = "PASS_ONLY"

    def gene(self, symbol: str) -> Optional[Gene]:
        for gene in self.genes:
            if gene.symbol == symbol:
                return gene
        return None

    @property
    def gene_symbols(self) -> List[str]:
        return [gene.symbol for gene in self.genes]
