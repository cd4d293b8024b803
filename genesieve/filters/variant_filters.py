"""
Variant-level filters.

Each filter is a small immutable object; outcomes are recorded against the
variant by the filter runners.
"""

import logging
from typing import FrozenSet, Iterable

from ..models import FilterResult, VariantEffect, VariantRecord, normalise_chrom
from .base import VariantFilter

logger = logging.getLogger(__name__)

# Consequences treated as damaging regardless of a predicted pathogenicity score
HIGH_IMPACT_EFFECTS = frozenset(
    {
        VariantEffect.TRANSCRIPT_ABLATION,
        VariantEffect.STOP_GAINED,
        VariantEffect.FRAMESHIFT_VARIANT,
        VariantEffect.SPLICE_ACCEPTOR_VARIANT,
        VariantEffect.SPLICE_DONOR_VARIANT,
        VariantEffect.START_LOST,
        VariantEffect.STOP_LOST,
    }
)


class QualityFilter(VariantFilter):
    """Pass variants with a call quality of at least ``min_quality``."""

    def __init__(self, min_quality: float):
        if min_quality < 0:
            raise ValueError(f"Minimum quality must be positive, got {min_quality}")
        self.min_quality = float(min_quality)

    @property
    def filter_type(self) -> str:
        return "quality"

    def run_filter(self, variant: VariantRecord) -> FilterResult:
        if variant.quality >= self.min_quality:
            return FilterResult.pass_(self.filter_type)
        return FilterResult.fail(self.filter_type)

    def __repr__(self) -> str:
        return f"QualityFilter(min_quality={self.min_quality})"


class IntervalFilter(VariantFilter):
    """Pass variants located in a closed genomic interval."""

    def __init__(self, chrom: str, start: int, end: int):
        if end < start:
            raise ValueError(f"Interval end {end} is before start {start}")
        self.chrom = normalise_chrom(chrom)
        self.start = int(start)
        self.end = int(end)

    @property
    def filter_type(self) -> str:
        return "interval"

    def run_filter(self, variant: VariantRecord) -> FilterResult:
        if variant.contig == self.chrom and self.start <= variant.pos <= self.end:
            return FilterResult.pass_(self.filter_type)
        return FilterResult.fail(self.filter_type)

    def __repr__(self) -> str:
        return f"IntervalFilter({self.chrom}:{self.start}-{self.end})"


class FrequencyFilter(VariantFilter):
    """Pass variants whose maximum population frequency is at most ``max_frequency``.

    Variants without frequency data are considered novel and pass.
    """

    required_data_sources = frozenset({"frequency"})

    def __init__(self, max_frequency: float):
        if not 0.0 <= max_frequency <= 1.0:
            raise ValueError(f"Maximum frequency must be in [0, 1], got {max_frequency}")
        self.max_frequency = float(max_frequency)

    @property
    def filter_type(self) -> str:
        return "frequency"

    def run_filter(self, variant: VariantRecord) -> FilterResult:
        if variant.frequency is None or variant.frequency <= self.max_frequency:
            return FilterResult.pass_(self.filter_type)
        return FilterResult.fail(self.filter_type)

    def __repr__(self) -> str:
        return f"FrequencyFilter(max_frequency={self.max_frequency})"


class PathogenicityFilter(VariantFilter):
    """Pass variants predicted to be pathogenic.

    A variant passes when it has a high impact consequence or a pathogenicity
    score of at least ``min_score``. With ``keep_non_pathogenic`` every variant
    passes and only the annotation is recorded.
    """

    required_data_sources = frozenset({"pathogenicity"})

    def __init__(self, min_score: float = 0.5, keep_non_pathogenic: bool = False):
        self.min_score = float(min_score)
        self.keep_non_pathogenic = keep_non_pathogenic

    @property
    def filter_type(self) -> str:
        return "pathogenicity"

    def run_filter(self, variant: VariantRecord) -> FilterResult:
        if self.keep_non_pathogenic or variant.variant_effect in HIGH_IMPACT_EFFECTS:
            return FilterResult.pass_(self.filter_type)
        if variant.pathogenicity is not None and variant.pathogenicity >= self.min_score:
            return FilterResult.pass_(self.filter_type)
        return FilterResult.fail(self.filter_type)

    def __repr__(self) -> str:
        return (
            f"PathogenicityFilter(min_score={self.min_score}, "
            f"keep_non_pathogenic={self.keep_non_pathogenic})"
        )


class VariantEffectFilter(VariantFilter):
    """Fail variants whose consequence is in the ``off_target`` set."""

    def __init__(self, off_target: Iterable):
        self.off_target: FrozenSet[VariantEffect] = frozenset(
            VariantEffect.parse(effect) for effect in off_target
        )

    @property
    def filter_type(self) -> str:
        return "variant_effect"

    def run_filter(self, variant: VariantRecord) -> FilterResult:
        if variant.variant_effect in self.off_target:
            return FilterResult.fail(self.filter_type)
        return FilterResult.pass_(self.filter_type)

    def __repr__(self) -> str:
        effects = sorted(effect.value for effect in self.off_target)
        return f"VariantEffectFilter(off_target={effects})"
