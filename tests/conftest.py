"""Shared pytest fixtures for all test modules."""

from typing import Any, Callable, Dict, List

import pytest

from genesieve.genome.reference import ReferenceData
from genesieve.genome.variant_source import InMemoryVariantSource
from genesieve.models import GeneIdentifier, VariantRecord


@pytest.fixture
def make_variant() -> Callable[..., VariantRecord]:
    """Factory for VariantRecord objects with sensible defaults."""

    def _make(
        gene: str = "GENE1",
        pos: int = 100,
        chrom: str = "1",
        quality: float = 50.0,
        **kwargs: Any,
    ) -> VariantRecord:
        return VariantRecord(
            chrom=chrom, pos=pos, ref="A", alt="T", gene_symbol=gene, quality=quality, **kwargs
        )

    return _make


@pytest.fixture
def make_row() -> Callable[..., Dict[str, Any]]:
    """Factory for variant TSV style rows."""

    def _make(gene: str, pos: int, qual: float, chrom: str = "1", **extra: Any) -> Dict[str, Any]:
        row = {
            "CHROM": chrom,
            "POS": str(pos),
            "REF": "A",
            "ALT": "G",
            "GENE": gene,
            "EFFECT": "missense_variant",
            "QUAL": str(qual),
        }
        row.update(extra)
        return row

    return _make


@pytest.fixture
def quality_rows(make_row) -> List[Dict[str, Any]]:
    """Three variants in two genes with qualities 10, 50 (GENE_A) and 40 (GENE_B)."""
    return [
        make_row("GENE_A", 100, 10),
        make_row("GENE_A", 200, 50),
        make_row("GENE_B", 300, 40),
    ]


@pytest.fixture
def reference() -> ReferenceData:
    """Reference data with three known genes and no genomic indexes."""
    return ReferenceData(
        known_genes=[
            GeneIdentifier("GENE_A", "1001"),
            GeneIdentifier("GENE_B", "1002"),
            GeneIdentifier("GENE_C", "1003"),
        ]
    )


@pytest.fixture
def quality_source(quality_rows) -> InMemoryVariantSource:
    return InMemoryVariantSource(quality_rows)
