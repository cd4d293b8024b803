"""
Genome reference data and variant sources.

Everything in this package is consumed by the analysis stages: the reference
gene index, region indexes, the per-record streaming lookups and the
variant sources.
"""

from .annotation import GeneReassigner, RegulatoryRegionAnnotator
from .reference import ReferenceData, build_gene_index, load_gene_identifiers, load_reference_data
from .regions import Region, RegionIndex
from .variant_source import InMemoryVariantSource, TsvVariantSource, VariantSource, record_from_row

__all__ = [
    "ReferenceData",
    "build_gene_index",
    "load_gene_identifiers",
    "load_reference_data",
    "Region",
    "RegionIndex",
    "RegulatoryRegionAnnotator",
    "GeneReassigner",
    "VariantSource",
    "TsvVariantSource",
    "InMemoryVariantSource",
    "record_from_row",
]
