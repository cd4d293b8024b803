"""
Reference data for a run: the known genes and read-only genomic indexes.

The reference gene index (symbol -> Gene) is rebuilt for every run so that
genes never carry state over from an earlier analysis.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import pandas as pd

from ..models import Gene, GeneIdentifier
from ..pipeline_core.error_handling import ConfigurationError, FileFormatError
from .regions import RegionIndex, load_regulatory_regions, load_topological_domains

logger = logging.getLogger(__name__)


@dataclass
class ReferenceData:
    """Known genes plus the regulatory region and TAD indexes.

    Attributes
    ----------
    known_genes : List[GeneIdentifier]
        Genes a variant may be assigned to
    regulatory_regions : RegionIndex[str]
        Regulatory features used to re-annotate non-coding variants
    tads : RegionIndex[FrozenSet[str]]
        Topologically associated domains and the genes inside them
    """

    known_genes: List[GeneIdentifier] = field(default_factory=list)
    regulatory_regions: RegionIndex = field(default_factory=RegionIndex)
    tads: RegionIndex = field(default_factory=RegionIndex)


def _build_partial_index(identifiers: Sequence[GeneIdentifier]) -> Dict[str, Gene]:
    partial: Dict[str, Gene] = {}
    for identifier in identifiers:
        if identifier.symbol in partial:
            raise ConfigurationError(
                f"Duplicate gene symbol '{identifier.symbol}' in reference genes",
                setting="genes",
            )
        partial[identifier.symbol] = Gene.from_identifier(identifier)
    return partial


def _chunk(items: Sequence, n_chunks: int) -> List[Sequence]:
    size = max(1, -(-len(items) // n_chunks))
    return [items[i : i + size] for i in range(0, len(items), size)]


def build_gene_index(
    identifiers: Sequence[GeneIdentifier], max_workers: int = 1
) -> Dict[str, Gene]:
    """Build the symbol -> Gene map for a run.

    With more than one worker the identifiers are split into chunks that are
    turned into genes concurrently. Chunks never share keys while being built;
    they are merged on the calling thread in input order.

    Parameters
    ----------
    identifiers : Sequence[GeneIdentifier]
        Reference genes
    max_workers : int
        Number of worker threads

    Returns
    -------
    Dict[str, Gene]
        Genes keyed by symbol, in identifier order

    Raises
    ------
    ConfigurationError
        If a gene symbol occurs more than once
    """
    identifiers = list(identifiers)
    if not identifiers:
        logger.warning("Reference gene list is empty, no variant can be assigned to a gene")
        return {}

    if max_workers <= 1 or len(identifiers) < 2:
        return _build_partial_index(identifiers)

    chunks = _chunk(identifiers, max_workers)
    logger.debug(f"Building gene index from {len(identifiers)} genes in {len(chunks)} chunks")
    genes: Dict[str, Gene] = {}
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(_build_partial_index, chunk) for chunk in chunks]
        for future in futures:
            partial = future.result()
            duplicates = genes.keys() & partial.keys()
            if duplicates:
                raise ConfigurationError(
                    f"Duplicate gene symbol '{sorted(duplicates)[0]}' in reference genes",
                    setting="genes",
                )
            genes.update(partial)
    return genes


def load_gene_identifiers(file_path: str) -> List[GeneIdentifier]:
    """Read reference genes from a TSV with a ``GENE`` and an optional ``GENE_ID`` column."""
    df = pd.read_csv(file_path, sep="\t", dtype=str, comment="#", keep_default_na=False)
    if "GENE" not in df.columns:
        raise FileFormatError(file_path, "TSV with a GENE column")
    gene_ids = df["GENE_ID"] if "GENE_ID" in df.columns else [""] * len(df)
    identifiers = [
        GeneIdentifier(symbol.strip(), gene_id.strip())
        for symbol, gene_id in zip(df["GENE"], gene_ids)
        if symbol.strip()
    ]
    logger.info(f"Loaded {len(identifiers)} reference genes from {file_path}")
    return identifiers


def load_reference_data(
    genes_file: str,
    regulatory_file: Optional[str] = None,
    tads_file: Optional[str] = None,
) -> ReferenceData:
    """Load all reference files used by a run."""
    reference = ReferenceData(known_genes=load_gene_identifiers(genes_file))
    if regulatory_file:
        reference.regulatory_regions = load_regulatory_regions(regulatory_file)
    if tads_file:
        reference.tads = load_topological_domains(tads_file)
    return reference
