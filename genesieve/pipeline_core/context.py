"""
AnalysisContext - Single source of truth for the state of one analysis run.

This module provides the AnalysisContext dataclass that flows through all
stages, carrying the configuration, the reference data, the gene index and
the variants loaded so far.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Set

from ..models import Gene, RunResult, VariantRecord

if TYPE_CHECKING:
    from ..analysis.analysis import AnalysisConfig
    from ..analysis.strategies import AnalysisStrategy
    from ..genome.reference import ReferenceData
    from ..genome.variant_source import VariantSource

logger = logging.getLogger(__name__)


@dataclass
class AnalysisContext:
    """Container for all state of a run.

    Attributes
    ----------
    config : AnalysisConfig
        Immutable analysis configuration
    strategy : AnalysisStrategy
        Execution strategy selected from the analysis mode
    reference : ReferenceData
        Known genes and read-only genomic indexes
    variant_source : VariantSource, optional
        Source of annotated variants, restartable per run
    start_time : datetime
        Run start time
    completed_stages : Set[str]
        Names of stages that have completed successfully
    sample_names : List[str]
        Sample names of the variant source
    proband : str, optional
        Validated proband sample name
    pedigree_data : Dict[str, Dict[str, Any]]
        Pedigree restricted to samples present in the variant source
    genes : Dict[str, Gene]
        Reference gene index keyed by gene symbol
    variants : List[VariantRecord]
        Variants retained by the streaming stage
    variants_loaded : bool
        Whether variants have been streamed and assigned to genes
    inheritance_modes_analysed : bool
        Whether gene inheritance compatibility has been computed in this run
    result : RunResult, optional
        Final result, set only by the finalisation stage
    """

    # --- Immutable Configuration ---
    config: "AnalysisConfig"
    strategy: "AnalysisStrategy"
    reference: "ReferenceData"
    variant_source: Optional["VariantSource"] = None
    start_time: datetime = field(default_factory=datetime.now)

    # --- Stage tracking ---
    completed_stages: Set[str] = field(default_factory=set)

    # --- Samples ---
    sample_names: List[str] = field(default_factory=list)
    proband: Optional[str] = None
    pedigree_data: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    # --- Genes and variants ---
    genes: Dict[str, Gene] = field(default_factory=dict)
    variants: List[VariantRecord] = field(default_factory=list)
    variants_loaded: bool = False
    inheritance_modes_analysed: bool = False

    result: Optional[RunResult] = None

    def mark_complete(self, stage_name: str) -> None:
        """Mark a stage as complete."""
        self.completed_stages.add(stage_name)
        logger.debug(f"Stage '{stage_name}' marked as complete")

    def is_complete(self, stage_name: str) -> bool:
        """Check if a stage has been completed."""
        return stage_name in self.completed_stages

    def gene_list(self) -> List[Gene]:
        """Return all genes of the index in index order."""
        return list(self.genes.values())

    def get_execution_time(self) -> float:
        """Get the elapsed execution time in seconds."""
        return (datetime.now() - self.start_time).total_seconds()

    def __repr__(self) -> str:
        """Return string representation showing key state information."""
        return (
            f"AnalysisContext("
            f"stages_completed={len(self.completed_stages)}, "
            f"genes={len(self.genes)}, "
            f"variants_loaded={self.variants_loaded}, "
            f"execution_time={self.get_execution_time():.1f}s)"
        )
