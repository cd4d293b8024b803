"""
OMIM-style inheritance-consistency prioritiser.

Genes with known disease associations are down-weighted when none of the
diseases' modes of inheritance is compatible with the inheritance modes the
gene's variants support. The gene compatibility flags must already be set, so
this prioritiser is inheritance-mode dependent.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Set

import pandas as pd

from ..analysis.steps import StepType
from ..models import Gene, ModeOfInheritance
from ..pipeline_core.error_handling import FileFormatError
from .base import Prioritiser

logger = logging.getLogger(__name__)

INCOMPATIBLE_SCORE = 0.5


class OmimPrioritiser(Prioritiser):
    """Score genes 1.0 unless their known diseases contradict the observed inheritance."""

    step_type = StepType.INHERITANCE_DEPENDENT_PRIORITISER

    def __init__(self, disease_modes: Optional[Dict[str, Iterable[ModeOfInheritance]]] = None):
        self.disease_modes: Dict[str, Set[ModeOfInheritance]] = {
            symbol: set(modes) for symbol, modes in (disease_modes or {}).items()
        }

    @property
    def priority_type(self) -> str:
        return "OMIM"

    @classmethod
    def from_tsv(cls, file_path: str) -> "OmimPrioritiser":
        """Load ``GENE`` / ``MOI`` rows, one row per gene-disease association."""
        df = pd.read_csv(file_path, sep="\t", dtype=str, comment="#")
        missing = {"GENE", "MOI"} - set(df.columns)
        if missing:
            raise FileFormatError(file_path, f"TSV with columns GENE and MOI (missing {missing})")
        disease_modes: Dict[str, Set[ModeOfInheritance]] = {}
        for symbol, moi in zip(df["GENE"], df["MOI"]):
            if pd.isna(symbol):
                continue
            modes = disease_modes.setdefault(symbol, set())
            if not pd.isna(moi) and moi.strip():
                modes.add(ModeOfInheritance.parse(moi))
        logger.info(f"Loaded disease inheritance modes for {len(disease_modes)} genes")
        return cls(disease_modes)

    def score_gene(self, gene: Gene) -> float:
        known_modes = self.disease_modes.get(gene.symbol)
        if not known_modes:
            return 1.0
        if ModeOfInheritance.ANY in known_modes:
            return 1.0
        if known_modes & gene.compatible_modes:
            return 1.0
        return INCOMPATIBLE_SCORE

    def prioritise_genes(self, hpo_ids: Sequence[str], genes: List[Gene]) -> None:
        for gene in genes:
            gene.add_priority_score(self.priority_type, self.score_gene(gene))

    def __repr__(self) -> str:
        return f"OmimPrioritiser(genes={len(self.disease_modes)})"
