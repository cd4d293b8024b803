"""
Table-driven gene prioritiser.

Phenotype similarity and network proximity scores are computed by external
tools; this prioritiser attaches such precomputed per-gene scores.
"""

import logging
from typing import Dict, List, Sequence

import pandas as pd

from ..models import Gene
from ..pipeline_core.error_handling import FileFormatError
from .base import Prioritiser

logger = logging.getLogger(__name__)


class ScorePrioritiser(Prioritiser):
    """Assign each gene its score from a symbol to score table.

    Parameters
    ----------
    priority_type : str
        Name under which scores are stored on the gene, e.g. ``HIPHIVE``.
    gene_scores : Dict[str, float]
        Gene symbol to score in [0, 1].
    default_score : float
        Score for genes missing from the table.
    """

    def __init__(
        self, priority_type: str, gene_scores: Dict[str, float], default_score: float = 0.0
    ):
        self._priority_type = priority_type
        self.gene_scores = {symbol: float(score) for symbol, score in gene_scores.items()}
        self.default_score = float(default_score)

    @property
    def priority_type(self) -> str:
        return self._priority_type

    @classmethod
    def from_tsv(
        cls, file_path: str, priority_type: str, default_score: float = 0.0
    ) -> "ScorePrioritiser":
        """Load scores from a two column (``GENE``, ``SCORE``) tab separated file."""
        df = pd.read_csv(file_path, sep="\t", dtype={"GENE": str}, comment="#")
        missing = {"GENE", "SCORE"} - set(df.columns)
        if missing:
            raise FileFormatError(file_path, f"TSV with columns GENE and SCORE (missing {missing})")
        df = df.dropna(subset=["GENE"])
        scores = dict(zip(df["GENE"], pd.to_numeric(df["SCORE"], errors="coerce").fillna(0.0)))
        logger.info(f"Loaded {len(scores)} {priority_type} gene scores from {file_path}")
        return cls(priority_type, scores, default_score)

    def score_for(self, symbol: str) -> float:
        return self.gene_scores.get(symbol, self.default_score)

    def prioritise_genes(self, hpo_ids: Sequence[str], genes: List[Gene]) -> None:
        for gene in genes:
            gene.add_priority_score(self.priority_type, self.score_for(gene.symbol))

    def __repr__(self) -> str:
        return (
            f"ScorePrioritiser(priority_type='{self.priority_type}', "
            f"genes={len(self.gene_scores)})"
        )
