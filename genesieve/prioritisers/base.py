"""Prioritiser base class."""

from abc import abstractmethod
from typing import List, Sequence

from ..analysis.steps import AnalysisStep, StepType
from ..models import Gene


class Prioritiser(AnalysisStep):
    """Attaches a named score to every gene in the list it is given."""

    step_type = StepType.PRIORITISER

    @property
    @abstractmethod
    def priority_type(self) -> str:
        """Name of the score this prioritiser produces."""

    @abstractmethod
    def prioritise_genes(self, hpo_ids: Sequence[str], genes: List[Gene]) -> None:
        """Score ``genes`` in place."""
