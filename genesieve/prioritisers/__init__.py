"""Gene prioritisers for genesieve."""

from .base import Prioritiser
from .omim import OmimPrioritiser
from .score_prioritiser import ScorePrioritiser

__all__ = ["Prioritiser", "ScorePrioritiser", "OmimPrioritiser"]
