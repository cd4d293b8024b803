"""Progress logging for the variant stream."""

import logging
from typing import Optional

import psutil

from ..models import VariantRecord

logger = logging.getLogger(__name__)


def process_rss_mb() -> float:
    """Resident memory of this process in MB."""
    return psutil.Process().memory_info().rss / 1024**2


class VariantProgressLogger:
    """Counts loaded and passed variants of one stream.

    ``count_loaded`` and ``count_passed`` return the variant unchanged so they
    can be mapped over the stream. Every ``interval`` loaded records a progress
    line with the process memory is logged.
    """

    def __init__(self, interval: int = 100_000, log: Optional[logging.Logger] = None):
        self.interval = interval
        self.loaded = 0
        self.passed = 0
        self._logger = log or logger
        self._start_rss = process_rss_mb()

    def count_loaded(self, variant: VariantRecord) -> VariantRecord:
        self.loaded += 1
        if self.loaded % self.interval == 0:
            self._logger.info(
                f"Loaded {self.loaded} variants - {self.passed} passed variant filters "
                f"(Process RSS: {process_rss_mb():.1f} MB)"
            )
        return variant

    def count_passed(self, variant: VariantRecord) -> VariantRecord:
        self.passed += 1
        return variant

    def log_summary(self) -> None:
        rss_delta = process_rss_mb() - self._start_rss
        self._logger.info(
            f"Loaded {self.loaded} variants - {self.passed} passed variant filters "
            f"(Process RSS delta: {rss_delta:+.1f} MB)"
        )
