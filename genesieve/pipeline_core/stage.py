"""
Stage - Abstract base class for all pipeline stages.

This module provides the unified Stage abstraction that every phase of an
analysis run inherits from, ensuring consistent behavior and interface across
the pipeline.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Dict, Set

from .context import AnalysisContext

logger = logging.getLogger(__name__)


class Stage(ABC):
    """Abstract base class for all pipeline stages - unified abstraction.

    Each stage declares its dependencies and implements the _process method
    to perform its work.

    The stage execution is handled by __call__, which validates dependencies,
    logs execution and tracks timing. Exceptions are logged and re-raised
    unchanged so the run fails fast.
    """

    def __init__(self):
        """Initialize the stage with subtask tracking."""
        self._subtask_times: Dict[str, float] = {}

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for the stage.

        Returns
        -------
        str
            The stage name used for dependency tracking and logging
        """
        pass

    @property
    def dependencies(self) -> Set[str]:
        """Stage names that must complete before this stage.

        Returns
        -------
        Set[str]
            Set of stage names this stage depends on
        """
        return set()

    @property
    def description(self) -> str:
        """Human-readable description for logging."""
        return f"Stage: {self.name}"

    def __call__(self, context: AnalysisContext) -> AnalysisContext:
        """Execute the stage once, checking dependencies and timing it.

        Parameters
        ----------
        context : AnalysisContext
            The analysis context

        Returns
        -------
        AnalysisContext
            Updated context after stage execution

        Raises
        ------
        RuntimeError
            If dependencies are not satisfied
        Exception
            If stage execution fails
        """
        missing_deps = [dep for dep in self.dependencies if not context.is_complete(dep)]
        if missing_deps:
            raise RuntimeError(
                f"Stage '{self.name}' requires these stages to complete first: "
                f"{', '.join(sorted(missing_deps))}"
            )

        # Each stage is entered at most once per run
        if context.is_complete(self.name):
            logger.info(f"Stage '{self.name}' already complete, skipping")
            return context

        logger.info(f"Executing {self.description}")
        start_time = time.time()

        try:
            updated_context = self._process(context)

            elapsed = time.time() - start_time
            updated_context.mark_complete(self.name)
            logger.info(f"Stage '{self.name}' completed successfully in {elapsed:.1f}s")
            return updated_context

        except Exception as e:
            elapsed = time.time() - start_time
            logger.error(f"Stage '{self.name}' failed after {elapsed:.1f}s: {e}")
            raise

    @abstractmethod
    def _process(self, context: AnalysisContext) -> AnalysisContext:
        """Core processing logic - must be implemented by subclasses.

        Parameters
        ----------
        context : AnalysisContext
            The analysis context

        Returns
        -------
        AnalysisContext
            Updated context after processing
        """
        pass

    def __repr__(self) -> str:
        """Return string representation of the stage."""
        deps = f", depends_on={sorted(self.dependencies)}" if self.dependencies else ""
        return f"{self.__class__.__name__}(name='{self.name}'{deps})"

    def _start_subtask(self, subtask_name: str) -> float:
        """Start timing a subtask.

        Parameters
        ----------
        subtask_name : str
            Name of the subtask

        Returns
        -------
        float
            Start time for the subtask
        """
        start_time = time.time()
        logger.debug(f"Stage '{self.name}': Starting subtask '{subtask_name}'")
        return start_time

    def _end_subtask(self, subtask_name: str, start_time: float) -> None:
        """End timing a subtask and record duration."""
        elapsed = time.time() - start_time
        self._subtask_times[subtask_name] = elapsed
        logger.debug(f"Stage '{self.name}': Completed subtask '{subtask_name}' in {elapsed:.1f}s")

    @property
    def subtask_times(self) -> Dict[str, float]:
        """Get recorded subtask durations."""
        return self._subtask_times.copy()
