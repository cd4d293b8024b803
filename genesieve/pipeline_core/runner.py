"""
PipelineRunner - Executes stages in dependency order.

Stages run one at a time on the calling thread: the analysis stages share
the gene index and the variant stream, neither of which may be touched by two
workers at once. Stages whose dependencies are met at the same time keep the
order in which they were handed to the runner.
"""

import logging
import time
from typing import Dict, List

from .context import AnalysisContext
from .stage import Stage

logger = logging.getLogger(__name__)


class PipelineRunner:
    """Executes stages in dependency order, each exactly once.

    The first failing stage aborts the run; its exception propagates to the
    caller unchanged.
    """

    def __init__(self):
        self._execution_times: Dict[str, float] = {}
        self._subtask_times: Dict[str, Dict[str, float]] = {}

    def run(self, stages: List[Stage], context: AnalysisContext) -> AnalysisContext:
        """Execute all stages in dependency order.

        Parameters
        ----------
        stages : List[Stage]
            Stages to execute
        context : AnalysisContext
            Initial analysis context

        Returns
        -------
        AnalysisContext
            Context after the last stage

        Raises
        ------
        ValueError
            If stage names are duplicated or dependencies form a cycle
        Exception
            Whatever the first failing stage raised
        """
        run_start = time.time()
        self._execution_times.clear()
        self._subtask_times.clear()

        plan = self._create_execution_plan(stages)
        logger.info(f"Running {len(stages)} stages in {len(plan)} levels")
        for level, names in enumerate(self._names(plan)):
            logger.debug(f"Level {level}: {names}")

        for level_stages in plan:
            for stage in level_stages:
                context = self._execute_stage(stage, context)

        logger.info(f"All stages finished in {time.time() - run_start:.1f}s")
        self._log_execution_summary()
        return context

    def _create_execution_plan(self, stages: List[Stage]) -> List[List[Stage]]:
        """Group stages into levels; a stage's level follows all of its dependencies.

        Dependencies on stages that are not part of ``stages`` are left to the
        stage itself to report when it is called.

        Raises
        ------
        ValueError
            If stage names are duplicated or dependencies form a cycle
        """
        by_name = {stage.name: stage for stage in stages}
        if len(by_name) != len(stages):
            raise ValueError("Duplicate stage names detected")

        waiting_on = {
            stage.name: {dep for dep in stage.dependencies if dep in by_name} for stage in stages
        }
        planned: List[List[Stage]] = []
        done = set()
        pending = [stage.name for stage in stages]

        while pending:
            ready = [name for name in pending if waiting_on[name] <= done]
            if not ready:
                for name in pending:
                    logger.debug(f"  {name} waits on {sorted(waiting_on[name] - done)}")
                raise ValueError(f"Circular dependency detected involving stages: {set(pending)}")
            planned.append([by_name[name] for name in ready])
            done.update(ready)
            pending = [name for name in pending if name not in done]

        return planned

    def _execute_stage(self, stage: Stage, context: AnalysisContext) -> AnalysisContext:
        started = time.time()
        context = stage(context)
        self._execution_times[stage.name] = time.time() - started
        if stage.subtask_times:
            self._subtask_times[stage.name] = stage.subtask_times
        return context

    def _log_execution_summary(self) -> None:
        if not self._execution_times:
            return

        total = sum(self._execution_times.values())
        logger.info("Stage timings:")
        for name, elapsed in self._execution_times.items():
            share = 100 * elapsed / total if total > 0 else 0.0
            logger.info(f"  {name:28s} {elapsed:7.2f}s {share:5.1f}%")
            for subtask, subtask_elapsed in self._subtask_times.get(name, {}).items():
                logger.info(f"    {subtask:26s} {subtask_elapsed:7.2f}s")
        logger.info(f"  {'total':28s} {total:7.2f}s")

    @staticmethod
    def _names(plan: List[List[Stage]]) -> List[List[str]]:
        return [[stage.name for stage in level] for level in plan]

    @property
    def execution_times(self) -> Dict[str, float]:
        """Stage name to elapsed seconds of the last run."""
        return dict(self._execution_times)

    def dry_run(self, stages: List[Stage]) -> List[List[str]]:
        """Return the stage names per level without running anything."""
        return self._names(self._create_execution_plan(stages))
