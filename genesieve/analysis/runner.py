"""
Analysis runner - entry point of the analysis engine.

``AnalysisRunner.run`` validates an AnalysisConfig, repairs the step order,
groups the steps, plans the stages and executes them with the sequential
PipelineRunner. A run either returns a RunResult or raises; no partial
result is ever produced.
"""

import logging
from typing import List, Optional

from ..genome.reference import ReferenceData
from ..genome.variant_source import VariantSource
from ..models import RunResult
from ..pipeline_core import AnalysisContext, ConfigurationError, PipelineRunner, Stage
from .analysis import AnalysisConfig
from .grouping import StepGroup, group_steps
from .stages import FinalisationStage, SetupStage, StepGroupStage, VariantLoadingStage
from .step_checker import AnalysisStepChecker
from .steps import StepKind
from .strategies import strategy_for

logger = logging.getLogger(__name__)


def validate_config(config: AnalysisConfig, variant_source: Optional[VariantSource]) -> None:
    """Reject configurations that cannot run.

    Raises
    ------
    ConfigurationError
        If there are no steps, variant filters are declared without a variant
        source, or a step needs a data source category that was not declared
    """
    if not config.steps:
        raise ConfigurationError("No analysis steps specified", setting="steps")

    if config.has_variant_filter() and variant_source is None:
        raise ConfigurationError(
            "Variant filters are declared but no variant source is configured",
            setting="variants",
        )

    declared = config.declared_data_sources()
    for step in config.steps:
        missing = step.required_data_sources - declared
        if missing:
            raise ConfigurationError(
                f"{step} requires {', '.join(sorted(missing))} sources but none were declared",
                setting=f"{sorted(missing)[0]}Sources",
            )


def plan_stages(groups: List[StepGroup]) -> List[Stage]:
    """Build the chain of stages for a list of step groups.

    The first variant filter group becomes the variant loading stage. Without
    any variant filter group, variants are loaded unfiltered right after
    setup.
    """
    stages: List[Stage] = [SetupStage()]

    has_variant_filter_group = any(g.kind is StepKind.VARIANT_FILTER for g in groups)
    if not has_variant_filter_group:
        stages.append(VariantLoadingStage((), after=stages[-1].name))

    loading_planned = not has_variant_filter_group
    for index, group in enumerate(groups):
        if group.kind is StepKind.VARIANT_FILTER and not loading_planned:
            stages.append(VariantLoadingStage(group.steps, after=stages[-1].name))
            loading_planned = True
        else:
            stages.append(StepGroupStage(index, group, after=stages[-1].name))

    stages.append(FinalisationStage(after=stages[-1].name))
    return stages


class AnalysisRunner:
    """Runs analyses with a step checker and a sequential pipeline runner.

    Parameters
    ----------
    checker : AnalysisStepChecker, optional
        Step order checker, a default instance when omitted
    """

    def __init__(self, checker: Optional[AnalysisStepChecker] = None):
        self.checker = checker or AnalysisStepChecker()
        self.pipeline_runner = PipelineRunner()

    def run(
        self,
        config: AnalysisConfig,
        reference: ReferenceData,
        variant_source: Optional[VariantSource] = None,
    ) -> RunResult:
        """Run one analysis.

        Parameters
        ----------
        config : AnalysisConfig
            Analysis to run
        reference : ReferenceData
            Known genes and genomic indexes
        variant_source : VariantSource, optional
            Annotated variants; may be omitted only when no variant filter is
            declared

        Returns
        -------
        RunResult
            Ranked genes and the final variant list

        Raises
        ------
        ConfigurationError
            If the configuration cannot run
        PipelineError
            If reading variants fails
        Exception
            Any exception raised by a step propagates unchanged
        """
        validate_config(config, variant_source)

        steps = self.checker.check(config.steps)
        groups = group_steps(steps)
        logger.info(
            f"Running {config.analysis_mode.name} analysis with {len(steps)} steps "
            f"in {len(groups)} groups"
        )
        for group in groups:
            logger.debug(f"{group.kind.value} group: {list(group.steps)}")

        context = AnalysisContext(
            config=config,
            strategy=strategy_for(config.analysis_mode),
            reference=reference,
            variant_source=variant_source,
        )
        context = self.pipeline_runner.run(plan_stages(groups), context)
        logger.info(f"Finished analysis in {context.get_execution_time():.1f}s")
        return context.result
