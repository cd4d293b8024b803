"""
Analysis stages.

An analysis run is a fixed chain of stages:

    setup -> [variant loading] -> step groups ... -> finalisation

Variant loading takes the place of the first variant filter group. When no
variant filter group exists it is planned right after setup, so every gene
dependent group sees a populated gene set. Each stage depends on the one
before it, so the pipeline runner executes them strictly in order.
"""

import logging
from typing import Callable, Dict, Optional, Sequence, Set

from ..filters.filter_runner import run_gene_filter
from ..genome.annotation import GeneReassigner, RegulatoryRegionAnnotator
from ..genome.reference import build_gene_index
from ..inheritance.analyser import InheritanceModeAnalyser
from ..models import RunResult
from ..ped_reader import restrict_to_samples
from ..pipeline_core import AnalysisContext, ConfigurationError, Stage
from ..scoring import RawScoreGeneScorer
from .grouping import StepGroup
from .progress import VariantProgressLogger
from .steps import AnalysisStep, StepType

logger = logging.getLogger(__name__)


class _ChainedStage(Stage):
    """Stage that runs after a single named predecessor."""

    def __init__(self, after: Optional[str] = None):
        super().__init__()
        self._after = after

    @property
    def dependencies(self) -> Set[str]:
        return {self._after} if self._after else set()


class SetupStage(_ChainedStage):
    """Validate samples and pedigree and build the reference gene index."""

    @property
    def name(self) -> str:
        return "setup"

    @property
    def description(self) -> str:
        return "Validate samples and build the reference gene index"

    def _resolve_proband(self, context: AnalysisContext) -> Optional[str]:
        proband = context.config.proband
        samples = context.sample_names
        if proband:
            if samples and proband not in samples:
                raise ConfigurationError(
                    f"Proband '{proband}' not found in variant samples: {', '.join(samples)}",
                    setting="proband",
                    stage=self.name,
                )
            return proband
        if len(samples) == 1:
            logger.info(f"Using the only sample '{samples[0]}' as proband")
            return samples[0]
        if len(samples) > 1:
            raise ConfigurationError(
                f"A proband must be given for variant sources with {len(samples)} samples",
                setting="proband",
                stage=self.name,
            )
        return None

    def _process(self, context: AnalysisContext) -> AnalysisContext:
        if context.variant_source is not None:
            context.sample_names = list(context.variant_source.sample_names)
        context.proband = self._resolve_proband(context)

        pedigree = context.config.pedigree
        if pedigree:
            pedigree = restrict_to_samples(pedigree, context.sample_names)
            if context.proband and context.proband not in pedigree:
                raise ConfigurationError(
                    f"Proband '{context.proband}' is not part of the pedigree",
                    setting="pedigree",
                    stage=self.name,
                )
        context.pedigree_data = dict(pedigree)

        start = self._start_subtask("gene_index")
        context.genes = build_gene_index(
            context.reference.known_genes, max_workers=context.config.threads
        )
        self._end_subtask("gene_index", start)
        logger.info(
            f"Running analysis for proband {context.proband} from samples "
            f"{context.sample_names} over {len(context.genes)} genes"
        )
        return context


class VariantLoadingStage(_ChainedStage):
    """Stream variants once, filter them and assign the survivors to genes.

    Parameters
    ----------
    variant_filters : Sequence[AnalysisStep]
        The first variant filter group, empty when none was declared
    after : str, optional
        Name of the preceding stage
    """

    def __init__(self, variant_filters: Sequence[AnalysisStep] = (), after: Optional[str] = None):
        super().__init__(after)
        self.variant_filters = tuple(variant_filters)

    @property
    def name(self) -> str:
        return "variant_loading"

    @property
    def description(self) -> str:
        if self.variant_filters:
            return f"Load variants through {len(self.variant_filters)} variant filters"
        return "Load variants without filtering"

    def _process(self, context: AnalysisContext) -> AnalysisContext:
        if context.variants_loaded:
            logger.debug("Variants already loaded")
            return context
        if context.variant_source is None:
            logger.warning("No variant source configured, no variants will be analysed")
            context.variants_loaded = True
            return context

        for variant_filter in self.variant_filters:
            logger.info(f"Filtering variants with: {variant_filter}")

        strategy = context.strategy
        progress = VariantProgressLogger(context.config.progress_interval)
        annotator = RegulatoryRegionAnnotator(context.reference.regulatory_regions)
        reassigner = GeneReassigner(
            context.config.main_priority_type, context.genes, context.reference.tads
        )

        # Everything up to list() is lazy: one record at a time, in file order.
        # Not safe for concurrent consumption, the annotators are stateful.
        stream = map(progress.count_loaded, context.variant_source.stream())
        stream = map(annotator, stream)
        stream = map(reassigner, stream)
        stream = filter(strategy.is_associated_with_known_gene(context.genes), stream)
        if self.variant_filters:
            stream = filter(strategy.run_variant_filters(self.variant_filters), stream)
        stream = map(progress.count_passed, stream)
        variants = list(stream)
        progress.log_summary()
        if annotator.annotated or reassigner.reassigned:
            logger.info(
                f"Annotated {annotator.annotated} regulatory region variants, "
                f"reassigned {reassigner.reassigned} to another gene"
            )

        for variant in variants:
            context.genes[variant.gene_symbol].add_variant(variant)
        context.variants = variants
        context.variants_loaded = True
        return context


class StepGroupStage(_ChainedStage):
    """Run one group of steps over the gene list.

    Variant filters in a group reached after loading run per gene, through
    the strategy. Inheritance analysis runs before the first inheritance-mode
    dependent step of the whole run and never again.
    """

    def __init__(self, index: int, group: StepGroup, after: Optional[str] = None):
        super().__init__(after)
        self.index = index
        self.group = group
        self._runners: Dict[StepType, Callable[[AnalysisStep, AnalysisContext], None]] = {
            StepType.VARIANT_FILTER: self._run_variant_filter,
            StepType.GENE_FILTER: self._run_gene_filter,
            StepType.PRIORITY_SCORE_FILTER: self._run_gene_filter,
            StepType.INHERITANCE_FILTER: self._run_gene_filter,
            StepType.PRIORITISER: self._run_prioritiser,
            StepType.INHERITANCE_DEPENDENT_PRIORITISER: self._run_prioritiser,
        }

    @property
    def name(self) -> str:
        return f"step_group_{self.index}"

    @property
    def description(self) -> str:
        return f"{self.group.kind.value} group: {list(self.group.steps)}"

    def _run_variant_filter(self, step: AnalysisStep, context: AnalysisContext) -> None:
        logger.info(f"Running VariantFilter: {step}")
        for gene in context.gene_list():
            for variant in gene.variants:
                context.strategy.apply_filters((step,), variant)

    def _run_gene_filter(self, step: AnalysisStep, context: AnalysisContext) -> None:
        logger.info(f"Running GeneFilter: {step}")
        passed = run_gene_filter(step, context.gene_list())
        logger.info(f"{len(passed)} of {len(context.genes)} genes passed {step}")

    def _run_prioritiser(self, step: AnalysisStep, context: AnalysisContext) -> None:
        logger.info(f"Running Prioritiser: {step}")
        step.prioritise_genes(context.config.hpo_ids, context.gene_list())

    def _analyse_inheritance_modes(self, context: AnalysisContext) -> None:
        config = context.config
        logger.info(
            f"Checking inheritance mode compatibility with {config.mode_of_inheritance.name} "
            "for genes which passed filters"
        )
        analyser = InheritanceModeAnalyser(context.pedigree_data, context.proband)
        analyser.analyse(context.gene_list(), config.mode_of_inheritance)
        context.inheritance_modes_analysed = True

    def _process(self, context: AnalysisContext) -> AnalysisContext:
        for step in self.group:
            if step.is_inheritance_mode_dependent() and not context.inheritance_modes_analysed:
                self._analyse_inheritance_modes(context)
            self._runners[step.step_type](step, context)
        return context


class FinalisationStage(_ChainedStage):
    """Select, score and rank the final genes and build the RunResult."""

    def __init__(
        self, scorer: Optional[RawScoreGeneScorer] = None, after: Optional[str] = None
    ):
        super().__init__(after)
        self.scorer = scorer

    @property
    def name(self) -> str:
        return "finalisation"

    @property
    def description(self) -> str:
        return "Score genes and build the run result"

    def _process(self, context: AnalysisContext) -> AnalysisContext:
        config = context.config
        genes, variants = context.strategy.select_final(context.genes, context.variants)
        scorer = self.scorer or RawScoreGeneScorer(config.mode_of_inheritance, context.proband)
        ranked = scorer.score_genes(genes)
        logger.info(f"Analysed {len(ranked)} genes containing {len(variants)} filtered variants")

        context.result = RunResult(
            genes=tuple(ranked),
            variants=tuple(variants),
            sample_names=tuple(context.sample_names),
            proband=context.proband,
            mode_of_inheritance=config.mode_of_inheritance,
            analysis_mode=context.strategy.mode.name,
        )
        return context
