"""Tests for stage planning and the individual analysis stages."""

import logging
from unittest.mock import Mock

import pytest

from genesieve.analysis.analysis import AnalysisConfig
from genesieve.analysis.grouping import group_steps
from genesieve.analysis.runner import plan_stages
from genesieve.analysis.stages import (
    FinalisationStage,
    SetupStage,
    StepGroupStage,
    VariantLoadingStage,
)
from genesieve.analysis.strategies import PassOnlyStrategy, SparseStrategy
from genesieve.filters import FrequencyFilter, GeneSymbolFilter, InheritanceFilter, QualityFilter
from genesieve.genome.variant_source import InMemoryVariantSource
from genesieve.models import FilterResult
from genesieve.pipeline_core import AnalysisContext, ConfigurationError, PipelineRunner
from genesieve.prioritisers import ScorePrioritiser


def make_context(reference, source=None, strategy=None, **config):
    return AnalysisContext(
        config=AnalysisConfig(**config),
        strategy=strategy or PassOnlyStrategy(),
        reference=reference,
        variant_source=source,
    )


class TestPlanStages:
    """Test the stage chain built for a list of step groups."""

    def test_variant_filter_group_becomes_loading_stage(self):
        quality, frequency = QualityFilter(1), FrequencyFilter(0.1)
        stages = plan_stages(group_steps([quality, frequency, ScorePrioritiser("P", {})]))

        assert [type(s) for s in stages] == [
            SetupStage,
            VariantLoadingStage,
            StepGroupStage,
            FinalisationStage,
        ]
        assert stages[1].variant_filters == (quality, frequency)

    def test_loading_planned_after_setup_without_variant_filters(self):
        stages = plan_stages(group_steps([ScorePrioritiser("P", {}), InheritanceFilter()]))
        assert [s.name for s in stages] == [
            "setup",
            "variant_loading",
            "step_group_0",
            "step_group_1",
            "finalisation",
        ]
        assert stages[1].variant_filters == ()

    def test_gene_group_before_first_variant_filter_group(self):
        stages = plan_stages(group_steps([GeneSymbolFilter(["A"]), QualityFilter(1)]))
        assert [s.name for s in stages] == [
            "setup",
            "step_group_0",
            "variant_loading",
            "finalisation",
        ]

    def test_later_variant_filter_groups_run_per_gene(self):
        stages = plan_stages(
            group_steps([QualityFilter(1), ScorePrioritiser("P", {}), FrequencyFilter(0.1)])
        )
        assert [s.name for s in stages] == [
            "setup",
            "variant_loading",
            "step_group_1",
            "step_group_2",
            "finalisation",
        ]

    def test_stages_form_a_chain(self):
        stages = plan_stages(group_steps([QualityFilter(1), ScorePrioritiser("P", {})]))
        assert stages[0].dependencies == set()
        for previous, stage in zip(stages, stages[1:]):
            assert stage.dependencies == {previous.name}
        assert PipelineRunner().dry_run(stages) == [[s.name] for s in stages]


class TestSetupStage:
    def test_single_sample_becomes_proband(self, reference):
        context = make_context(reference, InMemoryVariantSource([], ["Adam"]))
        context = SetupStage()(context)
        assert context.proband == "Adam"
        assert list(context.genes) == ["GENE_A", "GENE_B", "GENE_C"]
        assert context.is_complete("setup")

    def test_pedigree_restricted_to_genotyped_samples(self, reference):
        pedigree = {
            "Adam": {"sample_id": "Adam", "father_id": "Dad", "mother_id": "0",
                     "sex": "1", "affected_status": "2"},
            "Dad": {"sample_id": "Dad", "father_id": "0", "mother_id": "0",
                    "sex": "1", "affected_status": "1"},
        }
        context = make_context(
            reference, InMemoryVariantSource([], ["Adam"]), pedigree=pedigree
        )
        context = SetupStage()(context)
        assert list(context.pedigree_data) == ["Adam"]

    def test_proband_missing_from_pedigree(self, reference):
        pedigree = {
            "Eve": {"sample_id": "Eve", "father_id": "0", "mother_id": "0",
                    "sex": "2", "affected_status": "2"},
        }
        context = make_context(
            reference, InMemoryVariantSource([], ["Adam", "Eve"]), proband="Adam", pedigree=pedigree
        )
        with pytest.raises(ConfigurationError, match="not part of the pedigree"):
            SetupStage()(context)

    def test_records_gene_index_subtask(self, reference):
        stage = SetupStage()
        stage(make_context(reference))
        assert "gene_index" in stage.subtask_times


class TestVariantLoadingStage:
    def test_missing_source_marks_variants_loaded(self, reference, caplog):
        context = SetupStage()(make_context(reference))
        with caplog.at_level(logging.WARNING):
            context = VariantLoadingStage(after="setup")(context)
        assert context.variants_loaded
        assert context.variants == []
        assert "No variant source configured" in caplog.text

    def test_assigns_variants_to_genes_in_source_order(self, reference, quality_rows):
        context = make_context(
            reference, InMemoryVariantSource(quality_rows), strategy=SparseStrategy()
        )
        context = SetupStage()(context)
        context = VariantLoadingStage((QualityFilter(30),), after="setup")(context)
        assert [v.pos for v in context.variants] == [100, 200, 300]
        assert [v.pos for v in context.genes["GENE_A"].variants] == [100, 200]
        assert context.genes["GENE_C"].variants == []

    def test_stream_is_consumed_once(self, reference, quality_rows):
        source = Mock(wraps=InMemoryVariantSource(quality_rows))
        source.sample_names = []
        context = SetupStage()(make_context(reference, source))
        VariantLoadingStage((QualityFilter(30),), after="setup")(context)
        source.stream.assert_called_once()

    def test_requires_setup(self, reference):
        with pytest.raises(RuntimeError, match="setup"):
            VariantLoadingStage(after="setup")(make_context(reference))


class TestStepGroupStage:
    def test_later_variant_filter_runs_per_gene(self, reference, quality_rows):
        context = make_context(
            reference, InMemoryVariantSource(quality_rows), strategy=SparseStrategy()
        )
        context = SetupStage()(context)
        context = VariantLoadingStage(after="setup")(context)
        group = group_steps([QualityFilter(30)])[0]
        context = StepGroupStage(1, group, after="variant_loading")(context)
        assert [v.applied_filter_types for v in context.variants] == [["quality"]] * 3
        assert [v.passed_filters() for v in context.variants] == [False, True, True]

    def test_gene_filter_runs_over_all_genes(self, reference):
        context = SetupStage()(make_context(reference))
        group = group_steps([GeneSymbolFilter(["GENE_B"])])[0]
        context = StepGroupStage(0, group, after="setup")(context)
        results = {s: g.filter_results for s, g in context.genes.items()}
        assert results == {
            "GENE_A": [FilterResult.fail("gene_symbol")],
            "GENE_B": [FilterResult.pass_("gene_symbol")],
            "GENE_C": [FilterResult.fail("gene_symbol")],
        }

    def test_prioritiser_receives_hpo_ids(self, reference):
        prioritiser = ScorePrioritiser("PHENO", {"GENE_A": 0.5})
        prioritiser.prioritise_genes = Mock()
        context = SetupStage()(make_context(reference, hpo_ids=["HP:1"]))
        group = group_steps([prioritiser])[0]
        StepGroupStage(0, group, after="setup")(context)
        hpo_ids, genes = prioritiser.prioritise_genes.call_args[0]
        assert hpo_ids == ("HP:1",)
        assert [g.symbol for g in genes] == ["GENE_A", "GENE_B", "GENE_C"]


class TestFinalisationStage:
    def test_builds_run_result(self, reference, quality_rows):
        context = make_context(reference, InMemoryVariantSource(quality_rows))
        context = SetupStage()(context)
        context = VariantLoadingStage((QualityFilter(30),), after="setup")(context)
        context = FinalisationStage(after="variant_loading")(context)
        result = context.result
        assert result.analysis_mode == "PASS_ONLY"
        assert result.gene_symbols == ["GENE_A", "GENE_B"]
        assert len(result.variants) == 2

    def test_uses_given_scorer(self, reference):
        scorer = Mock()
        scorer.score_genes.return_value = []
        context = SetupStage()(make_context(reference))
        context = FinalisationStage(scorer=scorer, after="setup")(context)
        scorer.score_genes.assert_called_once_with([])
        assert context.result.genes == ()
