"""Tests for the analysis step order checker."""

import logging

import pytest

from genesieve.analysis.step_checker import AFTER, BEFORE, EQUAL, AnalysisStepChecker, compare_steps
from genesieve.analysis.steps import StepKind
from genesieve.filters import (
    FrequencyFilter,
    GeneSymbolFilter,
    InheritanceFilter,
    PriorityScoreFilter,
    QualityFilter,
)
from genesieve.prioritisers import OmimPrioritiser, ScorePrioritiser


@pytest.fixture
def checker():
    return AnalysisStepChecker()


@pytest.fixture
def steps():
    """A named set of steps reused across tests."""
    return {
        "quality": QualityFilter(30),
        "frequency": FrequencyFilter(0.01),
        "inheritance": InheritanceFilter(),
        "omim": OmimPrioritiser(),
        "pheno": ScorePrioritiser("PHENO", {}),
        "walker": ScorePrioritiser("WALKER", {}),
        "pheno_filter": PriorityScoreFilter("PHENO", 0.5),
        "walker_filter": PriorityScoreFilter("WALKER", 0.5),
        "symbols": GeneSymbolFilter(["GENE1"]),
    }


def _last_index(steps, kind):
    return max(i for i, step in enumerate(steps) if step.kind is kind)


def _first_index(steps, kind):
    return min(i for i, step in enumerate(steps) if step.kind is kind)


class TestCompareSteps:
    """Test the neighbouring step comparator."""

    def test_same_kind_variant_filters_are_equal(self, steps):
        assert compare_steps(steps["quality"], steps["frequency"]) == EQUAL

    def test_variant_filter_before_inheritance_dependent(self, steps):
        assert compare_steps(steps["quality"], steps["inheritance"]) == BEFORE
        assert compare_steps(steps["omim"], steps["quality"]) == AFTER

    def test_inheritance_filter_before_omim(self, steps):
        assert compare_steps(steps["inheritance"], steps["omim"]) == BEFORE
        assert compare_steps(steps["omim"], steps["inheritance"]) == AFTER

    def test_score_filter_after_matching_prioritiser(self, steps):
        assert compare_steps(steps["pheno"], steps["pheno_filter"]) == BEFORE
        assert compare_steps(steps["pheno_filter"], steps["pheno"]) == AFTER
        assert compare_steps(steps["walker"], steps["pheno_filter"]) == EQUAL


class TestAnalysisStepChecker:
    """Test the repairs made by AnalysisStepChecker.check."""

    def test_empty_and_single_step_lists_unchanged(self, checker, steps):
        assert checker.check([]) == []
        assert checker.check([steps["quality"]]) == [steps["quality"]]

    def test_correct_order_is_unchanged(self, checker, steps, caplog):
        declared = [
            steps["quality"],
            steps["frequency"],
            steps["pheno"],
            steps["pheno_filter"],
            steps["inheritance"],
            steps["omim"],
        ]
        with caplog.at_level(logging.WARNING):
            checked = checker.check(declared)
        assert checked == declared
        assert "changed" not in caplog.text

    def test_input_list_is_not_modified(self, checker, steps):
        declared = [steps["inheritance"], steps["quality"]]
        checker.check(declared)
        assert declared == [steps["inheritance"], steps["quality"]]

    def test_inheritance_steps_moved_after_last_variant_filter(self, checker, steps, caplog):
        declared = [
            steps["omim"],
            steps["quality"],
            steps["inheritance"],
            steps["pheno"],
            steps["frequency"],
        ]
        with caplog.at_level(logging.WARNING):
            checked = checker.check(declared)

        assert _last_index(checked, StepKind.VARIANT_FILTER) < _first_index(
            checked, StepKind.INHERITANCE_MODE_DEPENDENT
        )
        assert checked.index(steps["inheritance"]) + 1 == checked.index(steps["omim"])
        assert "Moved InheritanceFilter" in caplog.text
        assert len(checked) == len(declared)

    def test_inheritance_block_inserted_directly_after_last_variant_filter(self, checker, steps):
        declared = [steps["inheritance"], steps["quality"], steps["pheno"]]
        checked = checker.check(declared)
        assert checked == [steps["quality"], steps["inheritance"], steps["pheno"]]

    def test_orphan_priority_score_filter_removed(self, checker, steps, caplog):
        declared = [steps["quality"], steps["walker_filter"], steps["pheno"]]
        with caplog.at_level(logging.WARNING):
            checked = checker.check(declared)
        assert steps["walker_filter"] not in checked
        assert checked == [steps["quality"], steps["pheno"]]
        assert "Removing" in caplog.text

    def test_priority_score_filter_follows_matching_prioritiser(self, checker, steps):
        declared = [
            steps["pheno_filter"],
            steps["quality"],
            steps["pheno"],
            steps["symbols"],
        ]
        checked = checker.check(declared)
        assert checked.index(steps["pheno_filter"]) == checked.index(steps["pheno"]) + 1

    def test_each_score_filter_follows_its_own_prioritiser(self, checker, steps):
        declared = [
            steps["walker_filter"],
            steps["pheno_filter"],
            steps["quality"],
            steps["pheno"],
            steps["walker"],
        ]
        checked = checker.check(declared)
        assert checked.index(steps["pheno_filter"]) == checked.index(steps["pheno"]) + 1
        assert checked.index(steps["walker_filter"]) == checked.index(steps["walker"]) + 1

    def test_score_filter_follows_first_of_duplicate_prioritisers(self, checker, steps):
        second_pheno = ScorePrioritiser("PHENO", {"GENE1": 1.0})
        declared = [steps["pheno"], steps["quality"], second_pheno, steps["pheno_filter"]]
        checked = checker.check(declared)
        assert checked.index(steps["pheno_filter"]) == checked.index(steps["pheno"]) + 1

    def test_score_filters_of_one_type_keep_declared_order(self, checker, steps):
        strict = PriorityScoreFilter("PHENO", 0.9)
        lenient = PriorityScoreFilter("PHENO", 0.1)
        declared = [strict, steps["quality"], steps["pheno"], lenient]
        checked = checker.check(declared)
        assert checked == [steps["quality"], steps["pheno"], strict, lenient]

    def test_no_variant_filter_logs_warning(self, checker, steps, caplog):
        declared = [steps["omim"], steps["pheno"]]
        with caplog.at_level(logging.WARNING):
            checked = checker.check(declared)
        assert "no variant filtering steps" in caplog.text
        assert steps["omim"] in checked and steps["pheno"] in checked

    def test_checker_is_deterministic(self, checker, steps):
        declared = [
            steps["omim"],
            steps["pheno_filter"],
            steps["quality"],
            steps["inheritance"],
            steps["pheno"],
            steps["frequency"],
        ]
        assert checker.check(declared) == checker.check(declared)

    @pytest.mark.parametrize(
        "order",
        [
            ["inheritance", "quality", "omim", "frequency", "pheno"],
            ["omim", "inheritance", "pheno", "quality"],
            ["pheno", "omim", "quality", "pheno_filter", "frequency", "inheritance"],
            ["frequency", "omim", "quality"],
        ],
    )
    def test_reordering_invariant(self, checker, steps, order):
        checked = checker.check([steps[name] for name in order])
        assert _last_index(checked, StepKind.VARIANT_FILTER) < _first_index(
            checked, StepKind.INHERITANCE_MODE_DEPENDENT
        )
