"""Unit tests for the Stage base class and AnalysisContext."""

import time

import pytest

from genesieve.analysis.analysis import AnalysisConfig
from genesieve.analysis.strategies import PassOnlyStrategy
from genesieve.genome.reference import ReferenceData
from genesieve.models import Gene
from genesieve.pipeline_core import AnalysisContext, Stage


class RecordingStage(Stage):
    """Stage that records how often it ran."""

    def __init__(self, name, dependencies=None, should_fail=False):
        super().__init__()
        self._name = name
        self._dependencies = set(dependencies or [])
        self._should_fail = should_fail
        self.calls = 0

    @property
    def name(self):
        """Return the stage name."""
        return self._name

    @property
    def dependencies(self):
        """Return the stage dependencies."""
        return self._dependencies

    def _process(self, context):
        self.calls += 1
        if self._should_fail:
            raise ValueError(f"Stage {self.name} failed!")
        return context


class StageWithSubtasks(Stage):
    """Test stage that uses subtask timing."""

    @property
    def name(self):
        return "stage_with_subtasks"

    def _process(self, context):
        start = self._start_subtask("subtask1")
        time.sleep(0.01)
        self._end_subtask("subtask1", start)
        return context


@pytest.fixture
def context():
    """Create an empty analysis context."""
    return AnalysisContext(
        config=AnalysisConfig(), strategy=PassOnlyStrategy(), reference=ReferenceData()
    )


class TestStage:
    """Test suite for Stage execution."""

    def test_marks_complete(self, context):
        stage = RecordingStage("load")
        result = stage(context)
        assert result is context
        assert context.is_complete("load")
        assert stage.calls == 1

    def test_runs_at_most_once(self, context):
        """A completed stage is skipped when called again."""
        stage = RecordingStage("load")
        stage(context)
        stage(context)
        assert stage.calls == 1

    def test_missing_dependency(self, context):
        stage = RecordingStage("filter", dependencies=["load"])
        with pytest.raises(RuntimeError, match="requires these stages to complete first: load"):
            stage(context)
        assert stage.calls == 0

    def test_failure_is_reraised_unchanged(self, context):
        stage = RecordingStage("load", should_fail=True)
        with pytest.raises(ValueError, match="Stage load failed!"):
            stage(context)
        assert not context.is_complete("load")

    def test_subtask_timing(self, context):
        stage = StageWithSubtasks()
        stage(context)
        assert set(stage.subtask_times) == {"subtask1"}
        assert stage.subtask_times["subtask1"] >= 0.0

    def test_repr_lists_dependencies(self):
        assert repr(RecordingStage("filter", ["load"])) == (
            "RecordingStage(name='filter', depends_on=['load'])"
        )
        assert repr(RecordingStage("load")) == "RecordingStage(name='load')"


class TestAnalysisContext:
    """Test suite for AnalysisContext bookkeeping."""

    def test_mark_complete(self, context):
        context.mark_complete("setup")
        assert context.is_complete("setup")
        assert not context.is_complete("other")

    def test_gene_list_keeps_index_order(self, context):
        context.genes = {"B": Gene("B"), "A": Gene("A")}
        assert [g.symbol for g in context.gene_list()] == ["B", "A"]

    def test_fresh_state(self, context):
        assert context.variants == []
        assert not context.variants_loaded
        assert not context.inheritance_modes_analysed
        assert context.result is None
        assert context.get_execution_time() >= 0
