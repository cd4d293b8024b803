"""
Analysis step order checker.

Users may declare analysis steps in any order. Some orders give wrong
results, so the checker repairs them while leaving every other choice to the
user:

1. Inheritance-mode dependent steps are moved as one block directly after the
   last variant filter, with the inheritance filter ahead of any
   inheritance-dependent prioritiser.
2. Priority score filters without a prioritiser of their type are removed.
3. Priority score filters are moved to directly follow the first prioritiser
   of their type.

A comparator sort then settles adjacent pairs. The comparator only
understands neighbouring steps, so it cannot replace the repairs above and
must run after them. Every change is logged as a warning.
"""

import logging
from functools import cmp_to_key
from typing import List, Optional, Sequence, Set

from .steps import PRIORITISER_TYPES, AnalysisStep, StepType

logger = logging.getLogger(__name__)

BEFORE = -1
EQUAL = 0
AFTER = 1


def _is_prioritiser(step: AnalysisStep) -> bool:
    return step.step_type in PRIORITISER_TYPES


def _is_score_filter(step: AnalysisStep) -> bool:
    return step.step_type is StepType.PRIORITY_SCORE_FILTER


def compare_steps(first: AnalysisStep, second: AnalysisStep) -> int:
    """Order two neighbouring steps. Returns BEFORE, EQUAL or AFTER for ``first``."""
    if first.is_variant_filter() and second.is_variant_filter():
        return EQUAL
    if _is_prioritiser(first) and _is_prioritiser(second):
        return EQUAL

    if first.is_variant_filter() and second.is_inheritance_mode_dependent():
        return BEFORE
    if first.is_inheritance_mode_dependent() and second.is_variant_filter():
        return AFTER

    if (
        first.step_type is StepType.INHERITANCE_FILTER
        and second.step_type is StepType.INHERITANCE_DEPENDENT_PRIORITISER
    ):
        return BEFORE
    if (
        first.step_type is StepType.INHERITANCE_DEPENDENT_PRIORITISER
        and second.step_type is StepType.INHERITANCE_FILTER
    ):
        return AFTER

    if _is_prioritiser(first) and _is_score_filter(second):
        return BEFORE if first.priority_type == second.priority_type else EQUAL
    if _is_score_filter(first) and _is_prioritiser(second):
        return AFTER if first.priority_type == second.priority_type else EQUAL

    return EQUAL


def _inheritance_block_order(step: AnalysisStep) -> int:
    return 0 if step.step_type is StepType.INHERITANCE_FILTER else 1


class AnalysisStepChecker:
    """Checks and repairs the ordering of a list of analysis steps.

    The checker never raises for an intelligible step list. It returns a new
    list and leaves its input untouched.
    """

    def check(self, analysis_steps: Sequence[AnalysisStep]) -> List[AnalysisStep]:
        """Return a correctly ordered copy of ``analysis_steps``.

        Parameters
        ----------
        analysis_steps : Sequence[AnalysisStep]
            Steps in the order the user declared them

        Returns
        -------
        List[AnalysisStep]
            Repaired steps
        """
        steps = list(analysis_steps)
        # 0 or 1 steps cannot be in the wrong order
        if len(steps) < 2:
            return steps

        # The order of these repairs matters
        steps = self._move_inheritance_mode_dependent_steps_after_last_variant_filter(steps)
        steps = self._remove_priority_score_filters_without_matching_prioritiser(steps)
        steps = self._move_priority_score_filters_next_to_matching_prioritiser(steps)

        sorted_steps = sorted(steps, key=cmp_to_key(compare_steps))
        if sorted_steps != steps:
            logger.warning(
                "Reordered neighbouring analysis steps. AnalysisSteps have been changed."
            )
        return sorted_steps

    def _move_inheritance_mode_dependent_steps_after_last_variant_filter(
        self, steps: List[AnalysisStep]
    ) -> List[AnalysisStep]:
        if not any(step.is_variant_filter() for step in steps):
            logger.warning(
                "CAUTION: Analysis contains no variant filtering steps. This will not perform well."
            )
            return steps

        if not any(step.is_inheritance_mode_dependent() for step in steps):
            return steps

        original_filter_pos = _last_position_of(steps, StepType.INHERITANCE_FILTER)
        original_prioritiser_pos = _last_position_of(
            steps, StepType.INHERITANCE_DEPENDENT_PRIORITISER
        )

        inheritance_steps = sorted(
            (step for step in steps if step.is_inheritance_mode_dependent()),
            key=_inheritance_block_order,
        )
        remaining = [step for step in steps if not step.is_inheritance_mode_dependent()]
        last_variant_filter_pos = _last_position_of(remaining, StepType.VARIANT_FILTER)
        insert_at = last_variant_filter_pos + 1
        reordered = remaining[:insert_at] + inheritance_steps + remaining[insert_at:]

        if _last_position_of(reordered, StepType.INHERITANCE_FILTER) != original_filter_pos:
            logger.warning(
                "Moved InheritanceFilter. This must run after all variant filter steps. "
                "AnalysisSteps have been changed."
            )
        if (
            _last_position_of(reordered, StepType.INHERITANCE_DEPENDENT_PRIORITISER)
            != original_prioritiser_pos
        ):
            logger.warning(
                "Moved inheritance dependent prioritiser. This must run after all variant "
                "and inheritance filter steps. AnalysisSteps have been changed."
            )
        return reordered

    def _remove_priority_score_filters_without_matching_prioritiser(
        self, steps: List[AnalysisStep]
    ) -> List[AnalysisStep]:
        prioritiser_types = _prioritiser_types(steps)
        kept = []
        for step in steps:
            if _is_score_filter(step) and step.priority_type not in prioritiser_types:
                logger.warning(
                    f"Removing {step} as the corresponding Prioritiser is not present. "
                    "AnalysisSteps have been changed."
                )
                continue
            kept.append(step)
        return kept

    def _move_priority_score_filters_next_to_matching_prioritiser(
        self, steps: List[AnalysisStep]
    ) -> List[AnalysisStep]:
        score_filters = [step for step in steps if _is_score_filter(step)]
        if not score_filters:
            return steps

        reordered = [step for step in steps if not _is_score_filter(step)]
        for score_filter in score_filters:
            position = _first_matching_prioritiser(reordered, score_filter.priority_type)
            if position is None:
                continue
            position += 1
            # Score filters of one type keep their declared order after the prioritiser
            while position < len(reordered) and _is_score_filter(reordered[position]):
                position += 1
            reordered.insert(position, score_filter)

        if reordered != steps:
            logger.warning(
                "Moved PriorityScoreFilter next to its Prioritiser. AnalysisSteps have been changed."
            )
        return reordered


def _last_position_of(steps: Sequence[AnalysisStep], step_type: StepType) -> int:
    last = -1
    for i, step in enumerate(steps):
        if step.step_type is step_type:
            last = i
    return last


def _prioritiser_types(steps: Sequence[AnalysisStep]) -> Set[str]:
    return {step.priority_type for step in steps if _is_prioritiser(step)}


def _first_matching_prioritiser(
    steps: Sequence[AnalysisStep], priority_type: str
) -> Optional[int]:
    # Only the first prioritiser of a type is used when several are declared
    for i, step in enumerate(steps):
        if _is_prioritiser(step) and step.priority_type == priority_type:
            return i
    return None
