"""
Analysis declaration parser.

Turns a JSON analysis declaration into an immutable AnalysisConfig::

    {
        "analysisMode": "PASS_ONLY",
        "inheritanceMode": "AUTOSOMAL_DOMINANT",
        "proband": "Adam",
        "hpoIds": ["HP:0001156"],
        "frequencySources": ["GNOMAD"],
        "pathogenicitySources": ["REVEL"],
        "steps": [
            {"qualityFilter": {"minQuality": 30}},
            {"scorePrioritiser": {"priorityType": "HIPHIVE", "scoresFile": "hiphive.tsv"}},
            {"priorityScoreFilter": {"priorityType": "HIPHIVE", "minPriorityScore": 0.5}},
            {"inheritanceFilter": {}}
        ]
    }

Steps are created in declared order; ordering problems are left to the step
checker. Relative file paths are resolved against ``base_dir``.
"""

import json
import logging
import os
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..filters import (
    FrequencyFilter,
    GeneSymbolFilter,
    InheritanceFilter,
    IntervalFilter,
    PathogenicityFilter,
    PriorityScoreFilter,
    QualityFilter,
    VariantEffectFilter,
)
from ..models import ModeOfInheritance
from ..pipeline_core.error_handling import ConfigurationError, PipelineError
from ..prioritisers import OmimPrioritiser, ScorePrioritiser
from .analysis import AnalysisConfig, AnalysisMode
from .steps import AnalysisStep

logger = logging.getLogger(__name__)


class _StepOptions:
    """Option lookup for one step declaration with readable errors."""

    def __init__(self, step_name: str, options: Mapping[str, Any], base_dir: str):
        self.step_name = step_name
        self.options = dict(options or {})
        self.base_dir = base_dir

    def require(self, key: str) -> Any:
        if key not in self.options:
            raise ConfigurationError(
                f"Step '{self.step_name}' requires option '{key}'", setting=f"{self.step_name}.{key}"
            )
        return self.options[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.options.get(key, default)

    def path(self, key: str) -> str:
        value = str(self.require(key))
        return value if os.path.isabs(value) else os.path.join(self.base_dir, value)


def _quality_filter(opts: _StepOptions, moi: ModeOfInheritance) -> AnalysisStep:
    return QualityFilter(float(opts.require("minQuality")))


def _interval_filter(opts: _StepOptions, moi: ModeOfInheritance) -> AnalysisStep:
    return IntervalFilter(opts.require("chrom"), int(opts.require("start")), int(opts.require("end")))


def _frequency_filter(opts: _StepOptions, moi: ModeOfInheritance) -> AnalysisStep:
    return FrequencyFilter(float(opts.require("maxFrequency")))


def _pathogenicity_filter(opts: _StepOptions, moi: ModeOfInheritance) -> AnalysisStep:
    return PathogenicityFilter(
        min_score=float(opts.get("minScore", 0.5)),
        keep_non_pathogenic=bool(opts.get("keepNonPathogenic", False)),
    )


def _variant_effect_filter(opts: _StepOptions, moi: ModeOfInheritance) -> AnalysisStep:
    return VariantEffectFilter(opts.require("remove"))


def _gene_symbol_filter(opts: _StepOptions, moi: ModeOfInheritance) -> AnalysisStep:
    return GeneSymbolFilter(opts.require("genes"))


def _priority_score_filter(opts: _StepOptions, moi: ModeOfInheritance) -> AnalysisStep:
    return PriorityScoreFilter(
        str(opts.require("priorityType")), float(opts.require("minPriorityScore"))
    )


def _inheritance_filter(opts: _StepOptions, moi: ModeOfInheritance) -> AnalysisStep:
    if moi is ModeOfInheritance.ANY:
        logger.warning("inheritanceFilter declared without an inheritanceMode, every gene passes")
    return InheritanceFilter(moi)


def _score_prioritiser(opts: _StepOptions, moi: ModeOfInheritance) -> AnalysisStep:
    priority_type = str(opts.require("priorityType"))
    default_score = float(opts.get("defaultScore", 0.0))
    if "scoresFile" in opts.options:
        return ScorePrioritiser.from_tsv(opts.path("scoresFile"), priority_type, default_score)
    return ScorePrioritiser(priority_type, opts.require("scores"), default_score)


def _omim_prioritiser(opts: _StepOptions, moi: ModeOfInheritance) -> AnalysisStep:
    if "diseaseModesFile" in opts.options:
        return OmimPrioritiser.from_tsv(opts.path("diseaseModesFile"))
    disease_modes = {
        symbol: [ModeOfInheritance.parse(mode) for mode in modes]
        for symbol, modes in opts.get("diseaseModes", {}).items()
    }
    return OmimPrioritiser(disease_modes)


STEP_BUILDERS: Dict[str, Callable[[_StepOptions, ModeOfInheritance], AnalysisStep]] = {
    "qualityFilter": _quality_filter,
    "intervalFilter": _interval_filter,
    "frequencyFilter": _frequency_filter,
    "pathogenicityFilter": _pathogenicity_filter,
    "variantEffectFilter": _variant_effect_filter,
    "geneSymbolFilter": _gene_symbol_filter,
    "priorityScoreFilter": _priority_score_filter,
    "inheritanceFilter": _inheritance_filter,
    "scorePrioritiser": _score_prioritiser,
    "omimPrioritiser": _omim_prioritiser,
}


def parse_step(
    declaration: Mapping[str, Any],
    mode_of_inheritance: ModeOfInheritance = ModeOfInheritance.ANY,
    base_dir: str = ".",
) -> AnalysisStep:
    """Build one step from a ``{"stepName": {options}}`` declaration."""
    if not isinstance(declaration, Mapping) or len(declaration) != 1:
        raise ConfigurationError(
            f"A step must be declared as a single-key object, got {declaration!r}", setting="steps"
        )
    step_name, options = next(iter(declaration.items()))
    builder = STEP_BUILDERS.get(step_name)
    if builder is None:
        raise ConfigurationError(
            f"Unknown analysis step '{step_name}'. Expected one of {sorted(STEP_BUILDERS)}",
            setting="steps",
        )
    try:
        return builder(_StepOptions(step_name, options, base_dir), mode_of_inheritance)
    except PipelineError:
        raise
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid options for step '{step_name}': {e}", setting=step_name)


def _parse_enum(parse: Callable[[Any], Any], value: Any, setting: str):
    try:
        return parse(value)
    except ValueError as e:
        raise ConfigurationError(str(e), setting=setting)


def parse_analysis(
    declaration: Mapping[str, Any],
    defaults: Optional[Mapping[str, Any]] = None,
    base_dir: str = ".",
) -> AnalysisConfig:
    """Build an AnalysisConfig from an analysis declaration.

    Parameters
    ----------
    declaration : Mapping[str, Any]
        Parsed analysis JSON (camelCase keys)
    defaults : Mapping[str, Any], optional
        Run defaults as returned by ``genesieve.config.load_config``
    base_dir : str
        Directory relative step file paths are resolved against

    Returns
    -------
    AnalysisConfig
        Immutable configuration with steps in declared order

    Raises
    ------
    ConfigurationError
        If a step, mode or option cannot be interpreted
    """
    defaults = dict(defaults or {})

    mode_of_inheritance = _parse_enum(
        ModeOfInheritance.parse,
        declaration.get("inheritanceMode", defaults.get("mode_of_inheritance", "ANY")),
        "inheritanceMode",
    )
    analysis_mode = _parse_enum(
        AnalysisMode.parse,
        declaration.get("analysisMode", defaults.get("analysis_mode", "PASS_ONLY")),
        "analysisMode",
    )

    raw_steps = declaration.get("steps", [])
    if not isinstance(raw_steps, list):
        raise ConfigurationError("'steps' must be a list of step declarations", setting="steps")
    steps: List[AnalysisStep] = [
        parse_step(step, mode_of_inheritance, base_dir) for step in raw_steps
    ]
    logger.debug(f"Parsed {len(steps)} analysis steps: {steps}")

    return AnalysisConfig(
        steps=tuple(steps),
        mode_of_inheritance=mode_of_inheritance,
        analysis_mode=analysis_mode,
        frequency_sources=declaration.get(
            "frequencySources", defaults.get("frequency_sources", [])
        ),
        pathogenicity_sources=declaration.get(
            "pathogenicitySources", defaults.get("pathogenicity_sources", [])
        ),
        proband=declaration.get("proband"),
        hpo_ids=declaration.get("hpoIds", []),
        progress_interval=int(defaults.get("progress_interval", 100_000)),
        threads=int(defaults.get("threads", 1)),
    )


def load_analysis(file_path: str, defaults: Optional[Mapping[str, Any]] = None) -> AnalysisConfig:
    """Read and parse an analysis declaration JSON file."""
    with open(file_path, "r", encoding="utf-8") as f:
        try:
            declaration = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Error parsing analysis JSON {file_path}: {e}")
    logger.info(f"Loaded analysis declaration from {file_path}")
    return parse_analysis(
        declaration, defaults, base_dir=os.path.dirname(os.path.abspath(file_path))
    )
