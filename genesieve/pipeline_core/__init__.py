"""
Pipeline infrastructure for genesieve.

This package provides the core abstractions the analysis engine is built on:
- AnalysisContext: Container for all state of one analysis run
- Stage: Abstract base class for all pipeline stages
- PipelineRunner: Executes stages in dependency order
- error_handling: The error taxonomy of a run
"""

from .context import AnalysisContext
from .error_handling import (
    ConfigurationError,
    DataValidationError,
    FileFormatError,
    PipelineError,
    StageExecutionError,
)
from .runner import PipelineRunner
from .stage import Stage

__all__ = [
    "AnalysisContext",
    "Stage",
    "PipelineRunner",
    "PipelineError",
    "ConfigurationError",
    "FileFormatError",
    "DataValidationError",
    "StageExecutionError",
]
