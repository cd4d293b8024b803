"""
Error handling utilities for the analysis pipeline.

This module provides:
- Custom exception classes for the error categories of a run
- A context manager translating low level failures into pipeline errors
- Small validation helpers for input files

The pipeline is fail-fast: nothing here retries or recovers, an error aborts
the run and no result is produced.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Optional, Union

logger = logging.getLogger(__name__)


class PipelineError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str, stage: Optional[str] = None, details: Optional[Dict] = None):
        """Initialize pipeline error.

        Parameters
        ----------
        message : str
            Error message
        stage : str, optional
            Stage where error occurred
        details : dict, optional
            Additional error details
        """
        super().__init__(message)
        self.stage = stage
        self.details = details or {}


class ConfigurationError(PipelineError):
    """Raised when an analysis cannot run as configured. Never retried."""

    def __init__(self, message: str, setting: Optional[str] = None, stage: Optional[str] = None):
        """Initialize configuration error."""
        super().__init__(message, stage, {"setting": setting} if setting else {})
        self.setting = setting


class FileFormatError(PipelineError):
    """Raised when a file has an invalid format."""

    def __init__(self, file_path: str, expected_format: str, stage: Optional[str] = None):
        """Initialize file format error."""
        message = f"Invalid file format for {file_path}. Expected: {expected_format}"
        super().__init__(message, stage, {"file": file_path, "expected_format": expected_format})


class DataValidationError(PipelineError):
    """Raised when a record field cannot be interpreted."""

    def __init__(self, message: str, field: str, stage: Optional[str] = None):
        """Initialize data validation error."""
        super().__init__(message, stage, {"field": field})


class StageExecutionError(PipelineError):
    """Raised when a stage fails with an unexpected exception."""

    def __init__(self, stage_name: str, original_error: Exception):
        """Initialize stage execution error."""
        message = f"Stage '{stage_name}' failed: {str(original_error)}"
        super().__init__(
            message,
            stage_name,
            {
                "original_error": str(original_error),
                "error_type": type(original_error).__name__,
            },
        )
        self.original_error = original_error


@contextmanager
def graceful_error_handling(stage_name: str, logger: Optional[logging.Logger] = None):
    """Translate failures inside a block into pipeline errors.

    ``PipelineError`` passes through unchanged, missing files and permission
    problems become ``PipelineError`` and anything else becomes a
    ``StageExecutionError`` chained to the original exception.

    Parameters
    ----------
    stage_name : str
        Name of the stage for error reporting
    logger : logging.Logger, optional
        Logger instance

    Examples
    --------
    >>> with graceful_error_handling("variant_loading"):
    ...     # read the variant source
    ...     pass
    """
    _logger = logger or logging.getLogger(__name__)

    try:
        yield
    except PipelineError:
        raise
    except FileNotFoundError as e:
        _logger.error(f"File not found in {stage_name}: {e}")
        raise PipelineError(f"Required file not found: {e}", stage=stage_name) from e
    except PermissionError as e:
        _logger.error(f"Permission denied in {stage_name}: {e}")
        raise PipelineError(f"Permission denied: {e}", stage=stage_name) from e
    except Exception as e:
        _logger.error(f"Unexpected error in {stage_name}: {e}", exc_info=True)
        raise StageExecutionError(stage_name, e) from e


def validate_file_exists(file_path: Union[str, Path], stage: Optional[str] = None) -> Path:
    """Validate that a file exists and is readable.

    Parameters
    ----------
    file_path : str or Path
        Path to validate
    stage : str, optional
        Stage name for error reporting

    Returns
    -------
    Path
        Validated path object

    Raises
    ------
    PipelineError
        If the file doesn't exist or isn't a regular file
    """
    path = Path(file_path)

    if not path.exists():
        raise PipelineError(f"File not found: {path}", stage=stage, details={"file": str(path)})

    if not path.is_file():
        raise PipelineError(f"Not a file: {path}", stage=stage, details={"file": str(path)})

    return path
