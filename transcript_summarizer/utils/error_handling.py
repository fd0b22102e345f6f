"""
Centralized error handling for the application.

Every failure the pipeline can surface derives from ``PipelineError``. None of
them are recovered internally: the stage that raised them is recorded on the
exception and the run is aborted.
"""

from typing import Optional


class PipelineError(Exception):
    """Base class for all pipeline failures."""

    default_operation = "run"

    def __init__(
        self,
        message: str,
        kind: Optional[str] = None,
        operation: Optional[str] = None,
        stage: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.operation = operation or self.default_operation
        self.stage = stage

    def describe(self) -> str:
        """Human readable description naming the failing stage and operation."""
        where = f"stage '{self.stage}'" if self.stage else "pipeline"
        label = type(self).__name__
        if self.kind:
            label = f"{label}/{self.kind}"
        return f"{where} failed during '{self.operation}' ({label}): {self.message}"


class InvalidConfiguration(PipelineError):
    """Bad chunk parameters or an otherwise unusable job configuration."""

    default_operation = "configure"


class SourceFailure(PipelineError):
    """The transcript could not be fetched."""

    NOT_FOUND = "NotFound"
    UNAVAILABLE = "Unavailable"
    UNSUPPORTED = "Unsupported"

    default_operation = "load"


class ModelFailure(PipelineError):
    """A generation call failed or returned empty/malformed output."""

    UNREACHABLE = "Unreachable"
    TIMEOUT = "Timeout"
    MODEL_ERROR = "ModelError"

    default_operation = "generate"


class ContextOverflow(PipelineError):
    """The stuffed prompt is larger than the model can practically accept."""

    default_operation = "stuff"


class ArtifactFailure(PipelineError):
    """A persisted artifact is missing or corrupt, or could not be written."""

    default_operation = "load_artifact"


class RunTimeout(PipelineError):
    """The run deadline expired between two external calls."""

    default_operation = "generate"
