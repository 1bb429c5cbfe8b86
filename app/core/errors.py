from typing import Optional


class VideoServiceError(Exception):
    """Base class for all errors raised by the video service."""


class ValidationError(VideoServiceError):
    """A submission is missing a required field."""


class RecordStoreError(VideoServiceError):
    """The status store could not insert, update or read a record."""


class PipelineStageError(VideoServiceError):
    """Raised by a generation stage; caught once by the pipeline."""

    stage = "pipeline"


class SynthesisFailure(PipelineStageError):
    stage = "synthesis"

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status

    @property
    def is_transient(self) -> bool:
        """Network faults and 5xx replies are worth another attempt."""
        return self.status is None or self.status >= 500


class RenderFailure(PipelineStageError):
    stage = "slides"


class CompileFailure(PipelineStageError):
    stage = "compile"


class PublishFailure(PipelineStageError):
    stage = "publish"

    def __init__(self, message: str, artifact: str):
        super().__init__(message)
        self.artifact = artifact


class DurationProbeFailure(VideoServiceError):
    """ffprobe could not report a duration. Never fatal."""
