from __future__ import annotations


class MediaPipelineError(Exception):
    """Base class for every failure raised by the media pipeline."""


class MissingInput(MediaPipelineError, ValueError):
    def __init__(self, message: str = "No input provided") -> None:
        super().__init__(message)


class UnsupportedInputKind(MediaPipelineError, ValueError):
    def __init__(self, name: str, detail: str | None = None) -> None:
        self.name = name
        message = f"Unsupported input file type: {name}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class DecodeError(MediaPipelineError, ValueError):
    def __init__(self, name: str, detail: str | None = None) -> None:
        self.name = name
        message = f"Unable to decode media: {name}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class ExtractionTimeout(MediaPipelineError, TimeoutError):
    def __init__(self, name: str, stage: str, timeout_s: float) -> None:
        self.name = name
        self.stage = stage
        self.timeout_s = timeout_s
        super().__init__(f"Frame extraction of {name} timed out after {timeout_s:.1f}s while {stage}")


class UnsupportedDispatch(MediaPipelineError, ValueError):
    def __init__(self, subject: str) -> None:
        self.subject = subject
        super().__init__(f"Unsupported dispatch: {subject}")


class ModelUnavailable(MediaPipelineError, RuntimeError):
    """Raised when no usable inference capability can be obtained."""
