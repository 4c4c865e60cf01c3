from enum import Enum


class MediaKind(Enum):
    """Tag carried by every media value so consumers dispatch without isinstance checks."""

    IMAGE = "IMAGE"
    VIDEO = "VIDEO"
    STACK = "STACK"


class TaskType(str, Enum):
    """Inference task families understood by the dispatcher."""

    CLASSIFICATION = "classification"
    SEGMENTATION = "segmentation"
    DETECTION = "detection"


class FanOutPolicy(str, Enum):
    """How a collection dispatch reacts when one frame fails."""

    FAIL_FAST = "fail_fast"
    COLLECT_PARTIAL = "collect_partial"


class ExtractionState(Enum):
    """Lifecycle of a single video frame extraction run."""

    IDLE = "IDLE"
    AWAITING_METADATA = "AWAITING_METADATA"
    SEEKING = "SEEKING"
    RASTERIZING = "RASTERIZING"
    DONE = "DONE"
    ABORTED = "ABORTED"
