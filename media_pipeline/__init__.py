"""Media ingestion and inference-dispatch pipeline.

Images, videos and multi-page stacks are normalized into MediaResource /
MediaCollection values, converted to tensors, dispatched to a model and
optionally annotated in place. ``run_pipeline`` applies ``config/log.yaml``
before running; callers driving ``MediaPipeline`` directly call
``media_pipeline.config.log_config.apply_log_config()`` once at startup.
"""
from __future__ import annotations

from media_pipeline.application import (
    AnnotationRenderer,
    FrameExtractor,
    InferenceDispatcher,
    InputClassifier,
    MediaPipeline,
    TensorPreparer,
    classify,
    embed_predictions,
    extract_frames,
    run_inference,
    run_pipeline,
    to_tensor,
)
from media_pipeline.core import (
    BytesDescriptor,
    InferenceOptions,
    InferenceRequest,
    MediaCollection,
    MediaResource,
    PathDescriptor,
    Prediction,
)
from media_pipeline.enums import FanOutPolicy, MediaKind, TaskType
from media_pipeline.errors import (
    DecodeError,
    ExtractionTimeout,
    MediaPipelineError,
    MissingInput,
    ModelUnavailable,
    UnsupportedDispatch,
    UnsupportedInputKind,
)

__all__ = [
    "AnnotationRenderer",
    "BytesDescriptor",
    "DecodeError",
    "ExtractionTimeout",
    "FanOutPolicy",
    "FrameExtractor",
    "InferenceDispatcher",
    "InferenceOptions",
    "InferenceRequest",
    "InputClassifier",
    "MediaCollection",
    "MediaKind",
    "MediaPipeline",
    "MediaPipelineError",
    "MediaResource",
    "MissingInput",
    "ModelUnavailable",
    "PathDescriptor",
    "Prediction",
    "TaskType",
    "TensorPreparer",
    "UnsupportedDispatch",
    "UnsupportedInputKind",
    "classify",
    "embed_predictions",
    "extract_frames",
    "run_inference",
    "run_pipeline",
    "to_tensor",
]
