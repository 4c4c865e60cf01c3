from __future__ import annotations

from media_pipeline.core.inference_request import InferenceOptions, InferenceRequest, parse_task_type
from media_pipeline.core.input_descriptor import BytesDescriptor, InputDescriptor, PathDescriptor, extract_extension
from media_pipeline.core.media_collection import MediaCollection
from media_pipeline.core.media_resource import DerivedCache, MediaResource, RenderableHandle
from media_pipeline.core.model_capability import DetectCapability, PredictCapability
from media_pipeline.core.prediction import Prediction

__all__ = [
    "BytesDescriptor",
    "DerivedCache",
    "DetectCapability",
    "InferenceOptions",
    "InferenceRequest",
    "InputDescriptor",
    "MediaCollection",
    "MediaResource",
    "PathDescriptor",
    "PredictCapability",
    "Prediction",
    "RenderableHandle",
    "extract_extension",
    "parse_task_type",
]
