from __future__ import annotations

from media_pipeline.application.annotation_renderer import AnnotationRenderer, embed_predictions
from media_pipeline.application.default_detector import DefaultDetectorProvider, shared_detector_provider
from media_pipeline.application.fan_out import fan_out
from media_pipeline.application.frame_extractor import FrameExtractor, compute_total_frames, extract_frames
from media_pipeline.application.inference_dispatcher import InferenceDispatcher, run_inference
from media_pipeline.application.input_classifier import InputClassifier, classify, detect_kind
from media_pipeline.application.pipeline import MediaPipeline, run_pipeline
from media_pipeline.application.stack_decoder import decode_stack
from media_pipeline.application.tensor_preparer import TensorPreparer, to_tensor

__all__ = [
    "AnnotationRenderer",
    "DefaultDetectorProvider",
    "FrameExtractor",
    "InferenceDispatcher",
    "InputClassifier",
    "MediaPipeline",
    "TensorPreparer",
    "classify",
    "compute_total_frames",
    "decode_stack",
    "detect_kind",
    "embed_predictions",
    "extract_frames",
    "fan_out",
    "run_inference",
    "run_pipeline",
    "shared_detector_provider",
    "to_tensor",
]
