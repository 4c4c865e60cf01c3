from __future__ import annotations

from typing import Any, Mapping

from media_pipeline.application.annotation_renderer import AnnotationRenderer
from media_pipeline.application.inference_dispatcher import InferenceDispatcher
from media_pipeline.application.input_classifier import InputClassifier
from media_pipeline.config.log_config import apply_log_config
from media_pipeline.core.inference_request import InferenceOptions, InferenceRequest
from media_pipeline.core.input_descriptor import InputDescriptor
from media_pipeline.core.media_collection import MediaCollection
from media_pipeline.core.media_resource import MediaResource
from media_pipeline.core.prediction import Prediction
from media_pipeline.enums import MediaKind, TaskType
from logger.filtered_logger import LogChannel, info as log_info


class MediaPipeline:
    """Drives classification of the input, inference dispatch and optional annotation."""

    def __init__(
        self,
        classifier: InputClassifier | None = None,
        dispatcher: InferenceDispatcher | None = None,
        renderer: AnnotationRenderer | None = None,
    ) -> None:
        self.classifier = classifier or InputClassifier()
        self.dispatcher = dispatcher or InferenceDispatcher()
        self.renderer = renderer or AnnotationRenderer()

    async def run(
        self,
        descriptor: InputDescriptor | None,
        task_type: TaskType | str,
        model: Any | None = None,
        options: InferenceOptions | Mapping[str, Any] | None = None,
        annotate: bool = False,
    ) -> MediaResource | MediaCollection:
        if not isinstance(options, InferenceOptions):
            options = InferenceOptions.from_mapping(options)
        media = await self.classifier.classify(descriptor, options)
        request = InferenceRequest(task_type=task_type, media=media, model=model, options=options)
        result = await self.dispatcher.run(request)
        if annotate:
            for resource in _resources(result):
                await self.renderer.embed_predictions(resource)
        log_info(LogChannel.GLOBAL, summarize(result))
        return result


def summarize(media: MediaResource | MediaCollection) -> str:
    """One-line description of a dispatch result for logs."""
    if media.kind is MediaKind.IMAGE:
        return f"{media.name}: {_describe_predictions(media)}"
    failed = sum(1 for frame in media.frames if frame.error is not None)
    return f"{media.source_name} [{media.kind.value.lower()}]: {len(media)} frames, {failed} failed"


def _describe_predictions(resource: MediaResource) -> str:
    best = resource.best_prediction()
    if best is None or isinstance(best, Prediction):
        return f"best={best!r}"
    # Raw payloads (segmentation maps) are reported by shape only.
    return f"payload shape {_payload_shape(resource.predictions)}"


def _payload_shape(payload: Any) -> list[int]:
    shape: list[int] = []
    while isinstance(payload, (list, tuple)):
        shape.append(len(payload))
        if not payload:
            break
        payload = payload[0]
    return shape


def _resources(media: MediaResource | MediaCollection) -> list[MediaResource]:
    if media.kind is MediaKind.IMAGE:
        return [media]
    return list(media.frames)


async def run_pipeline(
    descriptor: InputDescriptor | None,
    task_type: TaskType | str,
    model: Any | None = None,
    options: InferenceOptions | Mapping[str, Any] | None = None,
    annotate: bool = False,
) -> MediaResource | MediaCollection:
    """Entry point: applies log.yaml, then runs a fresh MediaPipeline."""
    apply_log_config()
    return await MediaPipeline().run(descriptor, task_type, model=model, options=options, annotate=annotate)
