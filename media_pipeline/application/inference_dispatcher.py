from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Dict

import numpy as np
import torch

from media_pipeline.application.default_detector import DefaultDetectorProvider, shared_detector_provider
from media_pipeline.application.fan_out import fan_out
from media_pipeline.application.tensor_preparer import TensorPreparer
from media_pipeline.core.inference_request import InferenceOptions, InferenceRequest
from media_pipeline.core.media_collection import MediaCollection
from media_pipeline.core.media_resource import MediaResource
from media_pipeline.core.model_capability import supports_detect, supports_predict
from media_pipeline.core.prediction import Prediction
from media_pipeline.enums import MediaKind, TaskType
from media_pipeline.errors import ModelUnavailable, UnsupportedDispatch
from logger.filtered_logger import LogChannel, debug as log_debug, info as log_info, should_log_debug


Routine = Callable[[MediaResource, Any, InferenceOptions, TensorPreparer], Awaitable[MediaResource]]


class InferenceDispatcher:
    """Runs one task type over a single resource or every frame of a collection.

    The result has the same shape as the input: a resource becomes a resource, a
    collection becomes a collection of the same kind with its metadata carried over.
    """

    def __init__(self, detector_provider: DefaultDetectorProvider | None = None) -> None:
        self._detector_provider = detector_provider or shared_detector_provider()
        self._routines: Dict[TaskType, Routine] = {
            TaskType.CLASSIFICATION: self._classify_resource,
            TaskType.SEGMENTATION: self._segment_resource,
            TaskType.DETECTION: self._detect_resource,
        }

    async def run(self, request: InferenceRequest) -> MediaResource | MediaCollection:
        routine = self._routines.get(request.task_type)
        if routine is None:
            raise UnsupportedDispatch(f"task type {request.task_type!r}")
        kind = getattr(request.media, "kind", None)
        if not isinstance(kind, MediaKind):
            raise UnsupportedDispatch(f"input kind {type(request.media).__name__}")

        model = await self._resolve_model(request.task_type, request.model)
        options = request.options
        preparer = TensorPreparer((options.target_height, options.target_width), normalize=options.normalize)

        async def _run_one(resource: MediaResource) -> MediaResource:
            return await routine(resource, model, options, preparer)

        if kind is MediaKind.IMAGE:
            return await _run_one(request.media)

        collection: MediaCollection = request.media
        frames = await fan_out(
            collection.frames,
            _run_one,
            policy=options.fan_out_policy,
            on_error=lambda frame, exc: frame.clone_with_error(exc),
            max_concurrency=options.max_concurrency,
        )
        failed = sum(1 for frame in frames if frame.error is not None)
        log_info(
            LogChannel.INFERENCE,
            f"{request.task_type.value} finished on {collection.source_name}: {len(frames)} frames, {failed} failed",
        )
        return collection.with_frames(frames)

    async def _resolve_model(self, task_type: TaskType, model: Any) -> Any:
        if task_type is TaskType.DETECTION:
            if model is None:
                return await self._detector_provider.acquire()
            if not supports_detect(model):
                raise ModelUnavailable(f"{type(model).__name__} does not expose detect()")
            return model
        if not supports_predict(model):
            raise ModelUnavailable(f"{task_type.value} requires a model exposing predict()")
        return model

    async def _classify_resource(
        self,
        resource: MediaResource,
        model: Any,
        options: InferenceOptions,
        preparer: TensorPreparer,
    ) -> MediaResource:
        tensor = await preparer.to_tensor(resource)
        output = await _invoke(model.predict, tensor)
        scores = _to_numpy(output).reshape(-1)
        del tensor, output

        labels = options.labels
        try:
            predictions = [
                Prediction(label=labels[i] if i < len(labels) else f"class_{i}", score=float(score))
                for i, score in enumerate(scores)
            ]
        except ValueError as exc:
            raise ModelUnavailable(
                f"classification output for {resource.name} is not a probability vector: {exc}"
            ) from exc
        predictions.sort(key=lambda p: p.score, reverse=True)
        if should_log_debug(LogChannel.INFERENCE):
            top = ", ".join(p.display_text() for p in predictions[:3])
            log_debug(LogChannel.INFERENCE, f"{resource.name}: top={top}")
        return resource.clone_with_predictions(predictions)

    async def _segment_resource(
        self,
        resource: MediaResource,
        model: Any,
        options: InferenceOptions,
        preparer: TensorPreparer,
    ) -> MediaResource:
        del options
        tensor = await preparer.to_tensor(resource)
        output = await _invoke(model.predict, tensor)
        # Raw model output is the prediction payload, e.g. [1, H, W, C].
        segmentation = _to_numpy(output).tolist()
        del tensor, output
        return resource.clone_with_predictions(segmentation)

    async def _detect_resource(
        self,
        resource: MediaResource,
        model: Any,
        options: InferenceOptions,
        preparer: TensorPreparer,
    ) -> MediaResource:
        del options, preparer
        image = await resource.decoded_pixels()
        records = await _invoke(model.detect, image)
        predictions = [Prediction.from_record(record) for record in (records or [])]
        log_debug(LogChannel.INFERENCE, f"{resource.name}: {len(predictions)} detections")
        return resource.clone_with_predictions(predictions)


async def _invoke(fn: Callable[[Any], Any], argument: Any) -> Any:
    """Call a model capability; async capabilities are awaited, sync ones run off the event loop."""
    if inspect.iscoroutinefunction(fn):
        return await fn(argument)
    result = await asyncio.to_thread(fn, argument)
    if inspect.isawaitable(result):
        result = await result
    return result


def _to_numpy(output: Any) -> np.ndarray:
    if isinstance(output, torch.Tensor):
        return output.detach().cpu().numpy()
    return np.asarray(output, dtype=np.float32)


async def run_inference(
    task_type: TaskType | str,
    media: MediaResource | MediaCollection,
    model: Any | None = None,
    options: InferenceOptions | dict[str, Any] | None = None,
) -> MediaResource | MediaCollection:
    if not isinstance(options, InferenceOptions):
        options = InferenceOptions.from_mapping(options)
    request = InferenceRequest(task_type=task_type, media=media, model=model, options=options)
    return await InferenceDispatcher().run(request)
