from __future__ import annotations

from typing import Any, Mapping

from media_pipeline.application.frame_extractor import FrameExtractor
from media_pipeline.application.stack_decoder import decode_stack
from media_pipeline.core.inference_request import InferenceOptions
from media_pipeline.core.input_descriptor import InputDescriptor, extract_extension
from media_pipeline.core.media_collection import MediaCollection
from media_pipeline.core.media_resource import MediaResource
from media_pipeline.enums import MediaKind
from media_pipeline.errors import MissingInput, UnsupportedInputKind
from logger.filtered_logger import LogChannel, debug as log_debug


_STACK_EXTENSIONS = ("tif", "tiff")


def detect_kind(descriptor: InputDescriptor) -> MediaKind:
    """Decide which media variant *descriptor* becomes, without reading its bytes."""
    extension = extract_extension(descriptor.name)
    declared = (descriptor.declared_type or "").lower()
    if extension in _STACK_EXTENSIONS:
        return MediaKind.STACK
    if declared.startswith("image/"):
        return MediaKind.IMAGE
    if declared.startswith("video/"):
        return MediaKind.VIDEO
    raise UnsupportedInputKind(descriptor.name)


class InputClassifier:
    """Turns an arbitrary input descriptor into a MediaResource or MediaCollection."""

    def __init__(self, frame_extractor_factory: Any | None = None) -> None:
        self._frame_extractor_factory = frame_extractor_factory or FrameExtractor

    async def classify(
        self,
        descriptor: InputDescriptor | None,
        options: InferenceOptions | Mapping[str, Any] | None = None,
    ) -> MediaResource | MediaCollection:
        if descriptor is None:
            raise MissingInput("No file provided")
        if not isinstance(options, InferenceOptions):
            options = InferenceOptions.from_mapping(options)

        kind = detect_kind(descriptor)
        log_debug(LogChannel.INGEST, f"Classified {descriptor.name} ({descriptor.declared_type!r}) as {kind.value}")
        if kind is MediaKind.STACK:
            return await decode_stack(descriptor)
        if kind is MediaKind.IMAGE:
            return await MediaResource.from_descriptor(descriptor)
        extractor = self._frame_extractor_factory(timeout_s=options.extraction_timeout_s)
        frames = await extractor.extract_frames(descriptor, options.fps)
        return MediaCollection.video(descriptor.name, frames, options.fps, source=descriptor)


async def classify(
    descriptor: InputDescriptor | None,
    options: InferenceOptions | Mapping[str, Any] | None = None,
) -> MediaResource | MediaCollection:
    return await InputClassifier().classify(descriptor, options)
