from __future__ import annotations

import asyncio
import io
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Sequence

import numpy as np

from media_pipeline.core.input_descriptor import BytesDescriptor, InputDescriptor, extract_extension
from media_pipeline.enums import MediaKind
from media_pipeline.errors import UnsupportedInputKind
from media_pipeline.infrastructure import image_codec
from logger.filtered_logger import LogChannel, debug as log_debug


PIXELS_KEY = "pixels_rgb"
RENDERABLE_KEY = "renderable"


class RenderableHandle:
    """Scoped view over a resource's encoded bytes, analogous to a browser object URL.

    The handle must be released explicitly; reading after release is an error.
    """

    def __init__(self, name: str, media_type: str, data: bytes) -> None:
        self.name = name
        self.media_type = media_type
        self._data = data
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def open(self) -> io.BytesIO:
        if self._released:
            raise RuntimeError(f"Renderable handle for {self.name} has been released")
        return io.BytesIO(self._data)

    def release(self) -> bool:
        if self._released:
            return False
        self._released = True
        self._data = b""
        return True


@dataclass(slots=True)
class _CacheSlot:
    value: Any
    generation: int
    releaser: Callable[[Any], Any] | None = None


class DerivedCache:
    """Holds artifacts derived from raw bytes, each stamped with the generation it was built at.

    Bumping the generation releases every slot; a slot from an older generation is
    never returned.
    """

    def __init__(self) -> None:
        self._generation = 0
        self._slots: Dict[Hashable, _CacheSlot] = {}

    @property
    def generation(self) -> int:
        return self._generation

    def get(self, key: Hashable) -> Any | None:
        slot = self._slots.get(key)
        if slot is None:
            return None
        if slot.generation != self._generation:
            self._discard(key)
            return None
        return slot.value

    def put(
        self,
        key: Hashable,
        value: Any,
        *,
        releaser: Callable[[Any], Any] | None = None,
        generation: int | None = None,
    ) -> Any:
        """Store *value* unless it was computed for an older generation."""
        if generation is not None and generation != self._generation:
            if releaser is not None:
                releaser(value)
            return value
        self._discard(key)
        self._slots[key] = _CacheSlot(value=value, generation=self._generation, releaser=releaser)
        return value

    def bump(self) -> int:
        self._generation += 1
        self.release_all()
        return self._generation

    def release_all(self) -> None:
        for key in list(self._slots):
            self._discard(key)

    def __contains__(self, key: Hashable) -> bool:
        slot = self._slots.get(key)
        return slot is not None and slot.generation == self._generation

    def __len__(self) -> int:
        return len(self._slots)

    def _discard(self, key: Hashable) -> None:
        slot = self._slots.pop(key, None)
        if slot is not None and slot.releaser is not None:
            slot.releaser(slot.value)


class MediaResource:
    """A single decodable still image plus predictions and lazily derived artifacts."""

    kind = MediaKind.IMAGE

    def __init__(
        self,
        *,
        raw_bytes: bytes,
        media_type: str,
        name: str,
        extension: str | None = None,
        width: int | None = None,
        height: int | None = None,
        predictions: Sequence[Any] | None = None,
        timestamp: float | None = None,
        error: str | None = None,
        source: InputDescriptor | None = None,
    ) -> None:
        if not (media_type or "").lower().startswith("image/"):
            raise UnsupportedInputKind(name, f"media type {media_type!r} is not an image")
        if (width is None) != (height is None):
            raise ValueError("width and height must be provided together")
        self._raw_bytes = bytes(raw_bytes)
        self.media_type = media_type
        self.name = name
        self.extension = extension if extension is not None else extract_extension(name)
        self.width = width
        self.height = height
        self.predictions = list(predictions) if predictions is not None else None
        self.timestamp = timestamp
        self.error = error
        self.source = source if source is not None else BytesDescriptor(name, media_type, self._raw_bytes)
        self.cache = DerivedCache()

    @classmethod
    async def from_descriptor(cls, descriptor: InputDescriptor) -> MediaResource:
        data = await descriptor.read_bytes()
        width, height = await asyncio.to_thread(image_codec.probe_size, data, descriptor.name)
        return cls(
            raw_bytes=data,
            media_type=descriptor.declared_type,
            name=descriptor.name,
            width=width,
            height=height,
            source=descriptor,
        )

    @property
    def raw_bytes(self) -> bytes:
        return self._raw_bytes

    @property
    def generation(self) -> int:
        return self.cache.generation

    def clone_with_predictions(self, predictions: Sequence[Any] | None) -> MediaResource:
        """Return a new resource sharing every field except predictions; self is untouched."""
        return self._clone(predictions=predictions, error=None)

    def clone_with_error(self, error: BaseException | str) -> MediaResource:
        """Return a new resource marking a failed inference, with no predictions."""
        return self._clone(predictions=None, error=str(error) or type(error).__name__)

    def top_predictions(self, n: int = 1) -> list[Any]:
        return list(self.predictions[:n]) if self.predictions else []

    def best_prediction(self) -> Any | None:
        return self.predictions[0] if self.predictions else None

    async def decoded_pixels(self) -> np.ndarray:
        """Return the read-only RGB pixel array, decoding once per generation."""
        while True:
            cached = self.cache.get(PIXELS_KEY)
            if cached is not None:
                return cached
            generation = self.cache.generation
            data = self._raw_bytes
            pixels = await asyncio.to_thread(image_codec.decode_rgb, data, self.name)
            pixels.setflags(write=False)
            if generation == self.cache.generation:
                log_debug(LogChannel.INGEST, f"Decoded {self.name} at generation {generation}")
                return self.cache.put(PIXELS_KEY, pixels, generation=generation)
            # Bytes were replaced while decoding; decode the new content instead.

    def open_renderable(self) -> RenderableHandle:
        handle = self.cache.get(RENDERABLE_KEY)
        if handle is None:
            handle = RenderableHandle(self.name, self.media_type, self._raw_bytes)
            self.cache.put(RENDERABLE_KEY, handle, releaser=RenderableHandle.release)
        return handle

    def replace_content(
        self,
        data: bytes,
        *,
        media_type: str | None = None,
        width: int | None = None,
        height: int | None = None,
    ) -> None:
        """Swap in new encoded bytes; every cached derivative is released and invalidated."""
        if media_type is not None and media_type != self.media_type:
            if not media_type.lower().startswith("image/"):
                raise UnsupportedInputKind(self.name, f"media type {media_type!r} is not an image")
            new_extension = media_type.split("/", 1)[1].lower()
            if self.extension and self.name.lower().endswith(f".{self.extension}"):
                self.name = f"{self.name[: -len(self.extension)]}{new_extension}"
            self.extension = new_extension
            self.media_type = media_type
        if (width is None) != (height is None):
            raise ValueError("width and height must be provided together")
        if width is not None:
            self.width = width
            self.height = height
        self._raw_bytes = bytes(data)
        self.source = BytesDescriptor(self.name, self.media_type, self._raw_bytes)
        generation = self.cache.bump()
        log_debug(LogChannel.RENDER, f"{self.name} content replaced, generation {generation}")

    def release(self) -> None:
        """Free every derived handle now instead of waiting for garbage collection."""
        self.cache.release_all()

    close = release

    def __enter__(self) -> MediaResource:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()

    def __repr__(self) -> str:
        count = len(self.predictions) if self.predictions is not None else 0
        return (
            f"MediaResource(name={self.name!r}, media_type={self.media_type!r}, "
            f"size={self.width}x{self.height}, predictions={count})"
        )

    def _clone(self, **overrides: Any) -> MediaResource:
        fields: dict[str, Any] = {
            "raw_bytes": self._raw_bytes,
            "media_type": self.media_type,
            "name": self.name,
            "extension": self.extension,
            "width": self.width,
            "height": self.height,
            "predictions": self.predictions,
            "timestamp": self.timestamp,
            "error": self.error,
            "source": self.source,
        }
        fields.update(overrides)
        return MediaResource(**fields)
