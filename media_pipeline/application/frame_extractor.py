from __future__ import annotations

import asyncio
import math
from typing import Any, Awaitable, Callable, TypeVar

from media_pipeline.config import extraction_timeout_default
from media_pipeline.core.input_descriptor import InputDescriptor
from media_pipeline.core.media_resource import MediaResource
from media_pipeline.enums import ExtractionState
from media_pipeline.errors import ExtractionTimeout
from media_pipeline.infrastructure import image_codec
from media_pipeline.infrastructure.video_capture import VideoCaptureSession
from logger.filtered_logger import LogChannel, debug as log_debug, info as log_info, warning as log_warning


T = TypeVar("T")

SessionFactory = Callable[[str, bytes], Any]

_ACTIVE_STATES = (
    ExtractionState.AWAITING_METADATA,
    ExtractionState.SEEKING,
    ExtractionState.RASTERIZING,
)


def compute_total_frames(duration_s: float, fps: float) -> int:
    """Number of frames sampled from a clip: floor(duration * fps), never negative."""
    if duration_s <= 0 or fps <= 0:
        return 0
    # Absorb float noise such as 2.9999999999 * 2.
    return max(0, math.floor(duration_s * fps + 1e-9))


class FrameExtractor:
    """Samples a video at a fixed rate by seeking one timestamp at a time.

    States move IDLE -> AWAITING_METADATA -> SEEKING(i) -> RASTERIZING(i) -> ... -> DONE,
    or to ABORTED on any failure, timeout or cancellation. Every wait on the capture is
    bounded by ``timeout_s``.
    """

    def __init__(
        self,
        timeout_s: float | None = None,
        session_factory: SessionFactory | None = None,
    ) -> None:
        if timeout_s is None:
            timeout_s = extraction_timeout_default()
        if timeout_s <= 0:
            raise ValueError("timeout_s must be positive")
        self.timeout_s = timeout_s
        self._session_factory = session_factory or VideoCaptureSession
        self.state = ExtractionState.IDLE
        self.current_index: int | None = None
        self.history: list[tuple[ExtractionState, int | None]] = []

    async def extract_frames(self, descriptor: InputDescriptor, fps: float) -> list[MediaResource]:
        if self.state in _ACTIVE_STATES:
            raise RuntimeError("FrameExtractor is already running an extraction")
        if fps < 0:
            raise ValueError("fps must be non-negative")
        self.history = []
        self.current_index = None
        self._transition(ExtractionState.IDLE)

        name = descriptor.name
        data = await descriptor.read_bytes()
        session = self._session_factory(name, data)
        frames: list[MediaResource] = []
        try:
            self._transition(ExtractionState.AWAITING_METADATA)
            await self._bounded(session.open(), name, "opening the video")
            metadata = await self._bounded(session.read_metadata(), name, "awaiting metadata")
            total_frames = compute_total_frames(metadata.duration, fps)
            log_info(
                LogChannel.VIDEO,
                f"Extracting {total_frames} frames from {name} (duration={metadata.duration:.3f}s, fps={fps})",
            )
            for index in range(total_frames):
                timestamp = index / fps
                self._transition(ExtractionState.SEEKING, index)
                surface = await self._bounded(session.grab_at(timestamp), name, f"seeking frame {index}")
                self._transition(ExtractionState.RASTERIZING, index)
                height, width = surface.shape[:2]
                encoded = await asyncio.to_thread(image_codec.encode_png, surface, name)
                del surface
                frames.append(
                    MediaResource(
                        raw_bytes=encoded,
                        media_type="image/png",
                        name=f"{name}_frame_{index}.png",
                        extension="png",
                        width=int(width),
                        height=int(height),
                        timestamp=timestamp,
                    )
                )
            self._transition(ExtractionState.DONE)
            return frames
        except BaseException as exc:
            self._transition(ExtractionState.ABORTED, self.current_index)
            log_warning(LogChannel.VIDEO, f"Frame extraction of {name} aborted: {type(exc).__name__}: {exc}")
            raise
        finally:
            await session.close(timeout_s=self.timeout_s)

    async def _bounded(self, awaitable: Awaitable[T], name: str, stage: str) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout_s)
        except asyncio.TimeoutError as exc:
            raise ExtractionTimeout(name, stage, self.timeout_s) from exc

    def _transition(self, state: ExtractionState, index: int | None = None) -> None:
        self.state = state
        self.current_index = index
        self.history.append((state, index))
        log_debug(LogChannel.VIDEO, f"FrameExtractor -> {state.value}" + (f"({index})" if index is not None else ""))


async def extract_frames(
    descriptor: InputDescriptor,
    fps: float = 1.0,
    *,
    timeout_s: float | None = None,
) -> list[MediaResource]:
    """Convenience wrapper running a fresh FrameExtractor."""
    return await FrameExtractor(timeout_s=timeout_s).extract_frames(descriptor, fps)
