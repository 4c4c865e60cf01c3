from __future__ import annotations

import asyncio
import os
import tempfile
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, TypeVar

import cv2
import numpy as np

from media_pipeline.core.input_descriptor import extract_extension
from media_pipeline.errors import DecodeError
from logger.filtered_logger import LogChannel, debug as log_debug, warning as log_warning


T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class VideoMetadata:
    fps: float
    frame_count: int
    width: int
    height: int

    @property
    def duration(self) -> float:
        if self.fps <= 0 or self.frame_count <= 0:
            return 0.0
        return self.frame_count / self.fps


class VideoCaptureSession:
    """One OpenCV capture over an in-memory video, backed by a temporary file.

    Every capture call runs on a private single-worker executor: the decode cursor
    serves one request at a time, and the release queued by ``close()`` only runs
    after any read still in flight has returned.
    """

    def __init__(self, name: str, data: bytes) -> None:
        self.name = name
        self._data = data
        self._suffix = f".{extract_extension(name)}" if extract_extension(name) else ".video"
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="video-capture")
        self._capture: Any | None = None
        self._temp_path: Path | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def open(self) -> None:
        await self._run(self._open)

    async def read_metadata(self) -> VideoMetadata:
        return await self._run(self._read_metadata)

    async def grab_at(self, timestamp_s: float) -> np.ndarray:
        """Seek to *timestamp_s* and return the visible frame (BGR)."""
        return await self._run(lambda: self._grab_at(timestamp_s))

    async def close(self, timeout_s: float | None = None) -> bool:
        """Release the capture and temporary file exactly once."""
        if self._closed:
            return False
        self._closed = True
        loop = asyncio.get_running_loop()
        pending = loop.run_in_executor(self._executor, self._release)
        self._executor.shutdown(wait=False)
        try:
            await asyncio.wait_for(asyncio.shield(pending), timeout_s)
        except asyncio.TimeoutError:
            log_warning(LogChannel.VIDEO, f"Release of {self.name} deferred until the pending decode returns")
        return True

    async def _run(self, fn: Callable[[], T]) -> T:
        if self._closed:
            raise RuntimeError(f"Capture session for {self.name} is closed")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, fn)

    def _open(self) -> None:
        fd, path = tempfile.mkstemp(suffix=self._suffix, prefix="media_pipeline_")
        self._temp_path = Path(path)
        with os.fdopen(fd, "wb") as handle:
            handle.write(self._data)
        self._data = b""
        capture = cv2.VideoCapture(str(self._temp_path))
        self._capture = capture
        if not capture.isOpened():
            raise DecodeError(self.name, "video container could not be opened")
        log_debug(LogChannel.VIDEO, f"Opened capture for {self.name} via {self._temp_path}")

    def _read_metadata(self) -> VideoMetadata:
        capture = self._require_capture()
        return VideoMetadata(
            fps=float(capture.get(cv2.CAP_PROP_FPS) or 0.0),
            frame_count=int(capture.get(cv2.CAP_PROP_FRAME_COUNT) or 0),
            width=int(capture.get(cv2.CAP_PROP_FRAME_WIDTH) or 0),
            height=int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT) or 0),
        )

    def _grab_at(self, timestamp_s: float) -> np.ndarray:
        capture = self._require_capture()
        capture.set(cv2.CAP_PROP_POS_MSEC, timestamp_s * 1000.0)
        ok, frame = capture.read()
        if not ok or frame is None:
            raise DecodeError(self.name, f"no frame at {timestamp_s:.3f}s")
        return frame

    def _require_capture(self) -> Any:
        if self._capture is None:
            raise RuntimeError(f"Capture session for {self.name} was not opened")
        return self._capture

    def _release(self) -> None:
        if self._capture is not None:
            self._capture.release()
            self._capture = None
        if self._temp_path is not None:
            self._temp_path.unlink(missing_ok=True)
            self._temp_path = None
        log_debug(LogChannel.VIDEO, f"Released capture for {self.name}")
