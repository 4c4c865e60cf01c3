from __future__ import annotations

import asyncio
from typing import Any, Callable

from media_pipeline.config import load_default_detector_config
from media_pipeline.errors import ModelUnavailable
from logger.filtered_logger import LogChannel, info as log_info


DetectorFactory = Callable[[], Any]


def _build_ultralytics_detector() -> Any:
    from media_pipeline.infrastructure.ultralytics_detector import UltralyticsDetector

    settings = load_default_detector_config()
    return UltralyticsDetector(
        weights=settings.get("weights", "yolov8n.pt"),
        confidence_threshold=float(settings.get("confidence", 0.25)),
        device=settings.get("device", "cpu"),
    )


class DefaultDetectorProvider:
    """Lazily builds one pretrained detector and hands the same instance to every caller.

    The first caller pays the load cost; concurrent callers wait on the same lock.
    A failed load is not cached, so a later call tries again.
    """

    def __init__(self, factory: DetectorFactory | None = None) -> None:
        self._factory = factory or _build_ultralytics_detector
        self._detector: Any | None = None
        self._lock: asyncio.Lock | None = None
        self.acquisitions = 0

    @property
    def loaded(self) -> bool:
        return self._detector is not None

    async def acquire(self) -> Any:
        if self._detector is not None:
            return self._detector
        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            if self._detector is None:
                log_info(LogChannel.INFERENCE, "Loading default detection model")
                try:
                    detector = await asyncio.to_thread(self._factory)
                except Exception as exc:
                    raise ModelUnavailable(f"Default detection model could not be loaded: {exc}") from exc
                if detector is None or not callable(getattr(detector, "detect", None)):
                    raise ModelUnavailable("Default detection model does not expose detect()")
                self.acquisitions += 1
                self._detector = detector
                log_info(LogChannel.INFERENCE, f"Default detection model ready: {type(detector).__name__}")
        return self._detector

    def reset(self) -> None:
        self._detector = None
        self._lock = None


_shared_provider = DefaultDetectorProvider()


def shared_detector_provider() -> DefaultDetectorProvider:
    return _shared_provider
