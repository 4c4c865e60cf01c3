from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence


class PredictCapability(ABC):
    """Model that maps an input tensor to an output tensor (classification, segmentation)."""

    @abstractmethod
    def predict(self, tensor: Any) -> Any:
        """Return a tensor-like output; may also return an awaitable."""


class DetectCapability(ABC):
    """Model that finds labelled boxes directly on a decoded RGB image."""

    @abstractmethod
    def detect(self, image: Any) -> Sequence[Any]:
        """Return records carrying label (or class), score and bbox ``(x, y, w, h)``."""


def supports_predict(model: Any) -> bool:
    return model is not None and callable(getattr(model, "predict", None))


def supports_detect(model: Any) -> bool:
    return model is not None and callable(getattr(model, "detect", None))
