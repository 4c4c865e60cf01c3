from __future__ import annotations

from types import SimpleNamespace

import numpy as np
import torch

from media_pipeline.core.prediction import Prediction
from media_pipeline.infrastructure import ultralytics_detector
from media_pipeline.infrastructure.ultralytics_detector import UltralyticsDetector


class _FakeBoxes:
    def __init__(self, xyxy, conf, cls) -> None:
        self.xyxy = torch.tensor(xyxy, dtype=torch.float32)
        self.conf = torch.tensor(conf, dtype=torch.float32)
        self.cls = torch.tensor(cls, dtype=torch.float32)

    def __len__(self) -> int:
        return len(self.conf)


class _FakeYolo:
    def __init__(self, weights: str) -> None:
        self.weights = weights
        self.device = None
        self.seen: list[np.ndarray] = []

    def to(self, device: str) -> "_FakeYolo":
        self.device = device
        return self

    def __call__(self, image, conf: float, verbose: bool):
        self.seen.append(image)
        boxes = _FakeBoxes([[10, 20, 50, 60], [0, 0, 4, 4]], [0.4, 0.9], [0, 16])
        return [SimpleNamespace(boxes=boxes, names={0: "person", 16: "dog"})]


def test_detect_converts_xyxy_boxes_and_sorts_by_score(monkeypatch) -> None:
    monkeypatch.setattr(ultralytics_detector, "YOLO", _FakeYolo)
    detector = UltralyticsDetector(weights="tiny.pt", device="cpu")
    rgb = np.zeros((8, 8, 3), dtype=np.uint8)
    rgb[..., 0] = 255

    predictions = detector.detect(rgb)

    assert predictions[0].label == "dog"
    assert predictions[1] == Prediction("person", predictions[1].score, (10.0, 20.0, 40.0, 40.0))
    assert detector.model.device == "cpu"
    # Red in RGB arrives as the last channel in BGR.
    assert int(detector.model.seen[0][0, 0, 2]) == 255
