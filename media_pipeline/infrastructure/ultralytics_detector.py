from __future__ import annotations

from typing import Any, List

import cv2
import numpy as np
from ultralytics import YOLO

from media_pipeline.core.model_capability import DetectCapability
from media_pipeline.core.prediction import Prediction


class UltralyticsDetector(DetectCapability):
    """COCO-pretrained YOLO detector exposing ``detect(rgb_image)``."""

    def __init__(self, weights: str = "yolov8n.pt", confidence_threshold: float = 0.25, device: str = "cpu"):
        self.model = YOLO(weights)
        self.model.to(device)
        self.confidence_threshold = confidence_threshold

    def detect(self, image: Any) -> List[Prediction]:
        # Ultralytics treats numpy input as BGR.
        bgr = cv2.cvtColor(np.asarray(image), cv2.COLOR_RGB2BGR)
        results = self.model(bgr, conf=self.confidence_threshold, verbose=False)

        predictions: List[Prediction] = []
        for r in results:
            if r.boxes is None or len(r.boxes) == 0:
                continue
            boxes = r.boxes.xyxy.cpu().numpy()
            scores = r.boxes.conf.cpu().numpy()
            classes = r.boxes.cls.cpu().numpy().astype(int)
            for (x1, y1, x2, y2), score, cls_id in zip(boxes, scores, classes):
                predictions.append(
                    Prediction(
                        label=str(r.names.get(int(cls_id), f"class_{cls_id}")),
                        score=float(score),
                        bbox=(float(x1), float(y1), float(x2 - x1), float(y2 - y1)),
                    )
                )
        predictions.sort(key=lambda p: p.score, reverse=True)
        return predictions
