from __future__ import annotations

import asyncio
from typing import Any, Sequence

import cv2
import numpy as np

from media_pipeline.core.media_resource import MediaResource
from media_pipeline.core.prediction import Prediction
from media_pipeline.infrastructure import image_codec
from logger.filtered_logger import LogChannel, debug as log_debug, warning as log_warning


class AnnotationRenderer:
    """Burns prediction boxes and labels into a resource's pixels, in place."""

    def __init__(
        self,
        color: tuple[int, int, int] = (0, 0, 255),
        thickness: int = 2,
        font_scale: float = 0.5,
    ) -> None:
        self.color = color
        self.thickness = thickness
        self.font_scale = font_scale

    async def embed_predictions(self, resource: MediaResource) -> None:
        """Replace the resource's bytes with an annotated re-encode in its declared type."""
        boxes = _boxed_predictions(resource.predictions)
        original_type = resource.media_type
        # The handle stays open until replace_content releases it with the old generation.
        handle = resource.open_renderable()
        with handle.open() as stream:
            source_bytes = stream.read()
        data, media_type, width, height = await asyncio.to_thread(
            self._render, source_bytes, original_type, resource.name, boxes
        )
        del source_bytes
        if media_type != original_type:
            log_warning(LogChannel.RENDER, f"{resource.name}: {original_type} cannot be written, re-encoded as {media_type}")
        resource.replace_content(data, media_type=media_type, width=width, height=height)
        log_debug(LogChannel.RENDER, f"Embedded {len(boxes)} boxes into {resource.name}")

    def _render(
        self,
        raw_bytes: bytes,
        media_type: str,
        name: str,
        boxes: Sequence[Prediction],
    ) -> tuple[bytes, str, int, int]:
        canvas = image_codec.decode_bgr(raw_bytes, name).copy()
        h_img, w_img = canvas.shape[:2]
        for prediction in boxes:
            self._draw_prediction(canvas, prediction)
        data, effective_type = image_codec.encode(canvas, media_type, name)
        return data, effective_type, int(w_img), int(h_img)

    def _draw_prediction(self, canvas: np.ndarray, prediction: Prediction) -> None:
        x, y, width, height = prediction.bbox
        x1 = int(round(x))
        y1 = int(round(y))
        x2 = int(round(x + width))
        y2 = int(round(y + height))
        cv2.rectangle(canvas, (x1, y1), (x2, y2), self.color, self.thickness, cv2.LINE_AA)
        text_y = label_baseline(y)
        cv2.putText(
            canvas,
            prediction.display_text(),
            (x1, int(round(text_y))),
            cv2.FONT_HERSHEY_SIMPLEX,
            self.font_scale,
            self.color,
            1,
            cv2.LINE_AA,
        )


def label_baseline(box_top: float) -> float:
    """Label sits 5px above the box, or 15px below its top edge when there is no room above."""
    return box_top - 5 if box_top > 10 else box_top + 15


def _boxed_predictions(predictions: Any) -> list[Prediction]:
    if not predictions:
        return []
    return [p for p in predictions if isinstance(p, Prediction) and p.bbox is not None]


async def embed_predictions(resource: MediaResource) -> None:
    await AnnotationRenderer().embed_predictions(resource)
