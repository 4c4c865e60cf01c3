from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence


BoundingBox = tuple[float, float, float, float]

# float32 softmax outputs can land a hair outside [0, 1].
_SCORE_TOLERANCE = 1e-6


@dataclass(frozen=True, slots=True)
class Prediction:
    """One inference answer attached to a MediaResource.

    ``bbox`` is ``(x, y, width, height)`` in source pixel coordinates.
    """

    label: str
    score: float
    bbox: BoundingBox | None = None

    def __post_init__(self) -> None:
        if not -_SCORE_TOLERANCE <= self.score <= 1.0 + _SCORE_TOLERANCE:
            raise ValueError(f"Prediction score must be within [0, 1], got {self.score}")

    def display_text(self) -> str:
        return f"{self.label} ({self.score * 100:.1f}%)"

    @classmethod
    def from_record(cls, record: Any) -> Prediction:
        """Normalize a detector record (Prediction or mapping with label/class, score, bbox)."""
        if isinstance(record, Prediction):
            return record
        if not isinstance(record, Mapping):
            raise TypeError(f"Unsupported prediction record: {record!r}")
        label = record.get("label", record.get("class"))
        if label is None:
            raise ValueError(f"Prediction record has no label: {record!r}")
        bbox = record.get("bbox")
        return cls(
            label=str(label),
            score=float(record.get("score", 0.0)),
            bbox=_coerce_bbox(bbox),
        )


def _coerce_bbox(bbox: Sequence[float] | None) -> BoundingBox | None:
    if bbox is None:
        return None
    values = [float(v) for v in bbox]
    if len(values) != 4:
        raise ValueError(f"Bounding box needs 4 values (x, y, w, h), got {len(values)}")
    return values[0], values[1], values[2], values[3]
