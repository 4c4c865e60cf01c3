from __future__ import annotations

import pytest

from media_pipeline.core.prediction import Prediction


def test_prediction_from_detector_record_accepts_class_key() -> None:
    prediction = Prediction.from_record({"class": "person", "score": 0.91, "bbox": [1, 2, 30, 40]})

    assert prediction.label == "person"
    assert prediction.score == pytest.approx(0.91)
    assert prediction.bbox == (1.0, 2.0, 30.0, 40.0)


def test_prediction_from_record_passes_predictions_through() -> None:
    original = Prediction("cat", 0.5)

    assert Prediction.from_record(original) is original


def test_prediction_rejects_out_of_range_scores_and_bad_boxes() -> None:
    with pytest.raises(ValueError, match="within"):
        Prediction("cat", 1.5)
    with pytest.raises(ValueError, match="4 values"):
        Prediction.from_record({"label": "cat", "score": 0.5, "bbox": [1, 2, 3]})
    with pytest.raises(ValueError, match="no label"):
        Prediction.from_record({"score": 0.5})


def test_prediction_display_text_uses_one_decimal_percent() -> None:
    assert Prediction("dog", 0.875).display_text() == "dog (87.5%)"
    assert Prediction("cat", 0.5).display_text() == "cat (50.0%)"
