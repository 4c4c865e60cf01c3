from __future__ import annotations

import pytest
import torch

from media_pipeline.application.inference_dispatcher import run_inference
from media_pipeline.infrastructure.torch_predictor import TorchPredictor, load_torchscript_model
from media_fixtures import make_resource


class _TinyClassifier(torch.nn.Module):
    def __init__(self) -> None:
        super().__init__()
        self.head = torch.nn.Linear(3, 2)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return self.head(x.mean(dim=[1, 2]))


def _save_scripted(tmp_path) -> str:
    path = tmp_path / "tiny.pt"
    torch.jit.script(_TinyClassifier()).save(str(path))
    return str(path)


def test_load_torchscript_model_produces_probabilities(tmp_path) -> None:
    predictor = load_torchscript_model(_save_scripted(tmp_path), softmax=True)

    output = predictor.predict(torch.zeros((1, 4, 4, 3)))

    assert output.shape == (1, 2)
    assert float(output.sum()) == pytest.approx(1.0, abs=1e-5)


def test_load_torchscript_model_missing_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_torchscript_model(tmp_path / "absent.pt")


def test_channels_first_permutes_input() -> None:
    seen: list[tuple[int, ...]] = []

    class _Recorder(torch.nn.Module):
        def forward(self, x: torch.Tensor) -> torch.Tensor:
            seen.append(tuple(x.shape))
            return x.flatten(1)[:, :2]

    TorchPredictor(_Recorder(), channels_first=True).predict(torch.zeros((1, 5, 6, 3)))

    assert seen == [(1, 3, 5, 6)]


@pytest.mark.asyncio
async def test_torchscript_model_classifies_resource(tmp_path) -> None:
    predictor = load_torchscript_model(_save_scripted(tmp_path), softmax=True)

    result = await run_inference(
        "classification",
        make_resource(color=(120, 30, 200)),
        predictor,
        {"labels": ["warm", "cool"], "target_width": 8, "target_height": 8},
    )

    assert {p.label for p in result.predictions} == {"warm", "cool"}
    assert result.predictions[0].score >= result.predictions[1].score
    assert sum(p.score for p in result.predictions) == pytest.approx(1.0, abs=1e-5)
