from __future__ import annotations

from pathlib import Path

import torch

from media_pipeline.core.model_capability import PredictCapability


class TorchPredictor(PredictCapability):
    """Predict capability over a torch module fed with (1, H, W, 3) tensors."""

    def __init__(
        self,
        module: torch.nn.Module,
        device: str = "cpu",
        channels_first: bool = False,
        softmax: bool = False,
    ) -> None:
        self.device = torch.device(device)
        self.module = module.to(self.device)
        self.module.eval()
        self.channels_first = channels_first
        self.softmax = softmax

    def predict(self, tensor: torch.Tensor) -> torch.Tensor:
        inputs = tensor.to(self.device)
        if self.channels_first:
            inputs = inputs.permute(0, 3, 1, 2).contiguous()
        with torch.no_grad():
            output = self.module(inputs)
            if self.softmax:
                output = torch.softmax(output, dim=-1)
        return output.cpu()


def load_torchscript_model(path: str | Path, device: str = "cpu", **kwargs) -> TorchPredictor:
    """Load a TorchScript archive from disk and wrap it as a predict capability."""
    model_path = Path(path)
    if not model_path.exists():
        raise FileNotFoundError(f"Model file not found: {model_path}")
    module = torch.jit.load(str(model_path), map_location=device)
    return TorchPredictor(module, device=device, **kwargs)
