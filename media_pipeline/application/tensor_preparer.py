from __future__ import annotations

import asyncio
from typing import Tuple

import cv2
import numpy as np
import torch

from media_pipeline.core.media_resource import MediaResource
from logger.filtered_logger import LogChannel, debug as log_debug


TENSOR_KEY = "tensor"


class TensorPreparer:
    """Builds model input tensors of shape (1, H, W, 3) from any MediaResource."""

    def __init__(self, target_size: Tuple[int, int] = (224, 224), normalize: bool = True):
        self.target_height, self.target_width = target_size
        if self.target_height <= 0 or self.target_width <= 0:
            raise ValueError("target dimensions must be positive integers")
        self.normalize = normalize

    async def to_tensor(self, resource: MediaResource) -> torch.Tensor:
        """Return a caller-owned float32 tensor; the resize is cached per resource generation."""
        key = (TENSOR_KEY, self.target_width, self.target_height, self.normalize)
        cached = resource.cache.get(key)
        if cached is not None:
            return cached.clone()

        pixels = await resource.decoded_pixels()
        generation = resource.generation
        tensor = await asyncio.to_thread(self._prepare, pixels)
        resource.cache.put(key, tensor, generation=generation)
        log_debug(
            LogChannel.INFERENCE,
            f"Prepared tensor {tuple(tensor.shape)} for {resource.name} at generation {generation}",
        )
        return tensor.clone()

    def _prepare(self, pixels: np.ndarray) -> torch.Tensor:
        resized = cv2.resize(pixels, (self.target_width, self.target_height), interpolation=cv2.INTER_LINEAR)
        values = resized.astype(np.float32)
        del resized
        if self.normalize:
            values *= 1.0 / 255.0
        with torch.no_grad():
            return torch.from_numpy(values).unsqueeze(0).contiguous()


async def to_tensor(
    resource: MediaResource,
    *,
    target_width: int = 224,
    target_height: int = 224,
    normalize: bool = True,
) -> torch.Tensor:
    return await TensorPreparer((target_height, target_width), normalize=normalize).to_tensor(resource)
