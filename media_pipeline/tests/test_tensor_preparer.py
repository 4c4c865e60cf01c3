from __future__ import annotations

import pytest
import torch

from media_pipeline.application.tensor_preparer import TensorPreparer, to_tensor
from media_pipeline.core.media_resource import MediaResource
from media_pipeline.errors import DecodeError
from media_fixtures import make_image_bytes, make_resource


@pytest.mark.asyncio
async def test_to_tensor_resizes_and_normalizes() -> None:
    resource = make_resource(width=40, height=30, color=(255, 0, 51))

    tensor = await to_tensor(resource, target_width=8, target_height=4)

    assert tensor.shape == (1, 4, 8, 3)
    assert tensor.dtype == torch.float32
    assert float(tensor[0, 0, 0, 0]) == pytest.approx(1.0)
    assert float(tensor[0, 0, 0, 1]) == pytest.approx(0.0)
    assert float(tensor[0, 0, 0, 2]) == pytest.approx(0.2)


@pytest.mark.asyncio
async def test_to_tensor_without_normalization_keeps_byte_range() -> None:
    resource = make_resource(color=(200, 100, 0))

    tensor = await to_tensor(resource, target_width=5, target_height=5, normalize=False)

    assert float(tensor.max()) == pytest.approx(200.0)


@pytest.mark.asyncio
async def test_to_tensor_returns_caller_owned_copies() -> None:
    preparer = TensorPreparer((6, 6))
    resource = make_resource()

    first = await preparer.to_tensor(resource)
    first.fill_(7.0)
    second = await preparer.to_tensor(resource)

    assert float(second.max()) == pytest.approx(0.0)


@pytest.mark.asyncio
async def test_to_tensor_tracks_replaced_content() -> None:
    preparer = TensorPreparer((4, 4))
    resource = make_resource(color=(0, 0, 0))
    assert float((await preparer.to_tensor(resource)).max()) == pytest.approx(0.0)

    resource.replace_content(make_image_bytes(32, 24, (255, 255, 255)), width=32, height=24)

    assert float((await preparer.to_tensor(resource)).min()) == pytest.approx(1.0)


@pytest.mark.asyncio
async def test_to_tensor_on_undecodable_bytes_raises_decode_error() -> None:
    resource = MediaResource(raw_bytes=b"\x89PNG garbage", media_type="image/png", name="bad.png")

    with pytest.raises(DecodeError):
        await to_tensor(resource)


def test_tensor_preparer_rejects_non_positive_size() -> None:
    with pytest.raises(ValueError):
        TensorPreparer((0, 10))
