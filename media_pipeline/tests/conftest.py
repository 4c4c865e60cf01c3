from __future__ import annotations

from pathlib import Path

import pytest

from media_pipeline.core.input_descriptor import BytesDescriptor
from media_fixtures import make_image_bytes, make_video_bytes


@pytest.fixture
def png_descriptor() -> BytesDescriptor:
    return BytesDescriptor("photo.png", "image/png", make_image_bytes(40, 30, (10, 200, 30)))


@pytest.fixture
def video_bytes(tmp_path: Path) -> bytes:
    return make_video_bytes(tmp_path)
