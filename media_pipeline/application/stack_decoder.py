from __future__ import annotations

import asyncio
import io

import PIL.Image
import PIL.ImageSequence
from PIL import UnidentifiedImageError

from media_pipeline.core.input_descriptor import InputDescriptor
from media_pipeline.core.media_collection import MediaCollection
from media_pipeline.core.media_resource import MediaResource
from media_pipeline.errors import DecodeError
from logger.filtered_logger import LogChannel, info as log_info


def _split_pages(data: bytes, name: str) -> list[tuple[bytes, int, int]]:
    """Return (png_bytes, width, height) for every page of a multi-page image."""
    try:
        img = PIL.Image.open(io.BytesIO(data))
    except (UnidentifiedImageError, OSError) as exc:
        raise DecodeError(name, f"unknown format or invalid data: {exc}") from exc

    pages: list[tuple[bytes, int, int]] = []
    with img:
        try:
            for page in PIL.ImageSequence.Iterator(img):
                rgb = page.convert("RGB")
                buffer = io.BytesIO()
                rgb.save(buffer, format="PNG")
                pages.append((buffer.getvalue(), rgb.width, rgb.height))
        except OSError as exc:
            raise DecodeError(name, f"corrupt page {len(pages)}: {exc}") from exc
    return pages


async def decode_stack(descriptor: InputDescriptor) -> MediaCollection:
    """Decode every page of a multi-page image (TIFF) into PNG frames, in page order."""
    name = descriptor.name
    data = await descriptor.read_bytes()
    pages = await asyncio.to_thread(_split_pages, data, name)
    frames = [
        MediaResource(
            raw_bytes=png,
            media_type="image/png",
            name=f"{name}_page_{index}.png",
            extension="png",
            width=width,
            height=height,
        )
        for index, (png, width, height) in enumerate(pages)
    ]
    log_info(LogChannel.INGEST, f"Decoded {len(frames)} pages from {name}")
    return MediaCollection.stack(name, frames, source=descriptor)
