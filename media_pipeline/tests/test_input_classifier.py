from __future__ import annotations

import pytest

from media_pipeline.application.input_classifier import InputClassifier, classify, detect_kind
from media_pipeline.core.inference_request import InferenceOptions
from media_pipeline.core.input_descriptor import BytesDescriptor, PathDescriptor
from media_pipeline.core.media_resource import MediaResource
from media_pipeline.enums import MediaKind
from media_pipeline.errors import DecodeError, MissingInput, UnsupportedInputKind
from media_fixtures import make_image_bytes, make_resource, make_tiff_stack


class RecordingExtractor:
    """Stands in for FrameExtractor, returning one frame per call."""

    instances: list["RecordingExtractor"] = []

    def __init__(self, timeout_s: float | None = None) -> None:
        self.timeout_s = timeout_s
        self.calls: list[tuple[str, float]] = []
        RecordingExtractor.instances.append(self)

    async def extract_frames(self, descriptor, fps: float) -> list[MediaResource]:
        self.calls.append((descriptor.name, fps))
        return [make_resource(name=f"{descriptor.name}_frame_0.png")]


@pytest.mark.parametrize(
    "name, declared_type, expected",
    [
        ("scan.tif", "image/tiff", MediaKind.STACK),
        ("SCAN.TIFF", "video/mp4", MediaKind.STACK),
        ("scan.tiff", None, MediaKind.STACK),
        ("photo.png", "image/png", MediaKind.IMAGE),
        ("photo", "IMAGE/JPEG", MediaKind.IMAGE),
        ("clip.mp4", "video/mp4", MediaKind.VIDEO),
    ],
)
def test_detect_kind_prefers_stack_extension_over_declared_type(name, declared_type, expected) -> None:
    assert detect_kind(BytesDescriptor(name, declared_type, b"")) is expected


@pytest.mark.asyncio
async def test_classify_png_returns_single_resource(png_descriptor) -> None:
    result = await classify(png_descriptor)

    assert isinstance(result, MediaResource)
    assert result.kind is MediaKind.IMAGE
    assert (result.width, result.height) == (40, 30)
    assert result.media_type == "image/png"
    assert result.extension == "png"
    assert result.predictions is None


@pytest.mark.asyncio
async def test_classify_rejects_unsupported_type_naming_the_file() -> None:
    descriptor = BytesDescriptor("report.pdf", "application/pdf", b"%PDF-1.4")

    with pytest.raises(UnsupportedInputKind) as excinfo:
        await classify(descriptor)

    assert "report.pdf" in str(excinfo.value)


@pytest.mark.asyncio
async def test_classify_without_input_raises_missing_input() -> None:
    with pytest.raises(MissingInput):
        await classify(None)


@pytest.mark.asyncio
async def test_classify_tiff_returns_stack_in_page_order() -> None:
    data = make_tiff_stack([(10, 8), (12, 9), (14, 10)])
    descriptor = BytesDescriptor("scan.tiff", "image/tiff", data)

    result = await classify(descriptor)

    assert result.kind is MediaKind.STACK
    assert result.page_count == 3
    assert [frame.name for frame in result] == [f"scan.tiff_page_{i}.png" for i in range(3)]
    assert [(frame.width, frame.height) for frame in result] == [(10, 8), (12, 9), (14, 10)]
    assert all(frame.media_type == "image/png" for frame in result)
    assert result.source is descriptor


@pytest.mark.asyncio
async def test_classify_corrupt_tiff_raises_decode_error() -> None:
    with pytest.raises(DecodeError, match="broken.tif"):
        await classify(BytesDescriptor("broken.tif", "image/tiff", b"not a tiff"))


@pytest.mark.asyncio
async def test_classify_video_uses_extractor_with_request_fps() -> None:
    RecordingExtractor.instances.clear()
    classifier = InputClassifier(frame_extractor_factory=RecordingExtractor)
    options = InferenceOptions(fps=2.0, extraction_timeout_s=3.0)

    result = await classifier.classify(BytesDescriptor("clip.mp4", "video/mp4", b"\x00"), options)

    assert result.kind is MediaKind.VIDEO
    assert result.fps == 2.0
    assert len(result) == 1
    extractor = RecordingExtractor.instances[-1]
    assert extractor.timeout_s == 3.0
    assert extractor.calls == [("clip.mp4", 2.0)]


@pytest.mark.asyncio
async def test_classify_reads_path_descriptor(tmp_path) -> None:
    path = tmp_path / "local.jpg"
    path.write_bytes(make_image_bytes(16, 12, suffix=".jpg"))

    result = await classify(PathDescriptor(path))

    assert result.kind is MediaKind.IMAGE
    assert result.media_type == "image/jpeg"
    assert (result.width, result.height) == (16, 12)
