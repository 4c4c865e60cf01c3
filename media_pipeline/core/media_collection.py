from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterator, Sequence

from media_pipeline.core.media_resource import MediaResource
from media_pipeline.enums import MediaKind


@dataclass(frozen=True)
class MediaCollection:
    """Ordered frames that share one origin (a video or a multi-page stack).

    Frame order is the extraction/decode order and is preserved by ``with_frames``.
    """

    kind: MediaKind
    source_name: str
    frames: tuple[MediaResource, ...]
    fps: float | None = None
    page_count: int | None = None
    source: Any | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.kind not in (MediaKind.VIDEO, MediaKind.STACK):
            raise ValueError(f"MediaCollection kind must be VIDEO or STACK, got {self.kind}")
        object.__setattr__(self, "frames", tuple(self.frames))

    @classmethod
    def video(cls, source_name: str, frames: Sequence[MediaResource], fps: float, source: Any | None = None) -> MediaCollection:
        return cls(kind=MediaKind.VIDEO, source_name=source_name, frames=tuple(frames), fps=fps, source=source)

    @classmethod
    def stack(cls, source_name: str, frames: Sequence[MediaResource], source: Any | None = None) -> MediaCollection:
        return cls(
            kind=MediaKind.STACK,
            source_name=source_name,
            frames=tuple(frames),
            page_count=len(frames),
            source=source,
        )

    def with_frames(self, frames: Sequence[MediaResource]) -> MediaCollection:
        """Rebuild a collection of the same kind, keeping collection metadata unchanged."""
        return replace(self, frames=tuple(frames))

    def release(self) -> None:
        for frame in self.frames:
            frame.release()

    def __len__(self) -> int:
        return len(self.frames)

    def __iter__(self) -> Iterator[MediaResource]:
        return iter(self.frames)

    def __getitem__(self, index: int) -> MediaResource:
        return self.frames[index]
