from __future__ import annotations

import asyncio
import mimetypes
from abc import ABC, abstractmethod
from pathlib import Path


class InputDescriptor(ABC):
    """Anything that can hand over a named, typed byte buffer."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Display name, including the file extension when there is one."""

    @property
    @abstractmethod
    def declared_type(self) -> str:
        """Declared media type, e.g. ``image/png``; empty when unknown."""

    @abstractmethod
    async def read_bytes(self) -> bytes:
        """Return the full content."""

    @property
    def extension(self) -> str:
        return extract_extension(self.name)


class BytesDescriptor(InputDescriptor):
    """In-memory descriptor; also used as the virtual file handle of a MediaResource."""

    def __init__(self, name: str, declared_type: str, data: bytes) -> None:
        self._name = name
        self._declared_type = declared_type or ""
        self._data = bytes(data)

    @property
    def name(self) -> str:
        return self._name

    @property
    def declared_type(self) -> str:
        return self._declared_type

    @property
    def size(self) -> int:
        return len(self._data)

    async def read_bytes(self) -> bytes:
        return self._data

    def __repr__(self) -> str:
        return f"BytesDescriptor(name={self._name!r}, declared_type={self._declared_type!r}, size={len(self._data)})"


class PathDescriptor(InputDescriptor):
    """Descriptor over a file on disk; the media type is guessed from the suffix when omitted."""

    def __init__(self, path: str | Path, declared_type: str | None = None) -> None:
        self.path = Path(path)
        if declared_type is None:
            declared_type, _ = mimetypes.guess_type(self.path.name)
        self._declared_type = declared_type or ""

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def declared_type(self) -> str:
        return self._declared_type

    async def read_bytes(self) -> bytes:
        return await asyncio.to_thread(self.path.read_bytes)

    def __repr__(self) -> str:
        return f"PathDescriptor(path={str(self.path)!r}, declared_type={self._declared_type!r})"


def extract_extension(name: str) -> str:
    """Return the lower-cased text after the last dot, or '' when the name has none."""
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[-1].lower()
