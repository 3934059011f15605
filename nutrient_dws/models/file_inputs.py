"""
File input representations accepted by the builder.

Plain values are accepted too: a ``str`` is a file path or an http(s) URL,
``os.PathLike`` is a path, ``bytes``/``bytearray``/``memoryview`` are raw
content, and any binary file-like object with ``read()`` is read at
execution time.
"""
import os
from dataclasses import dataclass
from typing import BinaryIO, Optional, Union


@dataclass(frozen=True)
class FilePathInput:
    """Explicit reference to a local file."""

    path: Union[str, os.PathLike]


@dataclass(frozen=True)
class BufferInput:
    """In-memory content with the filename to upload it under."""

    data: bytes
    filename: str = "buffer"


@dataclass(frozen=True)
class UrlInput:
    """Remote file the service fetches itself."""

    url: str


@dataclass
class NormalizedFileData:
    """Transmittable form of a file input, produced at execution time."""

    data: bytes
    filename: str
    content_type: Optional[str] = None


FileInput = Union[
    str,
    os.PathLike,
    bytes,
    bytearray,
    memoryview,
    BinaryIO,
    FilePathInput,
    BufferInput,
    UrlInput,
]
