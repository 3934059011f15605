"""
File input handler for validation and normalization.

Checks the shape of file inputs handed to the builder, tells remote URLs
apart from local content, and turns inputs into uploadable bytes. Reading and
downloading only happen in process_file_input, which the builder calls at
execution time.
"""
import asyncio
import logging
import os
from pathlib import Path, PurePosixPath
from typing import Any, Optional
from urllib.parse import urlparse

import httpx

from nutrient_dws.core.config import settings
from nutrient_dws.core.error_handling import ValidationError
from nutrient_dws.models.file_inputs import (
    BufferInput,
    FilePathInput,
    NormalizedFileData,
    UrlInput,
)

logger = logging.getLogger(__name__)


def is_url(value: str) -> bool:
    """Check whether a string is an http(s) URL."""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _is_file_like(value: Any) -> bool:
    return callable(getattr(value, "read", None))


def validate_file_input(value: Any) -> bool:
    """Check that a value is an accepted file input representation."""
    if isinstance(value, str):
        return len(value) > 0
    if isinstance(value, (bytes, bytearray, memoryview, os.PathLike)):
        return True
    if isinstance(value, (FilePathInput, BufferInput, UrlInput)):
        return True
    return _is_file_like(value)


def is_remote_file_input(value: Any) -> bool:
    """Check whether an input refers to a remote URL."""
    if isinstance(value, UrlInput):
        return True
    return isinstance(value, str) and is_url(value)


def get_remote_url(value: Any) -> str:
    """Return the URL carried by a remote input."""
    return value.url if isinstance(value, UrlInput) else value


async def process_file_input(value: Any) -> NormalizedFileData:
    """Normalize a file input into uploadable bytes.

    May read from disk or download from the network.

    Args:
        value: Any input accepted by validate_file_input

    Returns:
        NormalizedFileData with content, filename and optional content type

    Raises:
        ValidationError: If the input is invalid, missing or cannot be fetched
    """
    if isinstance(value, str):
        if is_url(value):
            return await _process_url_input(value)
        return await _process_file_path_input(value)

    if isinstance(value, UrlInput):
        return await _process_url_input(value.url)

    if isinstance(value, FilePathInput):
        return await _process_file_path_input(value.path)

    if isinstance(value, os.PathLike):
        return await _process_file_path_input(value)

    if isinstance(value, BufferInput):
        return NormalizedFileData(data=bytes(value.data), filename=value.filename)

    if isinstance(value, (bytes, bytearray, memoryview)):
        return NormalizedFileData(data=bytes(value), filename="buffer")

    if _is_file_like(value):
        return await _process_stream_input(value)

    raise ValidationError("Invalid file input provided", details={"input": repr(value)})


async def _process_file_path_input(file_path) -> NormalizedFileData:
    path = Path(file_path)
    if not path.is_file():
        raise ValidationError(f"File not found: {file_path}", details={"file_path": str(file_path)})

    try:
        data = await asyncio.to_thread(path.read_bytes)
    except OSError as e:
        raise ValidationError(
            f"Failed to read file: {file_path}",
            details={"file_path": str(file_path), "error": str(e)}
        ) from e

    logger.debug(f"Read file input {path.name} ({len(data)} bytes)")
    return NormalizedFileData(data=data, filename=path.name)


async def _process_stream_input(stream) -> NormalizedFileData:
    try:
        data = await asyncio.to_thread(stream.read)
    except OSError as e:
        raise ValidationError("Failed to read stream input", details={"error": str(e)}) from e

    if isinstance(data, str):
        data = data.encode("utf-8")

    name = getattr(stream, "name", None)
    filename = Path(name).name if isinstance(name, str) and name else "stream"
    return NormalizedFileData(data=bytes(data), filename=filename)


async def _process_url_input(url: str) -> NormalizedFileData:
    try:
        async with httpx.AsyncClient(
            timeout=settings.HTTP_DOWNLOAD_TIMEOUT,
            follow_redirects=True
        ) as client:
            response = await client.get(url)
    except httpx.HTTPError as e:
        raise ValidationError(
            f"Failed to fetch URL: {url}",
            details={"url": url, "error": str(e)}
        ) from e

    if response.is_error:
        raise ValidationError(
            f"Failed to fetch URL: {response.status_code} {response.reason_phrase}",
            details={"url": url, "status": response.status_code}
        )

    logger.debug(f"Downloaded {url} ({len(response.content)} bytes)")
    return NormalizedFileData(
        data=response.content,
        filename=_get_filename_from_url(url) or "download",
        content_type=response.headers.get("content-type"),
    )


def _get_filename_from_url(url: str) -> Optional[str]:
    name = PurePosixPath(urlparse(url).path).name
    return name or None
