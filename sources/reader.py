import asyncio
import binascii
import os
from base64 import b64decode
from pathlib import Path
from typing import Any
from urllib.parse import unquote, unquote_to_bytes, urlparse

from config import settings
from exceptions import FileTooLargeError, SourceReadError
from schemas import SourceImage
from utils.url_fetch import fetch_image


def describe_reference(ref: Any) -> str:
    """Short printable description of a reference for logs and results."""
    if isinstance(ref, SourceImage):
        return ref.reference
    if isinstance(ref, (bytes, bytearray, memoryview)):
        return f"<bytes len={len(ref)}>"
    if isinstance(ref, os.PathLike):
        return os.fspath(ref)
    if isinstance(ref, str):
        return ref[:64] + "..." if ref.startswith("data:") else ref
    name = getattr(ref, "name", None)
    if isinstance(name, str):
        return name
    return f"<{type(ref).__name__}>"


class SourceReader:
    """Resolves an image reference to raw bytes and a byte size.

    Supported references:
    - bytes / bytearray / memoryview
    - binary file-like objects (anything with ``read()``)
    - pathlib.Path or plain path strings
    - ``file://``, ``data:`` (base64 or percent-encoded) and ``http(s)://`` URIs
    - an already-read SourceImage (returned as is)

    The size is the pre-known size (``stat()``) where the reference has
    one, otherwise the length of the bytes read.
    """

    async def read(self, ref: Any) -> SourceImage:
        """Read a reference.

        Raises:
            SourceReadError: Reference unreadable or of an unknown kind.
            URLFetchError: Remote fetch failed.
            FileTooLargeError: Source exceeds max_file_size_mb.
        """
        if isinstance(ref, SourceImage):
            return ref

        reference = describe_reference(ref)

        if isinstance(ref, (bytes, bytearray, memoryview)):
            data = bytes(ref)
            size = len(data)
        elif isinstance(ref, (str, os.PathLike)):
            data, size = await self._read_location(ref)
        elif hasattr(ref, "read"):
            data = await asyncio.to_thread(ref.read)
            if not isinstance(data, (bytes, bytearray)):
                raise SourceReadError(
                    "File-like source must be opened in binary mode",
                    reference=reference,
                )
            data = bytes(data)
            size = len(data)
        else:
            raise SourceReadError(
                f"Unsupported image reference type: {type(ref).__name__}",
                reference=reference,
            )

        self._check_size(size, reference)
        return SourceImage(data=data, size_bytes=size, reference=reference)

    async def size(self, ref: Any) -> int:
        """Byte size of a reference, without reading local files."""
        if isinstance(ref, SourceImage):
            return ref.size_bytes
        if isinstance(ref, (bytes, bytearray, memoryview)):
            return len(ref)
        path = self._local_path(ref)
        if path is not None:
            return await asyncio.to_thread(self._stat_size, path)
        return (await self.read(ref)).size_bytes

    async def _read_location(self, ref: str | os.PathLike) -> tuple[bytes, int]:
        if isinstance(ref, str):
            scheme = urlparse(ref).scheme.lower()
            if scheme in ("http", "https"):
                data = await fetch_image(ref)
                return data, len(data)
            if scheme == "data":
                data = self._decode_data_uri(ref)
                return data, len(data)

        path = self._local_path(ref)
        if path is None:
            raise SourceReadError(
                f"Unsupported URI scheme: '{urlparse(ref).scheme}'",
                reference=describe_reference(ref),
            )
        data = await asyncio.to_thread(self._read_file, path)
        return data, len(data)

    def _local_path(self, ref: Any) -> Path | None:
        """Path for file references, None for anything else."""
        if isinstance(ref, os.PathLike):
            return Path(ref)
        if not isinstance(ref, str):
            return None
        parsed = urlparse(ref)
        if parsed.scheme.lower() == "file":
            return Path(unquote(parsed.path))
        # Windows drive letters parse as a one-letter scheme
        if parsed.scheme and len(parsed.scheme) > 1:
            return None
        return Path(ref)

    def _read_file(self, path: Path) -> bytes:
        size = self._stat_size(path)
        self._check_size(size, str(path))
        try:
            return path.read_bytes()
        except OSError as e:
            raise SourceReadError(f"Cannot read {path}: {e}", reference=str(path))

    def _stat_size(self, path: Path) -> int:
        try:
            return path.stat().st_size
        except OSError as e:
            raise SourceReadError(f"Cannot stat {path}: {e}", reference=str(path))

    def _decode_data_uri(self, uri: str) -> bytes:
        header, sep, payload = uri.partition(",")
        if not sep:
            raise SourceReadError("Malformed data URI: missing ','", reference=uri[:64])
        if header.endswith(";base64"):
            try:
                return b64decode(payload, validate=True)
            except binascii.Error as e:
                raise SourceReadError(f"Invalid base64 in data URI: {e}", reference=uri[:64])
        return unquote_to_bytes(payload)

    def _check_size(self, size: int, reference: str) -> None:
        if size > settings.max_file_size_bytes:
            raise FileTooLargeError(
                f"Source size {size} bytes exceeds limit of {settings.max_file_size_mb} MB",
                file_size=size,
                limit=settings.max_file_size_bytes,
                reference=reference,
            )


# Module-level singleton
source_reader = SourceReader()
