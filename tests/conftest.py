import io
import struct
import threading
import time
import zlib

import pytest
from PIL import Image

from codec.base import ImageCodec
from exceptions import UnsupportedImageFormatError
from pipeline.encoder import SinglePassEncoder
from pipeline.facade import ImageOptimizer
from sources.reader import SourceReader


def fake_image(width: int, height: int, padding: int = 0) -> bytes:
    """Source bytes understood by FakeCodec: 'FAKE:<w>x<h>;' plus padding."""
    return f"FAKE:{width}x{height};".encode() + b"\x00" * padding


class FakeCodec(ImageCodec):
    """Deterministic codec: output size is size_fn(width, height, quality).

    Records every encode as (width, height, quality, fmt). Sources that do
    not start with 'FAKE:' are rejected as unsupported.
    """

    def __init__(self, size_fn=None, delay: float = 0.0):
        self.size_fn = size_fn or (lambda w, h, q: int(w * h * q * 0.5))
        self.delay = delay
        self.calls = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def decode_dimensions(self, data: bytes) -> tuple[int, int]:
        if not data.startswith(b"FAKE:"):
            raise UnsupportedImageFormatError("Not a fake image")
        dims = data[5 : data.index(b";")].decode()
        width, height = dims.split("x")
        return int(width), int(height)

    def resize_and_encode(self, data, width, height, quality, fmt) -> bytes:
        self.decode_dimensions(data)
        with self._lock:
            self.calls.append((width, height, quality, fmt))
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                time.sleep(self.delay)
            return b"\xff" * self.size_fn(width, height, quality)
        finally:
            with self._lock:
                self.active -= 1

    @property
    def qualities(self) -> list[float]:
        return [call[2] for call in self.calls]


def make_jpeg(size=(100, 80), quality=85, color=(128, 64, 32)) -> bytes:
    img = Image.new("RGB", size, color)
    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=quality)
    return buf.getvalue()


def make_png(size=(100, 80), mode="RGB", color=(128, 64, 32)) -> bytes:
    img = Image.new(mode, size, color)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def _png_chunk(tag: bytes, payload: bytes) -> bytes:
    return struct.pack(">I", len(payload)) + tag + payload + struct.pack(">I", zlib.crc32(tag + payload))


def make_oversized_png(width=60000, height=60000) -> bytes:
    """Tiny PNG whose IHDR claims width x height RGB pixels (no real pixel data)."""
    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", ihdr)
        + _png_chunk(b"IDAT", zlib.compress(b"\x00"))
        + _png_chunk(b"IEND", b"")
    )


@pytest.fixture
def fake_codec():
    return FakeCodec()


@pytest.fixture
def encoder(fake_codec):
    return SinglePassEncoder(fake_codec)


@pytest.fixture
def optimizer(fake_codec):
    """ImageOptimizer on the fake codec and the default reader."""
    return ImageOptimizer(codec=fake_codec, reader=SourceReader())


@pytest.fixture
def sample_jpeg():
    return make_jpeg()


@pytest.fixture
def corrupt_bytes():
    return b"this is definitely not an image" * 4
