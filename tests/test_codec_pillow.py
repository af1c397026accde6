"""Tests for the Pillow-backed codec."""

import io

import pytest
from PIL import Image

from codec.pillow import PillowCodec, pillow_quality
from conftest import make_jpeg, make_oversized_png, make_png
from exceptions import DecodeError, EncodeError, UnsupportedImageFormatError
from utils.format_detect import ImageFormat, detect_format


@pytest.fixture
def codec():
    return PillowCodec(progressive=False)


def _open(data: bytes) -> Image.Image:
    return Image.open(io.BytesIO(data))


def test_pillow_quality_mapping():
    assert pillow_quality(0.7) == 70
    assert pillow_quality(0.65) == 65
    assert pillow_quality(1.0) == 100
    assert pillow_quality(0.001) == 1


def test_decode_dimensions(codec):
    assert codec.decode_dimensions(make_jpeg(size=(120, 45))) == (120, 45)


def test_decode_dimensions_respects_exif_rotation(codec):
    img = Image.new("RGB", (120, 45), (10, 20, 30))
    exif = img.getexif()
    exif[0x0112] = 6  # rotate 90 CW on display
    buf = io.BytesIO()
    img.save(buf, format="JPEG", exif=exif.tobytes())
    assert codec.decode_dimensions(buf.getvalue()) == (45, 120)


def test_decode_dimensions_unsupported(codec):
    with pytest.raises(UnsupportedImageFormatError):
        codec.decode_dimensions(b"not an image at all")


def test_resize_and_encode_jpeg(codec):
    out = codec.resize_and_encode(make_jpeg(size=(200, 100)), 100, 50, 0.6, ImageFormat.JPEG)
    assert detect_format(out) == ImageFormat.JPEG
    assert _open(out).size == (100, 50)


def test_resize_and_encode_webp(codec):
    out = codec.resize_and_encode(make_png(size=(64, 64)), 32, 32, 0.6, ImageFormat.WEBP)
    assert detect_format(out) == ImageFormat.WEBP
    assert _open(out).size == (32, 32)


def test_rgba_flattened_for_jpeg(codec):
    source = make_png(size=(40, 40), mode="RGBA", color=(255, 0, 0, 0))
    out = codec.resize_and_encode(source, 40, 40, 0.8, ImageFormat.JPEG)
    img = _open(out)
    assert img.mode == "RGB"
    # Fully transparent pixels become white
    r, g, b = img.getpixel((20, 20))
    assert min(r, g, b) > 240


def test_lower_quality_is_smaller(codec):
    from benchmarks.generators import encode_image, photo_like

    source = encode_image(photo_like(300, 200), "jpeg", 95)
    high = codec.resize_and_encode(source, 300, 200, 0.9, ImageFormat.JPEG)
    low = codec.resize_and_encode(source, 300, 200, 0.3, ImageFormat.JPEG)
    assert len(low) < len(high)


def test_progressive_flag():
    out = PillowCodec(progressive=True).resize_and_encode(
        make_jpeg(size=(64, 64)), 64, 64, 0.7, ImageFormat.JPEG
    )
    assert _open(out).info.get("progressive") or _open(out).info.get("progression")


def test_truncated_jpeg_is_decode_error(codec):
    data = make_jpeg(size=(200, 200))
    with pytest.raises(DecodeError):
        codec.resize_and_encode(data[: len(data) // 2], 100, 100, 0.6, ImageFormat.JPEG)


def test_garbage_is_unsupported(codec):
    with pytest.raises(UnsupportedImageFormatError):
        codec.resize_and_encode(b"\x00\x01\x02\x03garbage", 10, 10, 0.6, ImageFormat.JPEG)


def test_non_output_format_rejected(codec):
    with pytest.raises(EncodeError, match="Unsupported output format"):
        codec.resize_and_encode(make_jpeg(), 10, 10, 0.6, ImageFormat.PNG)


def test_oversized_header_raises_decode_error(codec):
    data = make_oversized_png()
    with pytest.raises(DecodeError, match="pixel limit"):
        codec.decode_dimensions(data)
    with pytest.raises(DecodeError, match="pixel limit"):
        codec.resize_and_encode(data, 100, 100, 0.7, ImageFormat.JPEG)
