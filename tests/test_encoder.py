"""Tests for the single-pass encoder."""

import pytest

from conftest import FakeCodec, fake_image
from exceptions import DecodeError, EncodeError, UnsupportedImageFormatError
from pipeline.encoder import SinglePassEncoder
from utils.format_detect import ImageFormat


def test_encode_returns_candidate(encoder, fake_codec):
    candidate = encoder.encode(fake_image(800, 600), 400, 300, 0.7)
    assert candidate.width == 400
    assert candidate.height == 300
    assert candidate.quality_used == 0.7
    assert candidate.byte_size == len(candidate.data) == 42000
    assert fake_codec.calls == [(400, 300, 0.7, ImageFormat.JPEG)]


def test_encode_counts_calls(encoder):
    encoder.encode(fake_image(800, 600), 400, 300, 0.7)
    encoder.encode(fake_image(800, 600), 400, 300, 0.6)
    assert encoder.calls == 2


def test_encode_passes_format_through(encoder, fake_codec):
    encoder.encode(fake_image(800, 600), 400, 300, 0.7, ImageFormat.WEBP)
    assert fake_codec.calls[0][3] == ImageFormat.WEBP


def test_decode_error_propagates(encoder):
    with pytest.raises(UnsupportedImageFormatError):
        encoder.encode(b"garbage bytes", 10, 10, 0.5)


def test_unsupported_format_is_a_decode_error(encoder):
    with pytest.raises(DecodeError):
        encoder.encode(b"garbage bytes", 10, 10, 0.5)


def test_empty_codec_output_raises_encode_error():
    encoder = SinglePassEncoder(FakeCodec(size_fn=lambda w, h, q: 0))
    with pytest.raises(EncodeError, match="empty output") as exc_info:
        encoder.encode(fake_image(10, 10), 10, 10, 0.5)
    assert exc_info.value.details["quality"] == 0.5
