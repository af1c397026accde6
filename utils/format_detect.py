import struct
from enum import Enum

from exceptions import UnsupportedImageFormatError


class ImageFormat(str, Enum):
    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"
    GIF = "gif"
    BMP = "bmp"
    TIFF = "tiff"
    HEIC = "heic"
    AVIF = "avif"


# Formats the pipeline can write
OUTPUT_FORMATS = (ImageFormat.JPEG, ImageFormat.WEBP)

# Pillow save() format names
PILLOW_FORMATS = {
    ImageFormat.JPEG: "JPEG",
    ImageFormat.WEBP: "WEBP",
}

MIME_TYPES = {
    ImageFormat.JPEG: "image/jpeg",
    ImageFormat.PNG: "image/png",
    ImageFormat.WEBP: "image/webp",
    ImageFormat.GIF: "image/gif",
    ImageFormat.BMP: "image/bmp",
    ImageFormat.TIFF: "image/tiff",
    ImageFormat.HEIC: "image/heic",
    ImageFormat.AVIF: "image/avif",
}

EXTENSIONS = {
    ImageFormat.JPEG: "jpg",
    ImageFormat.WEBP: "webp",
}


def detect_format(data: bytes) -> ImageFormat:
    """Detect image format from magic bytes.

    Never trusts file extensions or Content-Type headers.

    Args:
        data: Raw image bytes (at least first 16 bytes needed).

    Returns:
        ImageFormat enum value.

    Raises:
        UnsupportedImageFormatError: If no known format matches.
    """
    if len(data) < 4:
        raise UnsupportedImageFormatError("File too small to identify format")

    # JPEG: \xFF\xD8\xFF
    if data[:3] == b"\xff\xd8\xff":
        return ImageFormat.JPEG

    # PNG: \x89PNG\r\n\x1a\n
    if data[:8] == b"\x89PNG\r\n\x1a\n":
        return ImageFormat.PNG

    # GIF: GIF87a or GIF89a
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return ImageFormat.GIF

    # WebP: RIFF....WEBP
    if data[:4] == b"RIFF" and len(data) >= 12 and data[8:12] == b"WEBP":
        return ImageFormat.WEBP

    # BMP: BM
    if data[:2] == b"BM":
        return ImageFormat.BMP

    # TIFF: II*\x00 (little-endian) or MM\x00* (big-endian)
    if data[:4] in (b"II\x2a\x00", b"MM\x00\x2a"):
        return ImageFormat.TIFF

    # AVIF / HEIC: ISO BMFF ftyp box
    if len(data) >= 12 and data[4:8] == b"ftyp":
        return _detect_isobmff(data)

    raise UnsupportedImageFormatError(
        "Unrecognized image format",
        detected_bytes=data[:16].hex(),
    )


def _detect_isobmff(data: bytes) -> ImageFormat:
    """Detect AVIF vs HEIC from the ISO BMFF ftyp box.

    Major brand sits at bytes 8-11; compatible brands follow the minor
    version at offset 16, four bytes each, up to the box size.
    """
    major_brand = data[8:12]

    if major_brand in (b"avif", b"avis"):
        return ImageFormat.AVIF

    if major_brand in (b"heic", b"heix", b"mif1"):
        return ImageFormat.HEIC

    box_size = struct.unpack(">I", data[:4])[0]
    box_end = min(box_size, len(data))
    offset = 16

    while offset + 4 <= box_end:
        compat_brand = data[offset : offset + 4]
        if compat_brand in (b"avif", b"avis"):
            return ImageFormat.AVIF
        if compat_brand in (b"heic", b"heix", b"mif1"):
            return ImageFormat.HEIC
        offset += 4

    raise UnsupportedImageFormatError(
        "ISO BMFF file with unrecognized brand",
        major_brand=major_brand.decode("ascii", errors="replace"),
    )
