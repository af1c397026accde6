import io

import pillow_heif
from PIL import Image, ImageOps, UnidentifiedImageError

from codec.base import ImageCodec
from config import settings
from exceptions import DecodeError, EncodeError, UnsupportedImageFormatError
from utils.format_detect import OUTPUT_FORMATS, PILLOW_FORMATS, ImageFormat, detect_format

# Phone cameras hand us HEIC; let Image.open() read it.
pillow_heif.register_heif_opener()

# EXIF orientations that rotate by 90/270 degrees and so swap width/height
_TRANSPOSED_ORIENTATIONS = {5, 6, 7, 8}
_EXIF_ORIENTATION = 0x0112


def pillow_quality(quality: float) -> int:
    """Map a 0-1 quality factor to Pillow's 1-100 integer scale."""
    return max(1, min(100, round(quality * 100)))


class PillowCodec(ImageCodec):
    """Pillow-backed codec: LANCZOS resize, JPEG or WebP output.

    Pipeline per encode:
    1. Sniff magic bytes (unknown -> UnsupportedImageFormatError)
    2. Decode and apply EXIF orientation
    3. Flatten alpha / convert mode for the output format
    4. Resize to the planned dimensions
    5. Encode at the requested quality with optimize=True
    """

    def __init__(self, progressive: bool | None = None):
        self.progressive = settings.progressive_jpeg if progressive is None else progressive

    def decode_dimensions(self, data: bytes) -> tuple[int, int]:
        detect_format(data)
        try:
            img = Image.open(io.BytesIO(data))
            width, height = img.size
            orientation = img.getexif().get(_EXIF_ORIENTATION)
        except UnidentifiedImageError as e:
            raise UnsupportedImageFormatError(f"Cannot identify image: {e}")
        except Image.DecompressionBombError as e:
            raise DecodeError(f"Image exceeds pixel limit: {e}")
        except (OSError, ValueError, SyntaxError) as e:
            raise DecodeError(f"Failed to read image header: {e}")

        if orientation in _TRANSPOSED_ORIENTATIONS:
            return height, width
        return width, height

    def resize_and_encode(
        self,
        data: bytes,
        width: int,
        height: int,
        quality: float,
        fmt: ImageFormat,
    ) -> bytes:
        if fmt not in OUTPUT_FORMATS:
            raise EncodeError(f"Unsupported output format: {fmt}", format=str(fmt))

        img = self._prepare_mode(self._decode_image(data), fmt)

        if img.size != (width, height):
            img = img.resize((width, height), Image.Resampling.LANCZOS)

        try:
            return self._pillow_encode(img, quality, fmt)
        except (OSError, ValueError) as e:
            raise EncodeError(
                f"Failed to encode {fmt.value} at quality {quality}: {e}",
                quality=quality,
            )

    def _decode_image(self, data: bytes) -> Image.Image:
        """Fully decode the source and apply EXIF orientation."""
        detect_format(data)
        try:
            img = Image.open(io.BytesIO(data))
            img.load()
            return ImageOps.exif_transpose(img)
        except UnidentifiedImageError as e:
            raise UnsupportedImageFormatError(f"Cannot identify image: {e}")
        except Image.DecompressionBombError as e:
            raise DecodeError(f"Image exceeds pixel limit: {e}")
        except (OSError, ValueError, SyntaxError) as e:
            raise DecodeError(f"Failed to decode image: {e}")

    def _prepare_mode(self, img: Image.Image, fmt: ImageFormat) -> Image.Image:
        """Convert to a mode the output format can store."""
        has_alpha = img.mode in ("RGBA", "LA") or (
            img.mode == "P" and "transparency" in img.info
        )

        if fmt == ImageFormat.WEBP:
            if has_alpha:
                return img.convert("RGBA")
            return img if img.mode == "RGB" else img.convert("RGB")

        # JPEG has no alpha: flatten onto white
        if has_alpha:
            rgba = img.convert("RGBA")
            background = Image.new("RGB", rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.getchannel("A"))
            return background
        if img.mode not in ("RGB", "L"):
            return img.convert("RGB")
        return img

    def _pillow_encode(self, img: Image.Image, quality: float, fmt: ImageFormat) -> bytes:
        buf = io.BytesIO()
        save_kwargs: dict = {
            "format": PILLOW_FORMATS[fmt],
            "quality": pillow_quality(quality),
        }
        if fmt == ImageFormat.JPEG:
            save_kwargs["optimize"] = True
            if self.progressive:
                save_kwargs["progressive"] = True
        else:
            save_kwargs["method"] = 4
        img.save(buf, **save_kwargs)
        return buf.getvalue()
