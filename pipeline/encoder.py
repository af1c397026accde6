from codec.base import ImageCodec
from exceptions import EncodeError
from schemas import EncodedCandidate
from utils.format_detect import ImageFormat
from utils.logging import get_logger

logger = get_logger("pipeline.encoder")


class SinglePassEncoder:
    """One resize + encode through the codec.

    This is the expensive step (cost grows with pixel count); callers are
    expected to invoke it as few times as possible.
    """

    def __init__(self, codec: ImageCodec):
        self.codec = codec
        self.calls = 0

    def encode(
        self,
        source: bytes,
        width: int,
        height: int,
        quality: float,
        fmt: ImageFormat = ImageFormat.JPEG,
    ) -> EncodedCandidate:
        """Encode the source at the given size and quality.

        Decode failures from the codec propagate untouched; no retry.

        Raises:
            DecodeError: Source could not be decoded (fatal for the request).
            EncodeError: Codec failed or produced no output.
        """
        self.calls += 1
        data = self.codec.resize_and_encode(source, width, height, quality, fmt)
        if not data:
            raise EncodeError(
                f"Codec produced empty output at quality {quality}",
                quality=quality,
                width=width,
                height=height,
            )

        logger.debug(
            f"Encoded {width}x{height} at q={quality:.2f}: {len(data)} bytes",
            extra={"context": {"width": width, "height": height,
                               "quality": quality, "size": len(data)}},
        )
        return EncodedCandidate(
            data=data,
            byte_size=len(data),
            width=width,
            height=height,
            quality_used=quality,
        )
