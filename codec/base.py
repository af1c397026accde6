from abc import ABC, abstractmethod

from utils.format_detect import ImageFormat


class ImageCodec(ABC):
    """Decode/resize/encode capability driven by the pipeline.

    Implementations are stateless and may be called from several worker
    threads at once.
    """

    @abstractmethod
    def decode_dimensions(self, data: bytes) -> tuple[int, int]:
        """Return the (width, height) of the source as displayed.

        Raises:
            UnsupportedImageFormatError: Bytes are not a readable image format.
            DecodeError: Header is present but unreadable.
        """

    @abstractmethod
    def resize_and_encode(
        self,
        data: bytes,
        width: int,
        height: int,
        quality: float,
        fmt: ImageFormat,
    ) -> bytes:
        """Resize the source to exactly (width, height) and encode it.

        Args:
            data: Raw source bytes.
            width: Output width in pixels.
            height: Output height in pixels.
            quality: Lossy quality factor in (0, 1].
            fmt: Output format.

        Returns:
            Encoded image bytes.

        Raises:
            DecodeError: Source could not be decoded.
            EncodeError: Output could not be produced.
        """
