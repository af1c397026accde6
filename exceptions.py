class FitpixError(Exception):
    """Base exception for all fitpix errors."""

    error_code: str = "internal_error"

    def __init__(self, message: str, **kwargs):
        self.message = message
        self.details = kwargs
        super().__init__(message)


class InvalidImageDimensionsError(FitpixError):
    """Source reports a zero or negative width/height."""

    error_code = "invalid_image_dimensions"


class DecodeError(FitpixError):
    """Codec could not read the source image."""

    error_code = "decode_error"


class UnsupportedImageFormatError(DecodeError):
    """Source bytes are not an image format the codec understands."""

    error_code = "unsupported_format"


class EncodeError(FitpixError):
    """Codec failed to produce output at the requested quality."""

    error_code = "encode_error"


class SourceReadError(FitpixError):
    """Image reference could not be resolved to bytes."""

    error_code = "source_read_failed"


class URLFetchError(SourceReadError):
    """Failed to fetch image from URL."""

    error_code = "url_fetch_failed"


class FileTooLargeError(FitpixError):
    """Source exceeds maximum allowed size."""

    error_code = "file_too_large"


class StorageError(FitpixError):
    """Blob store upload failed."""

    error_code = "storage_failed"
