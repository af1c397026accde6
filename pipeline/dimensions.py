import math

from exceptions import InvalidImageDimensionsError


def _round_half_up(value: float) -> int:
    """Round half away from zero (inputs here are always positive)."""
    return int(math.floor(value + 0.5))


def plan_dimensions(
    source_width: int,
    source_height: int,
    max_width: int,
    max_height: int,
) -> tuple[int, int]:
    """Fit source dimensions inside a bounding box, preserving aspect ratio.

    Width is clamped first, then height is clamped independently. The
    second clamp only ever shrinks, so extreme aspect ratios still satisfy
    both bounds. Sources that already fit pass through unchanged; the
    planner never upscales.

    Args:
        source_width: Source width in pixels.
        source_height: Source height in pixels.
        max_width: Bounding box width.
        max_height: Bounding box height.

    Returns:
        (width, height), each >= 1.

    Raises:
        InvalidImageDimensionsError: Source width or height is <= 0.
        ValueError: Bounding box is not positive.
    """
    if source_width <= 0 or source_height <= 0:
        raise InvalidImageDimensionsError(
            f"Invalid source dimensions {source_width}x{source_height}",
            width=source_width,
            height=source_height,
        )
    if max_width <= 0 or max_height <= 0:
        raise ValueError(f"Bounding box must be positive, got {max_width}x{max_height}")

    aspect = source_width / source_height
    width, height = source_width, source_height

    if width > max_width:
        width = max_width
        height = max(1, _round_half_up(width / aspect))

    if height > max_height:
        height = max_height
        width = max(1, _round_half_up(height * aspect))

    return width, height
