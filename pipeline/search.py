import asyncio

from config import settings
from pipeline.encoder import SinglePassEncoder
from schemas import EncodedCandidate
from utils.format_detect import ImageFormat
from utils.logging import get_logger

logger = get_logger("pipeline.search")

# Quality arithmetic is rounded so repeated subtraction of 0.1 lands on the floor
QUALITY_DECIMALS = 4


def max_encode_passes(start_quality: float, min_quality: float, step: float) -> int:
    """Upper bound on encodes for a linear descent from start to floor."""
    if start_quality <= min_quality:
        return 1
    steps = 0
    quality = start_quality
    while quality > min_quality:
        quality = max(min_quality, round(quality - step, QUALITY_DECIMALS))
        steps += 1
    return steps + 1


async def converge(
    encoder: SinglePassEncoder,
    source: bytes,
    width: int,
    height: int,
    start_quality: float,
    min_quality: float,
    target_size_bytes: int,
    step: float | None = None,
    max_iterations: int | None = None,
    fmt: ImageFormat = ImageFormat.JPEG,
) -> EncodedCandidate:
    """Lower quality linearly until the output fits the byte budget.

    Algorithm:
    1. Encode at start_quality. Done if it fits or start is at the floor.
    2. Otherwise q = max(floor, q - step), encode, and stop as soon as the
       output fits or q reaches the floor.
    3. Never exceeds max_iterations encodes, even if the codec misbehaves.

    The highest quality that fits wins; the search never moves back up.
    When even the floor is too large the floor candidate is returned
    (best effort, not an error). If max_iterations runs out before the
    floor is reached, e.g. with a small step, the last candidate is
    returned at a quality above the floor. Task cancellation takes effect
    between encodes; an encode already running finishes in its worker
    thread.

    Args:
        encoder: Encoder bound to the request's codec.
        source: Raw source bytes.
        width: Planned output width.
        height: Planned output height.
        start_quality: First quality tried.
        min_quality: Quality floor.
        target_size_bytes: Byte budget.
        step: Quality decrement (default settings.quality_step).
        max_iterations: Hard cap on encodes (default settings.max_search_iterations).
        fmt: Output format.

    Returns:
        The accepted EncodedCandidate.
    """
    step = settings.quality_step if step is None else step
    max_iterations = settings.max_search_iterations if max_iterations is None else max_iterations

    if step <= 0:
        raise ValueError(f"Quality step must be positive, got {step}")
    if target_size_bytes <= 0:
        raise ValueError(f"Target size must be positive, got {target_size_bytes}")
    if not 0 < start_quality <= 1:
        raise ValueError(f"start_quality must be in (0, 1], got {start_quality}")
    if not 0 < min_quality <= 1:
        raise ValueError(f"min_quality must be in (0, 1], got {min_quality}")
    if max_iterations < 1:
        raise ValueError(f"max_iterations must be >= 1, got {max_iterations}")

    if min_quality > start_quality:
        logger.warning(
            f"Quality floor {min_quality} above start quality {start_quality}; "
            "using start quality as floor",
            extra={"context": {"min_quality": min_quality, "start_quality": start_quality}},
        )
        min_quality = start_quality

    quality = start_quality
    candidate = await asyncio.to_thread(encoder.encode, source, width, height, quality, fmt)
    passes = 1

    while candidate.byte_size > target_size_bytes and quality > min_quality:
        if passes >= max_iterations:
            logger.warning(
                f"Search stopped after {passes} encodes at q={quality:.2f}",
                extra={"context": {"passes": passes, "quality": quality,
                                   "size": candidate.byte_size,
                                   "target": target_size_bytes}},
            )
            break

        quality = max(min_quality, round(quality - step, QUALITY_DECIMALS))
        candidate = await asyncio.to_thread(encoder.encode, source, width, height, quality, fmt)
        passes += 1

    if candidate.byte_size > target_size_bytes:
        logger.info(
            f"Target {target_size_bytes} bytes not reached; best effort "
            f"{candidate.byte_size} bytes at q={quality:.2f}",
            extra={"context": {"passes": passes, "quality": quality,
                               "size": candidate.byte_size,
                               "target": target_size_bytes}},
        )

    return candidate
