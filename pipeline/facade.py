"""Public entry points of the compression pipeline.

Two modes:
- single pass (``optimize``): plan once, encode once at the preset quality
- aggressive (``optimize_aggressive``): plan once, then walk quality down
  until the output fits a byte budget (see pipeline.search)

``optimize_many`` runs single-pass mode over a batch behind a bounded
worker gate. Module-level functions delegate to a default ImageOptimizer
built on PillowCodec; construct your own ImageOptimizer to inject a
different codec or reader.
"""

import asyncio
import math
from typing import Any, Iterable, Union

from codec.base import ImageCodec
from codec.pillow import PillowCodec
from config import settings
from exceptions import FitpixError
from pipeline.dimensions import plan_dimensions
from pipeline.encoder import SinglePassEncoder
from pipeline.presets import KB, preset_for, target_size_for
from pipeline.search import converge
from schemas import (
    EncodedCandidate,
    ImageInfo,
    OptimizationOverride,
    OptimizationRequest,
    OptimizationResult,
    Preset,
    PresetName,
    SourceImage,
)
from sources.reader import SourceReader, source_reader
from utils.concurrency import WorkerGate
from utils.logging import get_logger

logger = get_logger("pipeline.facade")

PresetArg = Union[PresetName, str, OptimizationOverride, Preset, None]
BatchItem = Union[OptimizationResult, FitpixError]

DEFAULT_TARGET_SIZE = 250 * KB


def compression_ratio(original_size: int, optimized_size: int) -> int:
    """Percent saved, rounded half up. Negative when the output grew."""
    if original_size <= 0:
        return 0
    return math.floor((1 - optimized_size / original_size) * 100 + 0.5)


def format_size(size_bytes: int) -> str:
    """Human-readable size: '2.50 MB' above one megabyte, '350 KB' below."""
    if size_bytes > 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.2f} MB"
    return f"{size_bytes / 1024:.0f} KB"


class ImageOptimizer:
    """Preset lookup, dimension planning and encoding for one codec."""

    def __init__(self, codec: ImageCodec | None = None, reader: SourceReader | None = None):
        self.codec = codec or PillowCodec()
        self.reader = reader or source_reader

    async def optimize(self, ref: Any, preset: PresetArg = None) -> OptimizationResult:
        """Resize and encode once at the preset's quality.

        Raises:
            ValueError: Unknown preset name.
            InvalidImageDimensionsError: Source reports a zero dimension.
            DecodeError: Source is corrupt or not an image.
            EncodeError: Codec failed to produce output.
            SourceReadError: Reference could not be read.
        """
        params = self._resolve_preset(preset)
        return await self._optimize_single(ref, params)

    async def optimize_aggressive(
        self,
        ref: Any,
        preset: PresetArg = None,
        target_size_bytes: int = DEFAULT_TARGET_SIZE,
        min_quality: float | None = None,
        quality_step: float | None = None,
    ) -> OptimizationResult:
        """Encode at the highest quality (stepping down) that fits target_size_bytes.

        Reaching the quality floor without meeting the target still
        returns a result; check ``result.target_met``.

        Raises:
            Same as ``optimize``.
        """
        params = self._resolve_preset(preset)
        floor = settings.min_quality if min_quality is None else min_quality

        source = await self.reader.read(ref)
        encoder = SinglePassEncoder(self.codec)
        width, height = await self._plan(source, params)

        candidate = await converge(
            encoder,
            source.data,
            width,
            height,
            start_quality=params.start_quality,
            min_quality=floor,
            target_size_bytes=target_size_bytes,
            step=quality_step,
            fmt=params.format,
        )
        return self._build_result(source, candidate, params, encoder.calls, target_size_bytes)

    async def run(self, request: OptimizationRequest) -> OptimizationResult:
        """Serve a request: single pass without a target, aggressive with one."""
        preset = request.override if request.override is not None else request.preset
        if request.target_size_bytes is None:
            return await self.optimize(request.source, preset)
        return await self.optimize_aggressive(
            request.source,
            preset,
            target_size_bytes=request.target_size_bytes,
            min_quality=request.min_quality,
            quality_step=request.quality_step,
        )

    async def optimize_many(
        self,
        refs: Iterable[Any],
        preset: PresetArg = None,
        max_workers: int | None = None,
    ) -> list[BatchItem]:
        """Single-pass optimize every reference, at most max_workers at a time.

        Results come back in input order. A failing item yields its
        FitpixError in place and does not affect its siblings.
        """
        params = self._resolve_preset(preset)
        gate = WorkerGate(max_workers)

        async def _run_item(index: int, ref: Any) -> BatchItem:
            async with gate:
                try:
                    return await self._optimize_single(ref, params)
                except FitpixError as e:
                    logger.warning(
                        f"Batch item {index} failed: {e.message}",
                        extra={"context": {"index": index, "error": e.error_code, **e.details}},
                    )
                    return e

        return list(await asyncio.gather(*(_run_item(i, ref) for i, ref in enumerate(refs))))

    async def optimize_for(self, ref: Any, preset: PresetName | str) -> OptimizationResult:
        """Aggressive mode with the preset's own byte budget."""
        return await self.optimize_aggressive(ref, preset, target_size_for(preset))

    async def should_optimize(self, ref: Any, threshold_bytes: int | None = None) -> bool:
        """True when the source is larger than threshold_bytes (default 500 KB)."""
        if threshold_bytes is None:
            threshold_bytes = settings.should_optimize_threshold_kb * KB
        return await self.reader.size(ref) > threshold_bytes

    async def get_image_info(self, ref: Any) -> ImageInfo:
        size = await self.reader.size(ref)
        return ImageInfo(size=size, size_formatted=format_size(size))

    async def _optimize_single(self, ref: Any, params: Preset) -> OptimizationResult:
        source = await self.reader.read(ref)
        encoder = SinglePassEncoder(self.codec)
        width, height = await self._plan(source, params)
        candidate = await asyncio.to_thread(
            encoder.encode, source.data, width, height, params.start_quality, params.format
        )
        return self._build_result(source, candidate, params, encoder.calls, None)

    async def _plan(self, source: SourceImage, params: Preset) -> tuple[int, int]:
        source_width, source_height = await asyncio.to_thread(
            self.codec.decode_dimensions, source.data
        )
        return plan_dimensions(source_width, source_height, params.max_width, params.max_height)

    def _resolve_preset(self, preset: PresetArg) -> Preset:
        if preset is None:
            return preset_for(settings.default_preset)
        if isinstance(preset, Preset):
            return preset
        if isinstance(preset, OptimizationOverride):
            return preset.as_preset()
        return preset_for(preset)

    def _build_result(
        self,
        source: SourceImage,
        candidate: EncodedCandidate,
        params: Preset,
        passes: int,
        target_size_bytes: int | None,
    ) -> OptimizationResult:
        """Assemble the result, measuring the final bytes directly."""
        optimized_size = len(candidate.data)
        ratio = compression_ratio(source.size_bytes, optimized_size)

        logger.info(
            f"Compressed {source.reference}: {format_size(source.size_bytes)} -> "
            f"{format_size(optimized_size)} ({ratio}% reduction, "
            f"quality: {candidate.quality_used * 100:.0f}%)",
            extra={"context": {
                "original_size": source.size_bytes,
                "optimized_size": optimized_size,
                "reduction_percent": ratio,
                "quality": candidate.quality_used,
                "width": candidate.width,
                "height": candidate.height,
                "passes": passes,
                "target_size": target_size_bytes,
            }},
        )

        return OptimizationResult(
            data=candidate.data,
            width=candidate.width,
            height=candidate.height,
            original_size_bytes=source.size_bytes,
            optimized_size_bytes=optimized_size,
            compression_ratio_percent=ratio,
            quality_used=candidate.quality_used,
            format=params.format,
            encode_passes=passes,
            target_size_bytes=target_size_bytes,
        )


# Module-level default
default_optimizer = ImageOptimizer()


async def optimize(ref: Any, preset: PresetArg = None) -> OptimizationResult:
    return await default_optimizer.optimize(ref, preset)


async def optimize_aggressive(
    ref: Any,
    preset: PresetArg = None,
    target_size_bytes: int = DEFAULT_TARGET_SIZE,
    min_quality: float | None = None,
    quality_step: float | None = None,
) -> OptimizationResult:
    return await default_optimizer.optimize_aggressive(
        ref, preset, target_size_bytes, min_quality, quality_step
    )


async def optimize_many(
    refs: Iterable[Any], preset: PresetArg = None, max_workers: int | None = None
) -> list[BatchItem]:
    return await default_optimizer.optimize_many(refs, preset, max_workers)


async def run(request: OptimizationRequest) -> OptimizationResult:
    return await default_optimizer.run(request)


async def optimize_avatar(ref: Any) -> OptimizationResult:
    """Avatar preset, 100 KB budget."""
    return await default_optimizer.optimize_for(ref, PresetName.AVATAR)


async def optimize_community_image(ref: Any) -> OptimizationResult:
    """Community preset, 250 KB budget."""
    return await default_optimizer.optimize_for(ref, PresetName.COMMUNITY)


async def optimize_tour_image(ref: Any) -> OptimizationResult:
    """Tour preset, 350 KB budget."""
    return await default_optimizer.optimize_for(ref, PresetName.TOUR)


async def optimize_route_cover_image(ref: Any) -> OptimizationResult:
    """Route cover preset, 400 KB budget."""
    return await default_optimizer.optimize_for(ref, PresetName.ROUTE_COVER)


async def optimize_route_stop_image(ref: Any) -> OptimizationResult:
    """Route stop preset, 250 KB budget."""
    return await default_optimizer.optimize_for(ref, PresetName.ROUTE_STOP)


async def should_optimize(ref: Any, threshold_bytes: int | None = None) -> bool:
    return await default_optimizer.should_optimize(ref, threshold_bytes)


async def get_image_info(ref: Any) -> ImageInfo:
    return await default_optimizer.get_image_info(ref)
