from base64 import b64encode
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator

from utils.format_detect import ImageFormat


class PresetName(str, Enum):
    """Closed set of use cases with built-in optimization defaults."""

    AVATAR = "avatar"
    COMMUNITY = "community"
    TOUR = "tour"
    ROUTE_COVER = "routeCover"
    ROUTE_STOP = "routeStop"
    THUMBNAIL = "thumbnail"


class Preset(BaseModel):
    """Bounding box and starting quality for one use case."""

    max_width: int = Field(gt=0)
    max_height: int = Field(gt=0)
    start_quality: float = Field(gt=0, le=1)
    format: ImageFormat = ImageFormat.JPEG

    model_config = {"frozen": True}


class OptimizationOverride(BaseModel):
    """Explicit parameters used instead of a named preset."""

    max_width: int = Field(gt=0)
    max_height: int = Field(gt=0)
    quality: float = Field(default=0.6, gt=0, le=1)
    format: ImageFormat = ImageFormat.JPEG

    def as_preset(self) -> Preset:
        return Preset(
            max_width=self.max_width,
            max_height=self.max_height,
            start_quality=self.quality,
            format=self.format,
        )


class OptimizationRequest(BaseModel):
    """One call into the pipeline.

    ``source`` is any reference the SourceReader understands (bytes, path,
    file-like object, file/data/http URI). Without ``target_size_bytes``
    the request is served by a single encode.
    """

    source: Any
    preset: Optional[PresetName] = None
    override: Optional[OptimizationOverride] = None
    target_size_bytes: Optional[int] = Field(default=None, gt=0)
    min_quality: Optional[float] = Field(default=None, gt=0, le=1)
    quality_step: Optional[float] = Field(default=None, gt=0, le=1)

    @model_validator(mode="after")
    def _preset_or_override(self):
        if self.preset is not None and self.override is not None:
            raise ValueError("Pass either 'preset' or 'override', not both")
        return self


class EncodedCandidate(BaseModel):
    """Output of a single encoder invocation."""

    data: bytes = Field(repr=False)
    byte_size: int
    width: int
    height: int
    quality_used: float


class OptimizationResult(BaseModel):
    """Final encoded image plus compression metrics.

    The caller owns ``data`` and is responsible for persisting it.
    """

    data: bytes = Field(repr=False)
    width: int
    height: int
    original_size_bytes: int
    optimized_size_bytes: int
    compression_ratio_percent: int
    quality_used: float
    format: ImageFormat
    encode_passes: int = 1
    target_size_bytes: Optional[int] = None

    @property
    def target_met(self) -> bool:
        """True when no target was set or the output fits within it."""
        if self.target_size_bytes is None:
            return True
        return self.optimized_size_bytes <= self.target_size_bytes

    @property
    def base64(self) -> str:
        return b64encode(self.data).decode("ascii")


class SourceImage(BaseModel):
    """Raw source bytes resolved by the SourceReader."""

    data: bytes = Field(repr=False)
    size_bytes: int
    reference: str


class ImageInfo(BaseModel):
    """Size of a source without optimizing it."""

    size: int
    size_formatted: str


class StorageResult(BaseModel):
    """Blob store upload result."""

    provider: str
    url: str
    public_url: Optional[str] = None
