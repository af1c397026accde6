"""Benchmark case definitions.

Source images mimic what a phone camera or a screenshot tool hands the
upload flows: large landscape/portrait photos, UI captures and graphics
with transparency.
"""

from dataclasses import dataclass

from benchmarks.generators import (
    encode_image,
    graphic_like,
    photo_like,
    screenshot_like,
    solid,
)

# (category, width, height)
SIZES = [
    ("small", 320, 240),
    ("phone-l", 3000, 2000),
    ("phone-p", 2000, 3000),
    ("panorama", 4000, 800),
]


@dataclass
class BenchmarkCase:
    name: str
    data: bytes
    fmt: str
    category: str
    content: str


def build_all_cases() -> list[BenchmarkCase]:
    """Build the full benchmark suite."""
    cases = []
    for category, w, h in SIZES:
        cases.append(_case("photo", category, encode_image(photo_like(w, h), "jpeg", 92), "jpeg"))
        cases.append(_case("screenshot", category, encode_image(screenshot_like(w, h), "png"), "png"))
        cases.append(_case("graphic", category, encode_image(graphic_like(w, h), "png"), "png"))
        cases.append(_case("solid", category, encode_image(solid(w, h), "jpeg", 92), "jpeg"))
    return cases


def _case(content: str, category: str, data: bytes, fmt: str) -> BenchmarkCase:
    return BenchmarkCase(
        name=f"{content}-{category}.{fmt}",
        data=data,
        fmt=fmt,
        category=category,
        content=content,
    )
