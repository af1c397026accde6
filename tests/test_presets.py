"""Tests for the use case -> Preset registry."""

import pytest

from pipeline.presets import PRESETS, TARGET_SIZES, preset_for, target_size_for
from schemas import PresetName
from utils.format_detect import ImageFormat


@pytest.mark.parametrize(
    "name, max_width, max_height, quality",
    [
        ("avatar", 400, 400, 0.70),
        ("community", 1200, 1200, 0.60),
        ("tour", 1400, 1050, 0.65),
        ("routeCover", 1600, 900, 0.65),
        ("routeStop", 1000, 750, 0.60),
        ("thumbnail", 300, 300, 0.50),
    ],
)
def test_preset_table(name, max_width, max_height, quality):
    preset = preset_for(name)
    assert preset.max_width == max_width
    assert preset.max_height == max_height
    assert preset.start_quality == pytest.approx(quality)
    assert preset.format == ImageFormat.JPEG


def test_every_preset_name_is_registered():
    assert set(PRESETS) == set(PresetName)


def test_preset_for_accepts_enum_member():
    assert preset_for(PresetName.ROUTE_COVER) is PRESETS[PresetName.ROUTE_COVER]


def test_invalid_preset_raises():
    with pytest.raises(ValueError, match="Invalid preset"):
        preset_for("banner")


def test_presets_are_immutable():
    preset = preset_for("avatar")
    with pytest.raises(Exception):
        preset.max_width = 9999
    with pytest.raises(TypeError):
        PRESETS[PresetName.AVATAR] = preset


def test_target_sizes():
    assert target_size_for("avatar") == 100 * 1024
    assert target_size_for("community") == 250 * 1024
    assert target_size_for("tour") == 350 * 1024
    assert target_size_for("routeCover") == 400 * 1024
    assert target_size_for("routeStop") == 250 * 1024
    assert PresetName.THUMBNAIL not in TARGET_SIZES


def test_thumbnail_has_no_target_size():
    with pytest.raises(ValueError, match="no target size"):
        target_size_for("thumbnail")
