"""Use case -> Preset mapping and per-preset aggressive-mode budgets."""

from types import MappingProxyType

from schemas import Preset, PresetName

KB = 1024

PRESETS = MappingProxyType({
    # Profile photos: small and square
    PresetName.AVATAR: Preset(max_width=400, max_height=400, start_quality=0.70),
    # Feed images
    PresetName.COMMUNITY: Preset(max_width=1200, max_height=1200, start_quality=0.60),
    # Tour images keep more detail
    PresetName.TOUR: Preset(max_width=1400, max_height=1050, start_quality=0.65),
    # Wide card covers
    PresetName.ROUTE_COVER: Preset(max_width=1600, max_height=900, start_quality=0.65),
    PresetName.ROUTE_STOP: Preset(max_width=1000, max_height=750, start_quality=0.60),
    # Previews
    PresetName.THUMBNAIL: Preset(max_width=300, max_height=300, start_quality=0.50),
})

# Byte budgets used by the per-use-case convenience wrappers
TARGET_SIZES = MappingProxyType({
    PresetName.AVATAR: 100 * KB,
    PresetName.COMMUNITY: 250 * KB,
    PresetName.TOUR: 350 * KB,
    PresetName.ROUTE_COVER: 400 * KB,
    PresetName.ROUTE_STOP: 250 * KB,
})


def resolve_preset_name(name: PresetName | str) -> PresetName:
    """Normalize a preset name.

    Raises:
        ValueError: If name is not one of the known presets.
    """
    if isinstance(name, PresetName):
        return name
    try:
        return PresetName(name)
    except ValueError:
        valid = ", ".join(p.value for p in PresetName)
        raise ValueError(f"Invalid preset: '{name}'. Must be one of: {valid}.")


def preset_for(name: PresetName | str) -> Preset:
    """Return the Preset for a use case.

    Args:
        name: PresetName member or its string value ("avatar", "routeCover", ...).

    Raises:
        ValueError: If name is not one of the known presets.
    """
    return PRESETS[resolve_preset_name(name)]


def target_size_for(name: PresetName | str) -> int:
    """Return the aggressive-mode byte budget for a preset.

    Raises:
        ValueError: Unknown preset, or a preset without a budget (thumbnail).
    """
    key = resolve_preset_name(name)
    if key not in TARGET_SIZES:
        raise ValueError(f"Preset '{key.value}' has no target size")
    return TARGET_SIZES[key]
