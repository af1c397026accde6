"""Image generators for benchmark cases and tests.

Each generator creates a specific content type that exercises different
aspects of the compression pipeline. Uses fixed seeds for reproducibility.
"""

import io
import random

from PIL import Image, ImageDraw


def photo_like(w: int, h: int, seed: int = 42) -> Image.Image:
    """Smooth gradients blended with noise (high entropy, like a camera photo)."""
    rng = random.Random(seed)
    horizontal = Image.linear_gradient("L").rotate(90).resize((w, h))
    vertical = Image.linear_gradient("L").resize((w, h))
    base = Image.merge("RGB", (horizontal, vertical, Image.new("L", (w, h), 128)))
    noise = Image.frombytes("RGB", (w, h), rng.randbytes(w * h * 3))
    return Image.blend(base, noise, 0.3)


def screenshot_like(w: int, h: int, seed: int = 42) -> Image.Image:
    """Flat colors + sharp edges (like a UI screenshot)."""
    img = Image.new("RGB", (w, h), color=(240, 240, 240))
    draw = ImageDraw.Draw(img)
    rng = random.Random(seed)
    # Header bar
    draw.rectangle([(0, 0), (w, min(60, h // 4))], fill=(50, 50, 60))
    # Sidebar
    sidebar_w = min(200, w // 4)
    draw.rectangle([(0, min(60, h // 4)), (sidebar_w, h)], fill=(245, 245, 250))
    # Content blocks
    block_count = min(8, max(1, (h - 100) // 40))
    for i in range(block_count):
        y = 80 + i * ((h - 100) // max(1, block_count))
        max_bw = max(w - sidebar_w - 40, sidebar_w + 10)
        bw = rng.randint(sidebar_w, max_bw)
        draw.rectangle(
            [(sidebar_w + 20, y), (sidebar_w + 20 + bw, y + 30)],
            fill=(rng.randint(180, 220),) * 3,
        )
    return img


def graphic_like(w: int, h: int, seed: int = 42) -> Image.Image:
    """Flat-color shapes on a transparent canvas (like a logo or sticker)."""
    img = Image.new("RGBA", (w, h), color=(255, 255, 255, 0))
    draw = ImageDraw.Draw(img)
    rng = random.Random(seed)
    colors = [
        (66, 133, 244, 255),
        (234, 67, 53, 255),
        (251, 188, 4, 255),
        (52, 168, 83, 255),
    ]
    for _ in range(12):
        c = rng.choice(colors)
        cx, cy = rng.randint(0, w), rng.randint(0, h)
        size = rng.randint(max(1, w // 10), max(2, w // 3))
        if rng.random() > 0.5:
            draw.ellipse([(cx - size, cy - size), (cx + size, cy + size)], fill=c)
        else:
            draw.rectangle([(cx, cy), (cx + size, cy + size)], fill=c)
    return img


def solid(w: int, h: int) -> Image.Image:
    """Single solid color."""
    return Image.new("RGB", (w, h), color=(100, 150, 200))


def encode_image(img: Image.Image, fmt: str, quality: int = 95) -> bytes:
    """Encode a PIL Image to bytes in the given format."""
    buf = io.BytesIO()
    if fmt == "png":
        img.save(buf, format="PNG")
    elif fmt == "jpeg":
        img.convert("RGB").save(buf, format="JPEG", quality=quality)
    elif fmt == "webp":
        img.save(buf, format="WEBP", quality=quality)
    else:
        raise ValueError(f"Unsupported benchmark format: {fmt}")
    return buf.getvalue()
