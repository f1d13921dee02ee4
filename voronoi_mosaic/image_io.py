"""Image loading, saving, and comparison-grid generation."""

from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont, UnidentifiedImageError

from voronoi_mosaic.errors import ImageIOError, InvalidInputError


def compute_target_size(
    original_width: int,
    original_height: int,
    max_side: int | None,
) -> tuple[int, int]:
    """Compute a (w, h) no larger than *max_side*, preserving aspect ratio.

    Images already within the limit (or ``max_side=None``) keep their
    size; otherwise the longest side becomes *max_side* and the other is
    scaled proportionally (rounded, minimum 1).

    Raises:
        InvalidInputError: *max_side* is given but smaller than 1.
    """
    if max_side is not None and max_side < 1:
        msg = f"Max side must be >= 1, got {max_side}"
        raise InvalidInputError(msg)
    if max_side is None or max(original_width, original_height) <= max_side:
        return original_width, original_height
    if original_width >= original_height:
        w = max_side
        h = max(1, round(original_height * max_side / original_width))
    else:
        h = max_side
        w = max(1, round(original_width * max_side / original_height))
    return w, h


def load_image(path: str | Path, max_side: int | None = None) -> np.ndarray:
    """Decode an image as RGB, optionally downscaling its longest side.

    Returns:
        (H, W, 3) uint8 array.

    Raises:
        ImageIOError: The file is missing or not a readable image.
    """
    try:
        with Image.open(path) as src:
            img = src.convert("RGB")
    except (OSError, UnidentifiedImageError) as err:
        msg = f"Failed to open image {path}: {err}"
        raise ImageIOError(msg) from err

    w, h = compute_target_size(img.width, img.height, max_side)
    if (w, h) != img.size:
        img = img.resize((w, h), Image.LANCZOS)
    return np.array(img, dtype=np.uint8)


def save_image(array: np.ndarray, path: str | Path) -> None:
    """Encode *array* to *path*; the format follows the file extension.

    Raises:
        ImageIOError: The image could not be written.
    """
    arr = array.astype(np.uint8)
    if arr.ndim == 3 and arr.shape[2] == 1:
        arr = arr[:, :, 0]
    img = Image.fromarray(arr)
    try:
        img.save(path)
    except (OSError, ValueError) as err:
        msg = f"Failed to save image {path}: {err}"
        raise ImageIOError(msg) from err


def make_comparison_grid(
    source: np.ndarray,
    blurred: np.ndarray,
    mosaic: np.ndarray,
    output_path: str | Path,
) -> None:
    """Create a 3-panel comparison: Original | Blurred | Mosaic.

    All three arrays share the same (H, W, 3) shape.
    """
    h, w = source.shape[:2]
    label_height = 36

    panels = [Image.fromarray(a) for a in (source, blurred, mosaic)]
    labels = ["Original", "Blurred", f"Mosaic {w}x{h}"]

    gap = 8
    total_w = len(panels) * w + (len(panels) - 1) * gap
    total_h = h + label_height

    canvas = Image.new("RGB", (total_w, total_h), (30, 30, 30))
    draw = ImageDraw.Draw(canvas)

    try:
        font = ImageFont.truetype(
            "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf", 18,
        )
    except OSError:
        font = ImageFont.load_default()

    for i, (panel, label) in enumerate(zip(panels, labels, strict=True)):
        x = i * (w + gap)
        canvas.paste(panel, (x, label_height))

        bbox = draw.textbbox((0, 0), label, font=font)
        text_w = bbox[2] - bbox[0]
        tx = x + (w - text_w) // 2
        draw.text((tx, 6), label, fill=(220, 220, 220), font=font)

    try:
        canvas.save(output_path)
    except (OSError, ValueError) as err:
        msg = f"Failed to save comparison grid {output_path}: {err}"
        raise ImageIOError(msg) from err
