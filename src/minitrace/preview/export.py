"""Image export utilities for rendered images.

Rendered images are float arrays of shape (H, W, 3) with linear values in
[0, 1], row 0 at the top. Each channel is gamma encoded to 8 bits:

    byte = floor(clamp(value, 0, 1) ** (1 / gamma) * 255 + 0.5)

Supported formats:
    - PPM (plain-text P3)
    - PNG (8-bit via Pillow)

Example:
    >>> from src.minitrace.preview.export import save_image
    >>> save_image("output.ppm", image, gamma=2.2)
"""

from __future__ import annotations

import math
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

PPM_MAX_VALUE = 255

PNG_SUFFIXES = (".png",)


def encode_channel(value: float, gamma: float) -> int:
    """Gamma encode a single linear channel value to 0..255."""
    clamped = min(max(value, 0.0), 1.0)
    encoded = math.floor(clamped ** (1.0 / gamma) * 255.0 + 0.5)
    return min(max(encoded, 0), PPM_MAX_VALUE)


def encode_image(image: npt.NDArray[np.floating], gamma: float) -> npt.NDArray[np.uint8]:
    """Gamma encode a linear float image to uint8.

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Output gamma (> 0).

    Returns:
        8-bit image array of shape (H, W, 3), identical to applying
        encode_channel to every value.

    Raises:
        ValueError: If gamma is not positive or the shape is not (H, W, 3).
    """
    if gamma <= 0.0:
        raise ValueError(f"gamma must be > 0, got {gamma}")
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Image must have shape (H, W, 3), got {image.shape}")

    clamped = np.clip(image.astype(np.float64), 0.0, 1.0)
    encoded = np.floor(np.power(clamped, 1.0 / gamma) * 255.0 + 0.5)
    return np.clip(encoded, 0, PPM_MAX_VALUE).astype(np.uint8)


def write_ppm(filepath: str | Path, image: npt.NDArray[np.floating], gamma: float = 2.2) -> None:
    """Write an image as a plain-text PPM (P3) file.

    The header is ``P3``, ``<width> <height>`` and ``255`` on separate lines,
    followed by one ``r g b`` line per pixel, rows top to bottom.
    """
    pixels = encode_image(image, gamma)
    height, width, _ = pixels.shape

    with open(filepath, "w", encoding="ascii") as f:
        f.write(f"P3\n{width} {height}\n{PPM_MAX_VALUE}\n")
        for row in pixels:
            for r, g, b in row:
                f.write(f"{r} {g} {b}\n")


def save_png(filepath: str | Path, image: npt.NDArray[np.floating], gamma: float = 2.2) -> None:
    """Save an image as an 8-bit PNG using the same encoding as write_ppm."""
    pil_image = PILImage.fromarray(encode_image(image, gamma))
    pil_image.save(filepath)


def save_image(filepath: str | Path, image: npt.NDArray[np.floating], gamma: float = 2.2) -> Path:
    """Save an image, choosing the format from the file suffix.

    ``.png`` writes a PNG; every other suffix writes a PPM.

    Returns:
        The output path.
    """
    path = Path(filepath)
    if path.suffix.lower() in PNG_SUFFIXES:
        save_png(path, image, gamma)
    else:
        write_ppm(path, image, gamma)
    return path
