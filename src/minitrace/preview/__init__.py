"""Preview module for image output.

Components:
    export: Gamma encoding with PPM and PNG writers

Example:
    >>> from src.minitrace.preview import save_image
    >>> save_image("output.png", image, gamma=2.2)
"""

from src.minitrace.preview.export import (
    encode_channel,
    encode_image,
    save_image,
    save_png,
    write_ppm,
)

__all__ = [
    "encode_channel",
    "encode_image",
    "write_ppm",
    "save_png",
    "save_image",
]
