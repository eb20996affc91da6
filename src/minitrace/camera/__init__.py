"""Camera module for primary ray generation.

Components:
    thin_lens: Look-at camera with optional aperture (pinhole when 0)

Pixel coordinates count columns left to right and rows top to bottom; the
camera flips rows internally so row 0 maps to the top of the image plane.
"""

from .thin_lens import Camera

__all__ = ["Camera"]
