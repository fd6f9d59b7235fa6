"""
Color Management Module

Handles:
- Linear to sRGB (perceptual) conversion of brick colors
- Batch conversion of whole save palettes

Color Space Background:
- Save files store brick colors as linear byte channels
- The model format expects perceptual (sRGB) floats in [0, 1]
- Skipping the conversion makes every brick look too dark
"""

from typing import Tuple
import numpy as np
from numba import njit, prange


@njit(cache=True)
def _linear_to_srgb_component(c: float) -> float:
    """
    Convert a single Linear component to sRGB.

    The sRGB standard uses a piecewise function:
    - Linear below threshold (0.0031308)
    - Gamma curve above threshold

    Args:
        c: Linear value normalized to [0, 1]

    Returns:
        sRGB value
    """
    if c <= 0.0031308:
        return c * 12.92
    else:
        return 1.055 * (c ** (1.0 / 2.4)) - 0.055


def to_perceptual(channel: int) -> float:
    """
    Convert one 0-255 linear channel to a perceptual float in [0, 1].

    Args:
        channel: Linear byte value (0-255)

    Returns:
        sRGB value in [0, 1]
    """
    return float(_linear_to_srgb_component(channel / 255.0))


def color_to_perceptual(color) -> Tuple[float, float, float]:
    """Convert an (r, g, b[, a]) byte color to a perceptual RGB triple."""
    return (
        to_perceptual(color[0]),
        to_perceptual(color[1]),
        to_perceptual(color[2]),
    )


@njit(cache=True, parallel=True)
def palette_to_perceptual(colors: np.ndarray) -> np.ndarray:
    """
    Convert a palette of Linear byte colors to sRGB floats.

    Args:
        colors: Array of shape (N, 3) or (N, 4) with uint8 Linear values

    Returns:
        Array of shape (N, 3) with float64 sRGB values [0, 1]
    """
    n = colors.shape[0]
    result = np.empty((n, 3), dtype=np.float64)

    for i in prange(n):
        for c in range(3):  # Alpha is not carried over
            result[i, c] = _linear_to_srgb_component(colors[i, c] / 255.0)

    return result
