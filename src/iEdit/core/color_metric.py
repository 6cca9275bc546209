"""Colour distance metrics used by the magic wand.

The scalar kernels are compiled with Numba so the flood fill can call them from
inside its own JIT loop.  The public wrappers accept any ``(r, g, b)`` sequence
and are what the rest of the package and the tests use.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
from numba import jit

# D65 reference white, 2 degree observer.
_WHITE_X = 0.95047
_WHITE_Y = 1.0
_WHITE_Z = 1.08883

_SRGB_GAMMA_THRESHOLD = 0.04045
_LAB_EPSILON = 0.008856
_LAB_KAPPA_SLOPE = 7.787
_LAB_OFFSET = 16.0 / 116.0

MAX_RGB_DISTANCE = float(np.sqrt(3.0) * 255.0)
"""Upper bound of :func:`rgb_distance` (black to white)."""


@jit(nopython=True, cache=True)
def _srgb_to_linear(value: float) -> float:
    if value > _SRGB_GAMMA_THRESHOLD:
        return ((value + 0.055) / 1.055) ** 2.4
    return value / 12.92


@jit(nopython=True, cache=True)
def _lab_pivot(t: float) -> float:
    if t > _LAB_EPSILON:
        return t ** (1.0 / 3.0)
    return _LAB_KAPPA_SLOPE * t + _LAB_OFFSET


@jit(nopython=True, cache=True)
def _rgb_distance(r1: float, g1: float, b1: float, r2: float, g2: float, b2: float) -> float:
    dr = r1 - r2
    dg = g1 - g2
    db = b1 - b2
    return np.sqrt(dr * dr + dg * dg + db * db)


@jit(nopython=True, cache=True)
def _rgb_to_lab(r: float, g: float, b: float) -> tuple[float, float, float]:
    rr = _srgb_to_linear(r / 255.0)
    gg = _srgb_to_linear(g / 255.0)
    bb = _srgb_to_linear(b / 255.0)

    x = (rr * 0.4124 + gg * 0.3576 + bb * 0.1805) / _WHITE_X
    y = (rr * 0.2126 + gg * 0.7152 + bb * 0.0722) / _WHITE_Y
    z = (rr * 0.0193 + gg * 0.1192 + bb * 0.9505) / _WHITE_Z

    fx = _lab_pivot(x)
    fy = _lab_pivot(y)
    fz = _lab_pivot(z)
    return 116.0 * fy - 16.0, 500.0 * (fx - fy), 200.0 * (fy - fz)


@jit(nopython=True, cache=True)
def _lab_distance(l1: float, a1: float, b1: float, l2: float, a2: float, b2: float) -> float:
    dl = l1 - l2
    da = a1 - a2
    db = b1 - b2
    return np.sqrt(dl * dl + da * da + db * db)


def rgb_distance(c1: Sequence[float], c2: Sequence[float]) -> float:
    """Return the Euclidean distance between two RGB triples (``0`` to ``441.67``)."""

    return float(
        _rgb_distance(
            float(c1[0]), float(c1[1]), float(c1[2]),
            float(c2[0]), float(c2[1]), float(c2[2]),
        )
    )


def rgb_to_lab(r: float, g: float, b: float) -> tuple[float, float, float]:
    """Convert 8-bit sRGB channels to CIE-Lab (D65)."""

    lab_l, lab_a, lab_b = _rgb_to_lab(float(r), float(g), float(b))
    return float(lab_l), float(lab_a), float(lab_b)


def lab_distance(c1: Sequence[float], c2: Sequence[float]) -> float:
    """Return the Euclidean (CIE76) distance between two Lab triples."""

    return float(
        _lab_distance(
            float(c1[0]), float(c1[1]), float(c1[2]),
            float(c2[0]), float(c2[1]), float(c2[2]),
        )
    )


def rgb_to_lab_array(rgb: np.ndarray) -> np.ndarray:
    """Vectorised :func:`rgb_to_lab` for an ``(..., 3)`` array of 8-bit channels."""

    channels = np.asarray(rgb, dtype=np.float64)[..., :3] / 255.0
    linear = np.where(
        channels > _SRGB_GAMMA_THRESHOLD,
        np.power((channels + 0.055) / 1.055, 2.4),
        channels / 12.92,
    )
    rr = linear[..., 0]
    gg = linear[..., 1]
    bb = linear[..., 2]

    xyz = np.stack(
        (
            (rr * 0.4124 + gg * 0.3576 + bb * 0.1805) / _WHITE_X,
            (rr * 0.2126 + gg * 0.7152 + bb * 0.0722) / _WHITE_Y,
            (rr * 0.0193 + gg * 0.1192 + bb * 0.9505) / _WHITE_Z,
        ),
        axis=-1,
    )
    pivot = np.where(
        xyz > _LAB_EPSILON,
        np.cbrt(xyz),
        _LAB_KAPPA_SLOPE * xyz + _LAB_OFFSET,
    )
    fx = pivot[..., 0]
    fy = pivot[..., 1]
    fz = pivot[..., 2]
    return np.stack((116.0 * fy - 16.0, 500.0 * (fx - fy), 200.0 * (fy - fz)), axis=-1)


__all__ = [
    "MAX_RGB_DISTANCE",
    "lab_distance",
    "rgb_distance",
    "rgb_to_lab",
    "rgb_to_lab_array",
]
