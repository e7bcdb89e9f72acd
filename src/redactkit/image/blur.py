"""Separable box blur ("stack blur" style).

Two 1-D passes over an H x W x C uint8 array, horizontal then vertical.
Each pass slides a (2r+1)-wide running sum along the axis, clamping reads at
the edges, and divides through a precomputed lookup table:

    dv[i] = i // (2r + 1)    for i in [0, 256 * (2r + 1))

The loops run along one axis and are vectorised across the other, so
cancellation is checked once per column (horizontal) / row (vertical).
"""

from __future__ import annotations
from typing import Optional
import logging

import numpy as np
from PIL import Image

from ..errors import BoundsError
from ..pipeline.context import CancelToken, Rect, check_cancel

log = logging.getLogger("redactkit.image.blur")

def division_table(radius: int) -> np.ndarray:
    div = radius * 2 + 1
    return (np.arange(256 * div, dtype=np.int32) // div).astype(np.uint8)

def box_blur(pixels: np.ndarray, radius: int, cancel: Optional[CancelToken] = None) -> np.ndarray:
    arr = np.asarray(pixels)
    if arr.dtype != np.uint8:
        raise ValueError(f"box_blur expects uint8 pixels, got {arr.dtype}")
    if radius < 0:
        raise ValueError("radius must be >= 0")
    if radius == 0 or arr.size == 0:
        return arr.copy()

    squeeze = arr.ndim == 2
    src = (arr[:, :, None] if squeeze else arr).astype(np.int32)
    h, w = src.shape[:2]
    dv = division_table(radius)
    window = np.arange(-radius, radius + 1)

    # horizontal pass
    tmp = np.empty(src.shape, dtype=np.uint8)
    sums = src[:, np.clip(window, 0, w - 1), :].sum(axis=1)
    for x in range(w):
        check_cancel(cancel)
        tmp[:, x, :] = dv[sums]
        sums += src[:, min(x + radius + 1, w - 1), :] - src[:, max(x - radius, 0), :]

    # vertical pass
    mid = tmp.astype(np.int32)
    out = np.empty(src.shape, dtype=np.uint8)
    sums = mid[np.clip(window, 0, h - 1), :, :].sum(axis=0)
    for y in range(h):
        check_cancel(cancel)
        out[y] = dv[sums]
        sums += mid[min(y + radius + 1, h - 1)] - mid[max(y - radius, 0)]

    return out[:, :, 0] if squeeze else out

def blur_region(image: Image.Image, rect: Rect, radius: int, cancel: Optional[CancelToken] = None) -> Rect:
    """Blur `rect` of `image` in place; returns the clamped rectangle used.

    Only the clamped rectangle is written back. Alpha, if present, is kept.
    """
    if image.width < 1 or image.height < 1:
        raise BoundsError(f"cannot blur a region of an empty {image.width}x{image.height} image")
    safe = rect.clamp(image.width, image.height)
    if safe != rect:
        log.debug(f"Clamped region {rect.as_box()} -> {safe.as_box()}")
    patch = np.asarray(image.crop(safe.as_box()))
    if image.mode == "RGBA":
        blurred = patch.copy()
        blurred[:, :, :3] = box_blur(patch[:, :, :3], radius, cancel)
    else:
        blurred = box_blur(patch, radius, cancel)
    image.paste(Image.fromarray(blurred), (safe.left, safe.top))
    return safe
