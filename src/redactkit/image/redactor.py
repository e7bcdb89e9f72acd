"""Image redaction: find regions from recognized words and blur them.

The input image is never modified; all work happens on a copy.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence
import logging
import os

from PIL import Image

from ..pipeline.context import CancelToken, RecognizedWord, Rect, check_cancel
from ..storage.writer import atomic_output
from .blur import blur_region
from .regions import RegionRule, find_regions

log = logging.getLogger("redactkit.image.redactor")

DEFAULT_RADIUS = 20
IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".bmp", ".gif", ".webp", ".tif", ".tiff")

@dataclass
class ImageRedaction:
    image: Image.Image
    regions: List[Rect] = field(default_factory=list)

def working_copy(image: Image.Image) -> Image.Image:
    """Copy in a mode the blur understands (L, RGB or RGBA)."""
    if image.mode in ("L", "RGB", "RGBA"):
        return image.copy()
    has_alpha = "A" in image.getbands() or "transparency" in image.info
    return image.convert("RGBA" if has_alpha else "RGB")

def redact_image(
    words: Sequence[RecognizedWord],
    image: Image.Image,
    radius: int = DEFAULT_RADIUS,
    rules: Optional[Iterable[RegionRule]] = None,
    cancel: Optional[CancelToken] = None,
) -> ImageRedaction:
    out = working_copy(image)
    clamped = [r.clamp(out.width, out.height) for r in find_regions(words, out.size, rules)]
    applied = []
    for rect in dict.fromkeys(clamped):
        check_cancel(cancel)
        applied.append(blur_region(out, rect, radius, cancel))
    log.info(f"Blurred {len(applied)} regions (radius={radius})")
    return ImageRedaction(image=out, regions=applied)

def load_image(path: str) -> Image.Image:
    with Image.open(path) as im:
        im.load()
        return im.copy()

def save_image(image: Image.Image, path: str) -> None:
    fmt = Image.registered_extensions().get(os.path.splitext(path)[1].lower(), "PNG")
    if fmt == "JPEG" and image.mode not in ("L", "RGB"):
        image = image.convert("RGB")
    with atomic_output(path) as f:
        image.save(f, format=fmt)

def iter_images(folder: str) -> Iterator[str]:
    """Image files under `folder` (recursive, sorted)."""
    for root, dirs, files in os.walk(folder):
        dirs.sort()
        for name in sorted(files):
            if name.lower().endswith(IMAGE_EXTENSIONS):
                yield os.path.join(root, name)
