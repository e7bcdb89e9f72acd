"""Image carrier: region discovery from recognized words and box blur."""

from .blur import box_blur, blur_region
from .regions import AadhaarQrRegion, RegionRule, find_regions, is_label, is_value
from .recognizer import TextRecognizer, TesseractRecognizer
from .redactor import ImageRedaction, iter_images, load_image, redact_image, save_image

__all__ = [
    "box_blur",
    "blur_region",
    "AadhaarQrRegion",
    "RegionRule",
    "find_regions",
    "is_label",
    "is_value",
    "TextRecognizer",
    "TesseractRecognizer",
    "ImageRedaction",
    "iter_images",
    "load_image",
    "redact_image",
    "save_image",
]
