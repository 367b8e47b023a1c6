"""Image preprocessing for local OCR.

Tesseract reads clean, high-contrast, grey-scale text far better than raw
phone photos or colour scans, so every image passes through one fixed,
deterministic chain before recognition:

    1. grayscale   : drop colour information
    2. normalize   : stretch luminance to the full 0-255 range
    3. sharpen     : recover edges softened by scanning / compression
    4. resize      : fit to a fixed target height (never enlarge), Lanczos

The derived image is written next to the original as a temporary PNG.  The
file only lives for the duration of one OCR call; :meth:`preprocessed_copy`
is a context manager that removes it on every exit path.
"""

from __future__ import annotations

import contextlib
from collections.abc import Iterator
from pathlib import Path

import cv2
import numpy as np
from PIL import Image, ImageEnhance, ImageOps

from docprocessor.utils.logging import get_logger

_DEFAULT_TARGET_HEIGHT = 1200
_TEMP_PREFIX = "temp_processed_"


class ImagePreprocessor:
    """Prepares document images for Tesseract OCR.

    Parameters
    ----------
    target_height:
        Output height in pixels.  Images smaller than this are left at
        their native size; larger ones are downscaled preserving aspect
        ratio.
    """

    def __init__(self, target_height: int = _DEFAULT_TARGET_HEIGHT) -> None:
        self._target_height = target_height
        self._logger = get_logger(__name__)

    @property
    def target_height(self) -> int:
        return self._target_height

    def prepare(self, image: Image.Image) -> Image.Image:
        """Run the full chain on an in-memory image and return the result."""
        gray = self.to_grayscale(image)
        normalized = self.normalize_contrast(gray)
        sharpened = self.sharpen(normalized)
        return self.resize_for_ocr(sharpened)

    @contextlib.contextmanager
    def preprocessed_copy(self, image_path: str | Path) -> Iterator[Path]:
        """Yield the path of a preprocessed PNG copy of *image_path*.

        The temporary file is deleted when the ``with`` block exits, whether
        it exits normally or through an exception.
        """
        source = Path(image_path)
        temp_path = source.with_name(f"{_TEMP_PREFIX}{source.stem}.png")
        try:
            with Image.open(source) as original:
                processed = self.prepare(original)
            processed.save(temp_path, format="PNG")
            yield temp_path
        finally:
            if temp_path.exists():
                temp_path.unlink()
                self._logger.debug("preprocessed_image_removed", path=str(temp_path))

    # ------------------------------------------------------------------
    # Individual stages
    # ------------------------------------------------------------------

    @staticmethod
    def to_grayscale(image: Image.Image) -> Image.Image:
        # exif_transpose applies camera orientation before any pixel work.
        return ImageOps.grayscale(ImageOps.exif_transpose(image))

    @staticmethod
    def normalize_contrast(image: Image.Image) -> Image.Image:
        """Stretch the luminance histogram to span the full 0-255 range."""
        gray = np.array(image.convert("L"))
        stretched = cv2.normalize(gray, None, 0, 255, cv2.NORM_MINMAX)
        return Image.fromarray(stretched)

    @staticmethod
    def sharpen(image: Image.Image, factor: float = 2.0) -> Image.Image:
        return ImageEnhance.Sharpness(image).enhance(factor)

    def resize_for_ocr(self, image: Image.Image) -> Image.Image:
        """Downscale to the target height, preserving aspect ratio.

        Images already at or below the target height are returned unchanged.
        """
        width, height = image.size
        if height <= self._target_height:
            return image
        scale = self._target_height / height
        new_width = max(1, round(width * scale))
        return image.resize((new_width, self._target_height), Image.LANCZOS)
