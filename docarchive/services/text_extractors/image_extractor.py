"""
Image OCR Extractor.

Extracts text from images with Tesseract (pytesseract) after cleaning the
image up with Pillow.
"""
import re
from pathlib import Path
from typing import Optional

import pytesseract
from PIL import Image, ImageFilter, ImageOps

from .base import BaseTextExtractor, TextExtractionError
from ...core.logging_config import get_logger

logger = get_logger(__name__)

# Characters Tesseract may emit during the advanced pass
ACCENTED_CHARS = "áéíóúàèìòùâêîôûãõçÁÉÍÓÚÀÈÌÒÙÂÊÎÔÛÃÕÇ"
OCR_CHAR_WHITELIST = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789 .,!?;:-()[]{}"
    + ACCENTED_CHARS
)

_BLANK_LINES = re.compile(r"\n\s*\n")
_DISALLOWED_CHARS = re.compile(r"[^A-Za-z0-9_\s.,!?;:\-()\[\]{}" + ACCENTED_CHARS + r"]")
_WHITESPACE = re.compile(r"\s+")


def flatten_transparency(image: Image.Image) -> Image.Image:
    """Composite an image with transparency onto a white background."""
    if image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info:
        rgba = image.convert("RGBA")
        background = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
        return Image.alpha_composite(background, rgba).convert("RGB")
    return image


def clean_ocr_text(text: str) -> str:
    """
    Clean up common OCR artifacts.

    Collapses blank lines, strips characters outside the allow-list and
    normalizes whitespace.
    """
    text = _BLANK_LINES.sub("\n", text)
    text = _DISALLOWED_CHARS.sub("", text)
    text = _WHITESPACE.sub(" ", text)
    return text.strip()


class ImageOCRExtractor(BaseTextExtractor):
    """Extractor for image/* files using Tesseract OCR."""

    def __init__(
        self,
        languages: str = "por+eng",
        max_dimension: int = 2000,
        tesseract_cmd: Optional[str] = None
    ):
        """
        Initialize image extractor.

        Args:
            languages: Tesseract language string (Portuguese and English by default)
            max_dimension: Advanced pass shrinks images to fit this box
            tesseract_cmd: Path to the tesseract binary when not on PATH
        """
        super().__init__("Image")
        self.languages = languages
        self.max_dimension = max_dimension
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    def supports(self, mime_type: str) -> bool:
        return mime_type.startswith("image/")

    def build_config(self, advanced: bool) -> str:
        # LSTM engine, fully automatic page segmentation
        config = "--oem 1 --psm 3"
        if advanced:
            # Quoted: the allow-list contains a space
            config += f' -c "tessedit_char_whitelist={OCR_CHAR_WHITELIST}"'
        return config

    def preprocess(self, image: Image.Image, advanced: bool) -> Image.Image:
        """Flatten, greyscale, normalize and sharpen; the advanced pass also downsizes."""
        processed = ImageOps.grayscale(flatten_transparency(image))
        processed = ImageOps.autocontrast(processed)
        processed = processed.filter(ImageFilter.SHARPEN)
        if advanced:
            # thumbnail() never enlarges
            processed.thumbnail((self.max_dimension, self.max_dimension))
        return processed

    def extract(self, file_path: Path, advanced: bool = False) -> str:
        """
        Run OCR on an image file.

        Raises:
            TextExtractionError: If the image cannot be opened or OCR fails
        """
        pass_name = "advanced" if advanced else "quick"
        logger.info(f"Processing image with {pass_name} OCR: {file_path.name}")

        try:
            with Image.open(file_path) as original:
                original.load()
                try:
                    image = self.preprocess(original, advanced)
                except Exception as e:
                    logger.warning(f"Image preprocessing failed, using original: {e}")
                    image = original.copy()

            text = pytesseract.image_to_string(
                image,
                lang=self.languages,
                config=self.build_config(advanced),
            )
        except (OSError, pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as e:
            raise TextExtractionError(f"OCR failed for {file_path.name}: {e}") from e

        return clean_ocr_text(text) if advanced else text.strip()
