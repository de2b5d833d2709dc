"""Reads the text off a business card photo.

Loads an image from a path or uploaded bytes, applies EXIF orientation,
runs the preprocessing steps, and hands the result to Tesseract.
"""

import io
from pathlib import Path

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from src.preprocessing.pipeline import CardImagePreprocessor
from src.utils.config import AppConfig
from src.utils.logger import get_logger

from .tesseract_engine import OCRResult, TesseractEngine

logger = get_logger(__name__)


class InvalidImageError(ValueError):
    """Raised when the input cannot be decoded as an image."""


class NoTextDetectedError(Exception):
    """Raised when OCR finds no text on the card."""

    def __init__(self, source: str = "image") -> None:
        super().__init__(f"No text detected in {source}")
        self.source = source


class CardReader:
    """Image-to-text front end of the lead capture pipeline.

    Args:
        config: Application configuration object.
        engine: OCR engine; built from ``config.ocr`` when omitted.
    """

    def __init__(self, config: AppConfig, engine: TesseractEngine | None = None) -> None:
        self.config = config
        self.engine = engine or TesseractEngine(
            tesseract_cmd=config.ocr.tesseract_cmd,
            default_lang=config.ocr.default_lang,
        )
        self.preprocessor = CardImagePreprocessor(config.preprocessing)

    def read(self, source: Path | bytes, filename: str = "image") -> OCRResult:
        """Recognize the text on one card.

        Args:
            source: Path to an image file, or raw image bytes.
            filename: Display name used in log messages and errors.

        Returns:
            OCR result whose text contains at least one non-blank character.

        Raises:
            InvalidImageError: If the source is not a readable image.
            NoTextDetectedError: If OCR produced only whitespace.
            OCRError: If the OCR engine fails.
        """
        logger.info("Reading business card: %s", filename)
        image = self.load_image(source)
        processed = self.preprocessor.process(image)
        result = self.engine.extract_text(processed, psm=self.config.ocr.psm)

        if not result.has_text:
            logger.warning("No text detected in %s", filename)
            raise NoTextDetectedError(filename)
        return result

    @staticmethod
    def load_image(source: Path | bytes) -> np.ndarray:
        """Decode an image into an RGB numpy array.

        Raises:
            InvalidImageError: If the data cannot be decoded.
        """
        try:
            if isinstance(source, bytes):
                img = Image.open(io.BytesIO(source))
            else:
                img = Image.open(Path(source))
            img = ImageOps.exif_transpose(img)
            return np.array(img.convert("RGB"))
        except (UnidentifiedImageError, OSError) as exc:
            raise InvalidImageError(f"Unable to read image: {exc}") from exc
