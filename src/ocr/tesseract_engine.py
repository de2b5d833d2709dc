"""Tesseract OCR wrapper for business card images.

Returns the card text with word-level boxes and confidences. The parser
only reads the text; the boxes are kept for callers that want them.
"""

from dataclasses import dataclass

import numpy as np
import pytesseract
from PIL import Image

from src.utils.logger import get_logger

logger = get_logger(__name__)


class OCRError(RuntimeError):
    """Raised when the OCR engine cannot process an image."""


@dataclass
class BoundingBox:
    """Axis-aligned box of a detected word, in pixels."""

    x: int
    y: int
    width: int
    height: int


@dataclass
class OCRWord:
    """A single word recognized on the card."""

    text: str
    bbox: BoundingBox
    confidence: float
    line_num: int


@dataclass
class OCRResult:
    """Text recognized on one card image."""

    text: str
    words: list[OCRWord]
    language: str
    confidence: float

    @property
    def has_text(self) -> bool:
        return bool(self.text.strip())


class TesseractEngine:
    """Runs Tesseract through pytesseract.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the one found on ``PATH``.
        default_lang: Default OCR language code.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        default_lang: str = "eng",
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.default_lang = default_lang

    def is_available(self) -> bool:
        """Check whether the Tesseract binary can be executed."""
        try:
            pytesseract.get_tesseract_version()
        except pytesseract.TesseractNotFoundError:
            return False
        return True

    def extract_text(
        self,
        image: np.ndarray,
        lang: str | None = None,
        psm: int = 3,
    ) -> OCRResult:
        """Recognize the text on a card image.

        Args:
            image: Card image as a numpy array.
            lang: OCR language code. Defaults to the engine default.
            psm: Tesseract page segmentation mode.

        Returns:
            OCRResult with the full text, recognized words, and the mean
            word confidence in ``[0, 1]``.

        Raises:
            OCRError: If Tesseract is missing or fails on the image.
        """
        lang = lang or self.default_lang
        config = f"--psm {psm}"
        pil_image = Image.fromarray(image)

        try:
            text = pytesseract.image_to_string(pil_image, lang=lang, config=config)
            data = pytesseract.image_to_data(
                pil_image,
                lang=lang,
                config=config,
                output_type=pytesseract.Output.DICT,
            )
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as exc:
            raise OCRError(f"OCR processing failed: {exc}") from exc

        words = self._collect_words(data)
        confidence = (
            sum(w.confidence for w in words) / len(words) if words else 0.0
        )

        logger.info(
            "OCR recognized %d words with average confidence %.2f",
            len(words),
            confidence,
        )
        return OCRResult(
            text=text,
            words=words,
            language=lang,
            confidence=confidence,
        )

    @staticmethod
    def _collect_words(data: dict) -> list[OCRWord]:
        words: list[OCRWord] = []
        for i, raw_text in enumerate(data["text"]):
            word_text = raw_text.strip()
            conf = float(data["conf"][i])
            # Tesseract reports -1 for layout rows that carry no word.
            if conf <= 0 or not word_text:
                continue
            words.append(
                OCRWord(
                    text=word_text,
                    bbox=BoundingBox(
                        x=data["left"][i],
                        y=data["top"][i],
                        width=data["width"][i],
                        height=data["height"][i],
                    ),
                    confidence=conf / 100.0,
                    line_num=data["line_num"][i],
                )
            )
        return words
