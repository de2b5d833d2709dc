"""Image cleanup applied to card photos before OCR.

Phone photos of business cards are often small, slightly rotated, and
unevenly lit. The steps here upscale, straighten, denoise, even out
contrast, and binarize the image, each switchable from configuration.
"""

import cv2
import numpy as np

from src.utils.config import PreprocessingConfig
from src.utils.logger import get_logger

logger = get_logger(__name__)


def to_grayscale(image: np.ndarray) -> np.ndarray:
    if image.ndim == 3:
        code = cv2.COLOR_RGBA2GRAY if image.shape[2] == 4 else cv2.COLOR_RGB2GRAY
        return cv2.cvtColor(image, code)
    return image


def upscale(image: np.ndarray, min_width: int) -> np.ndarray:
    """Enlarge the image so it is at least ``min_width`` pixels wide.

    Args:
        image: Grayscale image.
        min_width: Target width; images already this wide are returned as-is.

    Returns:
        The original or an enlarged copy with the same aspect ratio.
    """
    height, width = image.shape[:2]
    if width == 0 or width >= min_width:
        return image
    scale = min_width / width
    resized = cv2.resize(
        image,
        (min_width, max(1, round(height * scale))),
        interpolation=cv2.INTER_CUBIC,
    )
    logger.debug("Upscaled card image by %.2fx", scale)
    return resized


def estimate_skew(image: np.ndarray) -> float:
    """Estimate the rotation of the text block in degrees.

    Fits a minimum-area rectangle around the dark (ink) pixels.

    Args:
        image: Grayscale image.

    Returns:
        Angle in ``(-45, 45]``; ``0.0`` when the image has no ink.
    """
    _, inverted = cv2.threshold(
        image, 0, 255, cv2.THRESH_BINARY_INV + cv2.THRESH_OTSU
    )
    coords = cv2.findNonZero(inverted)
    if coords is None or len(coords) < 5:
        return 0.0

    angle = float(cv2.minAreaRect(coords)[-1])
    if angle > 45:
        angle -= 90
    elif angle < -45:
        angle += 90
    return angle


def deskew(image: np.ndarray, max_angle: float = 15.0, min_angle: float = 0.5) -> np.ndarray:
    """Rotate the image so the text lines are horizontal.

    Angles outside ``[min_angle, max_angle]`` are left alone; large
    estimates usually come from the card edge rather than the text.
    """
    angle = estimate_skew(image)
    if not min_angle <= abs(angle) <= max_angle:
        return image

    height, width = image.shape[:2]
    matrix = cv2.getRotationMatrix2D((width / 2, height / 2), angle, 1.0)
    rotated = cv2.warpAffine(
        image,
        matrix,
        (width, height),
        flags=cv2.INTER_CUBIC,
        borderMode=cv2.BORDER_REPLICATE,
    )
    logger.debug("Deskewed card image by %.2f degrees", angle)
    return rotated


def denoise(image: np.ndarray, method: str = "bilateral") -> np.ndarray:
    """Smooth sensor noise while keeping character edges.

    Raises:
        ValueError: If ``method`` is not ``"bilateral"`` or ``"gaussian"``.
    """
    if method == "bilateral":
        return cv2.bilateralFilter(image, 9, 75, 75)
    if method == "gaussian":
        return cv2.GaussianBlur(image, (5, 5), 0)
    raise ValueError(f"Unsupported denoise method: {method}")


def enhance_contrast(
    image: np.ndarray, clip_limit: float = 2.0, tile_size: int = 8
) -> np.ndarray:
    clahe = cv2.createCLAHE(clipLimit=clip_limit, tileGridSize=(tile_size, tile_size))
    return clahe.apply(image)


def binarize(image: np.ndarray, method: str = "adaptive") -> np.ndarray:
    """Convert to black text on white.

    Adaptive thresholding copes with the glare and shadows typical of
    handheld photos; Otsu is faster for flat scans.

    Raises:
        ValueError: If ``method`` is not ``"adaptive"`` or ``"otsu"``.
    """
    if method == "adaptive":
        return cv2.adaptiveThreshold(
            image,
            255,
            cv2.ADAPTIVE_THRESH_GAUSSIAN_C,
            cv2.THRESH_BINARY,
            31,
            10,
        )
    if method == "otsu":
        _, binary = cv2.threshold(image, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
        return binary
    raise ValueError(f"Unsupported binarize method: {method}")


class CardImagePreprocessor:
    """Runs the configured cleanup steps on a card photo.

    Args:
        config: Preprocessing configuration controlling which steps run.
    """

    def __init__(self, config: PreprocessingConfig) -> None:
        self.config = config

    def process(self, image: np.ndarray) -> np.ndarray:
        """Prepare a card image for OCR.

        Args:
            image: RGB, RGBA, or grayscale image.

        Returns:
            Grayscale (or binary) image; the input is returned unchanged
            when preprocessing is disabled.
        """
        if not self.config.enabled:
            return image

        result = to_grayscale(image)
        result = upscale(result, self.config.min_width)

        if self.config.deskew_enabled:
            result = deskew(result)

        if self.config.denoise_enabled:
            result = denoise(result, method=self.config.denoise_method)

        if self.config.contrast_enabled:
            result = enhance_contrast(
                result,
                clip_limit=self.config.clahe_clip_limit,
                tile_size=self.config.clahe_tile_size,
            )

        if self.config.binarize_enabled:
            result = binarize(result, method=self.config.binarize_method)

        logger.info("Preprocessed card image to %dx%d", result.shape[1], result.shape[0])
        return result
