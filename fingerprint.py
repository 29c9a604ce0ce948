"""Tiny grayscale fingerprints for portrait comparison.

A fingerprint is a ``size x size`` grid of mean channel intensities scaled to
``[0, 1]`` and flattened row-major. It is the shared primitive used both when
building the reference library and when matching a cropped slot.
"""

import logging
import math

import cv2
import numpy as np

from config import FINGERPRINT_SIZE

logger = logging.getLogger(__name__)


def _as_bgr(image: np.ndarray) -> np.ndarray:
    """Normalise grayscale and BGRA buffers to three channels."""
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    if image.shape[2] == 4:
        return np.ascontiguousarray(image[:, :, :3])
    return image


def build_fingerprint(
    image: np.ndarray,
    size: int = FINGERPRINT_SIZE,
) -> np.ndarray:
    """Downsample an image to a fixed-size grayscale intensity vector.

    The image is resampled with ``cv2.resize`` (bilinear, deterministic) to
    ``size x size``; each cell becomes the mean of its three colour channels
    divided by 255. Tiny inputs (down to 1x1) are stretched to fill the grid.

    Args:
        image: A BGR (or grayscale / BGRA) uint8 numpy array.
        size: Side length of the fingerprint grid.

    Returns:
        A read-only float32 array of length ``size * size`` with values in
        ``[0, 1]``. An empty input yields an all-zero fingerprint.
    """
    if image.size == 0:
        logger.debug("Empty image passed to build_fingerprint; using zeros")
        fp = np.zeros(size * size, dtype=np.float32)
        fp.setflags(write=False)
        return fp

    small = cv2.resize(
        _as_bgr(image), (size, size), interpolation=cv2.INTER_LINEAR,
    )
    fp = small.astype(np.float32).mean(axis=2).reshape(-1) / 255.0
    fp = np.clip(fp, 0.0, 1.0)
    fp.setflags(write=False)
    return fp


def fingerprint_distance(a: np.ndarray, b: np.ndarray) -> float:
    """Return the RMS distance between two fingerprints.

    Computes ``sqrt(mean((a_i - b_i) ** 2))``. Fingerprints of different
    lengths are not comparable and yield ``math.inf`` so the comparison can
    never win a match.
    """
    if a.shape != b.shape or a.size == 0:
        logger.warning(
            "Fingerprint length mismatch: %d vs %d", a.size, b.size,
        )
        return math.inf
    diff = a.astype(np.float64) - b.astype(np.float64)
    return float(np.sqrt(np.mean(diff * diff)))
