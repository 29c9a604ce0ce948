"""Portrait slot geometry and cropping.

Slots are defined in relative units (fractions of the screenshot width and
height) so the layout survives resolution changes as long as the screen's
proportions stay the same.
"""

import logging
from dataclasses import dataclass

import numpy as np

from config import ATTACK_SLOTS, DEFENSE_SLOTS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RelativeRect:
    """A named slot rectangle in fractions of the source image size."""

    id: str
    x: float
    y: float
    w: float
    h: float


@dataclass(frozen=True)
class SlotLayout:
    """Ordered attack and defense slots for one result screen."""

    attack: tuple[RelativeRect, ...]
    defense: tuple[RelativeRect, ...]

    @classmethod
    def from_config(cls) -> "SlotLayout":
        """Build the layout from ``config.ATTACK_SLOTS`` / ``DEFENSE_SLOTS``."""
        return cls(
            attack=tuple(RelativeRect(*slot) for slot in ATTACK_SLOTS),
            defense=tuple(RelativeRect(*slot) for slot in DEFENSE_SLOTS),
        )

    @property
    def slots(self) -> tuple[RelativeRect, ...]:
        """All slots, attack first, each side in declared order."""
        return self.attack + self.defense


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def to_pixel_box(
    rect: RelativeRect,
    width: int,
    height: int,
) -> tuple[int, int, int, int]:
    """Convert a relative rectangle to an in-bounds ``(x, y, w, h)`` box.

    The origin is clamped into the image and the extents are clamped to the
    remaining space, with a floor of one pixel. An origin sitting exactly on
    the right or bottom edge is pulled back one pixel so the box still
    covers real pixels.

    Args:
        rect: The slot in relative units.
        width: Source image width in pixels (>= 1).
        height: Source image height in pixels (>= 1).

    Returns:
        Absolute pixel coordinates ``(x, y, w, h)`` with ``w, h >= 1`` and
        ``x + w <= width``, ``y + h <= height``.
    """
    x = _clamp(round(rect.x * width), 0, width - 1)
    y = _clamp(round(rect.y * height), 0, height - 1)
    w = _clamp(round(rect.w * width), 1, width - x)
    h = _clamp(round(rect.h * height), 1, height - y)
    return x, y, w, h


def extract_region(image: np.ndarray, rect: RelativeRect) -> np.ndarray:
    """Crop a slot out of a screenshot.

    Args:
        image: A BGR numpy array of the full screenshot.
        rect: The slot to crop.

    Returns:
        A new array holding only the slot's pixels. It never shares memory
        with *image*. An image with no pixels yields an empty copy.
    """
    height, width = image.shape[:2]
    if width == 0 or height == 0:
        return image.copy()
    x, y, w, h = to_pixel_box(rect, width, height)
    logger.debug("Slot %s → box (%d, %d, %d, %d)", rect.id, x, y, w, h)
    return image[y:y + h, x:x + w].copy()
