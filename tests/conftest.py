"""Shared test configuration and fixtures.

Provides synthetic BGR images and small reference libraries so the
extraction core can be exercised without real screenshots or portraits.
"""

from collections.abc import Callable

import numpy as np
import pytest

from fingerprint import build_fingerprint
from library import PortraitLibrary, ReferenceEntry
from regions import SlotLayout, to_pixel_box

# Gray levels far enough apart (> MATCH_THRESHOLD * 255) to never cross-match.
SHADES: dict[str, int] = {
    "Lady Deathstrike": 0,
    "Iron Fist": 50,
    "Iron Fist WWII": 100,
    "Sword Master": 150,
    "Steel Serpent": 200,
}


@pytest.fixture
def solid_image() -> Callable[..., np.ndarray]:
    """Factory for single-colour BGR images."""

    def make(
        value: int | tuple[int, int, int],
        width: int = 32,
        height: int = 32,
    ) -> np.ndarray:
        image = np.zeros((height, width, 3), dtype=np.uint8)
        image[:, :] = value
        return image

    return make


@pytest.fixture
def shade_library() -> PortraitLibrary:
    """A library with one solid-gray portrait per entry of ``SHADES``."""
    entries = []
    for name, shade in SHADES.items():
        image = np.full((40, 30, 3), shade, dtype=np.uint8)
        entries.append(ReferenceEntry(name, build_fingerprint(image), f"{name}.png"))
    return PortraitLibrary(tuple(entries))


@pytest.fixture
def layout() -> SlotLayout:
    return SlotLayout.from_config()


@pytest.fixture
def paint_slots() -> Callable[..., np.ndarray]:
    """Factory that paints each slot of a layout with a gray level."""

    def make(
        layout: SlotLayout,
        shades: list[int],
        width: int = 200,
        height: int = 100,
        background: int = 255,
    ) -> np.ndarray:
        image = np.full((height, width, 3), background, dtype=np.uint8)
        for rect, shade in zip(layout.slots, shades):
            x, y, w, h = to_pixel_box(rect, width, height)
            image[y:y + h, x:x + w] = shade
        return image

    return make
