"""Nearest-neighbour portrait matching against the reference library."""

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from config import FINGERPRINT_SIZE, MATCH_THRESHOLD
from fingerprint import build_fingerprint, fingerprint_distance
from library import PortraitLibrary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchResult:
    """Result of matching one slot.

    An empty *name* means no confident match and *distance* is ``None``.
    """

    name: str = ""
    distance: Optional[float] = None

    def __bool__(self) -> bool:
        return bool(self.name)


def match_portrait(
    fingerprint: np.ndarray,
    library: PortraitLibrary,
    threshold: float = MATCH_THRESHOLD,
) -> MatchResult:
    """Find the library entry closest to *fingerprint*.

    The entry with the smallest RMS distance wins; on equal distances the
    earlier entry in library order is kept. The winner is only accepted when
    its distance is at most *threshold*, so blank or unknown portraits come
    back empty instead of as a confident wrong guess.

    Args:
        fingerprint: Fingerprint of the cropped slot.
        library: The reference library.
        threshold: Maximum accepted distance.

    Returns:
        The matched name and distance, or an empty ``MatchResult``.
    """
    if not library:
        return MatchResult()

    best_name = ""
    best_dist = math.inf
    for entry in library:
        dist = fingerprint_distance(fingerprint, entry.fingerprint)
        if dist < best_dist:
            best_dist = dist
            best_name = entry.name

    if best_dist > threshold:
        logger.debug(
            "No confident match (best=%r, dist=%.4f, threshold=%.3f)",
            best_name, best_dist, threshold,
        )
        return MatchResult()

    logger.debug("Matched %r (dist=%.4f)", best_name, best_dist)
    return MatchResult(name=best_name, distance=best_dist)


def match_region(
    region: np.ndarray,
    library: PortraitLibrary,
    threshold: float = MATCH_THRESHOLD,
    size: int = FINGERPRINT_SIZE,
) -> MatchResult:
    """Fingerprint a cropped slot image and match it."""
    if not library:
        return MatchResult()
    return match_portrait(build_fingerprint(region, size), library, threshold)
