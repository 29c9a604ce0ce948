"""Result-screen processing: portrait matching plus field extraction.

Sequences the core for one screenshot:

1. Portraits — crop each slot, fingerprint it, match it against the library.
2. Fields — parse the OCR text into typed values.
3. Metrics — compare the parsed power totals.

The result is a single immutable record. Nothing in here raises on bad
input; unmatched slots and unparsed fields are carried through as empty
values.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

import numpy as np

from config import DEFAULT_SEASON, FINGERPRINT_SIZE, MATCH_THRESHOLD
from library import PortraitLibrary
from match import MatchResult, match_region
from metrics import Metrics, compute_metrics
from parse import ParsedFields, extract_fields
from regions import RelativeRect, SlotLayout, extract_region

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResultRecord:
    """Everything extracted from one result screen."""

    attack_names: tuple[str, ...]
    defense_names: tuple[str, ...]
    fields: ParsedFields
    metrics: Metrics


def match_slots(
    image: np.ndarray,
    slots: tuple[RelativeRect, ...],
    library: PortraitLibrary,
    threshold: float = MATCH_THRESHOLD,
    size: int = FINGERPRINT_SIZE,
    max_workers: Optional[int] = None,
) -> list[MatchResult]:
    """Match every slot in *slots* against the library.

    Slots are independent, so with ``max_workers > 1`` they are processed on
    a thread pool. Results always come back in slot order.

    Args:
        image: The full screenshot as a BGR numpy array.
        slots: Slots to match, in output order.
        library: The reference library.
        threshold: Maximum accepted fingerprint distance.
        size: Fingerprint grid size.
        max_workers: Thread pool size; ``None`` or 1 runs sequentially.

    Returns:
        One ``MatchResult`` per slot, in the order of *slots*.
    """
    def match_one(rect: RelativeRect) -> MatchResult:
        result = match_region(extract_region(image, rect), library, threshold, size)
        logger.debug("Slot %s → %r", rect.id, result.name)
        return result

    if max_workers is None or max_workers <= 1:
        return [match_one(rect) for rect in slots]

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(match_one, slots))


def process(
    image: np.ndarray,
    layout: SlotLayout,
    library: PortraitLibrary,
    raw_text: str,
    default_season: str = DEFAULT_SEASON,
    threshold: float = MATCH_THRESHOLD,
    size: int = FINGERPRINT_SIZE,
    max_workers: Optional[int] = None,
) -> ResultRecord:
    """Extract one complete result record from a screenshot.

    Args:
        image: The full screenshot as a BGR numpy array.
        layout: Attack and defense slot geometry.
        library: The reference library, built once at startup.
        raw_text: OCR output for the screenshot (``""`` if OCR failed).
        default_season: Season used when the text has none.
        threshold: Maximum accepted fingerprint distance.
        size: Fingerprint grid size.
        max_workers: Optional thread pool size for per-slot matching.

    Returns:
        The assembled record. Unmatched slots hold ``""``.
    """
    if not library:
        logger.warning("Reference library is empty; no portraits will match")

    matches = match_slots(
        image, layout.slots, library, threshold, size, max_workers,
    )
    names = [m.name for m in matches]
    attack_names = tuple(names[:len(layout.attack)])
    defense_names = tuple(names[len(layout.attack):])

    fields = extract_fields(raw_text, default_season)
    metrics = compute_metrics(fields.attack_power, fields.defense_power)

    matched = sum(1 for name in names if name)
    logger.info(
        "Processed screenshot: %d/%d portraits matched, %s, %s",
        matched, len(names), fields.season, metrics.label,
    )
    return ResultRecord(
        attack_names=attack_names,
        defense_names=defense_names,
        fields=fields,
        metrics=metrics,
    )
