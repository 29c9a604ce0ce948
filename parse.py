"""Tesseract text extraction and result-screen field parsing.

Handles all text-to-data conversion: OCR of the full screenshot and
pattern-based parsing of the raw text into typed fields. Parsing never raises:
anything that does not match falls back to the field's default. No
matching or export logic belongs here.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np
import pytesseract

from config import DEFAULT_SEASON

logger = logging.getLogger(__name__)

SEASON_PATTERN = re.compile(r"Season\s+([0-9IVX]+)", re.IGNORECASE)
STAGE_PATTERN = re.compile(r"Stage\s*([0-9]+[^\n]*)", re.IGNORECASE)
ROOM_PATTERN = re.compile(r"Stage\s*(\d+)", re.IGNORECASE)
POWER_PATTERN = re.compile(r"Power[:\s]+([0-9,]+)", re.IGNORECASE)
VICTORY_POINTS_PATTERN = re.compile(
    r"Total Victory Points[:\s]+([0-9,]+)", re.IGNORECASE,
)


@dataclass(frozen=True)
class ParsedFields:
    """Typed fields read from the result screen text."""

    season: str
    stage_name: str = ""
    room: Optional[int] = None
    attack_power: int = 0
    defense_power: int = 0
    victory_points: int = 0


def extract_text(image: np.ndarray) -> str:
    """Run Tesseract on a screenshot and return the raw recognized text.

    OCR failure is not fatal: a missing Tesseract binary or an engine error
    is logged and an empty string is returned, so every parsed field falls
    back to its default.

    Args:
        image: A BGR numpy array of the full screenshot.

    Returns:
        The recognized text, or ``""`` if OCR failed.
    """
    rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    try:
        text = pytesseract.image_to_string(rgb)
    except pytesseract.TesseractNotFoundError:
        logger.warning("Tesseract is not installed or not on PATH; skipping OCR")
        return ""
    except pytesseract.TesseractError as exc:
        logger.warning("OCR failed: %s", exc)
        return ""
    logger.debug("OCR text (%d chars): %r", len(text), text)
    return text or ""


def parse_number(raw: str, default: int = 0) -> int:
    """Parse an integer that may contain comma grouping separators.

    Returns *default* for captures that are empty once the separators are
    stripped.
    """
    digits = raw.replace(",", "").strip()
    try:
        return int(digits)
    except ValueError:
        logger.debug("Unparseable number %r; using %d", raw, default)
        return default


def parse_season(text: str, default: str = DEFAULT_SEASON) -> str:
    """Return ``"Season <token>"`` for the first season marker, or *default*."""
    match = SEASON_PATTERN.search(text)
    if match is None:
        return default
    return f"Season {match.group(1)}"


def parse_stage_name(text: str) -> str:
    """Return the stage line (``"Stage 3-2 ..."``), or ``""`` if absent."""
    match = STAGE_PATTERN.search(text)
    if match is None:
        return ""
    return f"Stage {match.group(1)}".strip()


def parse_room(stage_name: str) -> Optional[int]:
    """Return the room number leading a stage name (``"Stage 3-2"`` → 3)."""
    match = ROOM_PATTERN.search(stage_name)
    if match is None:
        return None
    return int(match.group(1))


def parse_powers(text: str) -> tuple[int, int]:
    """Return ``(attack_power, defense_power)`` from the power markers.

    The first ``Power:`` occurrence is the attacker's and the second the
    defender's. Fewer than two occurrences yields ``(0, 0)``.
    """
    captures = POWER_PATTERN.findall(text)
    if len(captures) < 2:
        return 0, 0
    return parse_number(captures[0]), parse_number(captures[1])


def parse_victory_points(text: str) -> int:
    """Return the ``Total Victory Points`` value, or 0 if absent."""
    match = VICTORY_POINTS_PATTERN.search(text)
    if match is None:
        return 0
    return parse_number(match.group(1))


def extract_fields(
    raw_text: str,
    default_season: str = DEFAULT_SEASON,
) -> ParsedFields:
    """Parse the raw OCR text of a result screen into typed fields.

    Each field is parsed independently; a field whose pattern does not match
    takes its default (season → *default_season*, stage → ``""``, room →
    ``None``, numbers → 0).

    Args:
        raw_text: The OCR output for the whole screenshot (may be empty).
        default_season: Season used when none is found in the text.

    Returns:
        The parsed fields.
    """
    text = raw_text or ""
    stage_name = parse_stage_name(text)
    attack_power, defense_power = parse_powers(text)
    fields = ParsedFields(
        season=parse_season(text, default_season),
        stage_name=stage_name,
        room=parse_room(stage_name),
        attack_power=attack_power,
        defense_power=defense_power,
        victory_points=parse_victory_points(text),
    )
    logger.debug("Parsed fields: %s", fields)
    return fields
