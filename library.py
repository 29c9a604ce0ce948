"""Reference portrait library construction.

Each configured portrait is decoded once and reduced to a fingerprint. The
result is an immutable, ordered library that is built at startup and passed
explicitly to the matcher. There is no module-level library state.
"""

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np
import requests

from capture import decode_image
from config import (
    FINGERPRINT_SIZE,
    LIBRARY_WORKERS,
    PORTRAIT_FETCH_TIMEOUT,
    PORTRAITS,
    PROJECT_ROOT,
)
from exceptions import ImageDecodeError
from fingerprint import build_fingerprint

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class ReferenceEntry:
    """A known portrait: display name, fingerprint, and where it came from."""

    name: str
    fingerprint: np.ndarray
    source: str = ""


@dataclass(frozen=True)
class PortraitLibrary:
    """Read-only, ordered collection of reference entries.

    Order is the configuration order and decides ties in matching.
    """

    entries: tuple[ReferenceEntry, ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def __bool__(self) -> bool:
        return bool(self.entries)

    @property
    def names(self) -> list[str]:
        return [entry.name for entry in self.entries]


def _read_source(source: str, base_dir: Path) -> bytes:
    """Fetch the encoded bytes for a portrait path or URL."""
    if source.startswith(("http://", "https://")):
        response = requests.get(source, timeout=PORTRAIT_FETCH_TIMEOUT)
        response.raise_for_status()
        return response.content
    path = Path(source)
    if not path.is_absolute():
        path = base_dir / path
    return path.read_bytes()


def load_portrait(
    name: str,
    source: str,
    size: int = FINGERPRINT_SIZE,
    base_dir: Path = PROJECT_ROOT,
) -> Optional[ReferenceEntry]:
    """Decode one reference portrait and fingerprint it.

    A portrait that cannot be read or decoded is not fatal: it is logged and
    left out of the library.

    Args:
        name: Character name written to the sheet on a match.
        source: File path (relative to *base_dir*) or ``http(s)`` URL.
        size: Fingerprint grid size.
        base_dir: Directory relative paths resolve against.

    Returns:
        The reference entry, or ``None`` if the image was unavailable.
    """
    try:
        image = decode_image(_read_source(source, base_dir), source=source)
    except (OSError, requests.RequestException, ImageDecodeError) as exc:
        logger.warning("Failed to load portrait %r from %s: %s", name, source, exc)
        return None
    return ReferenceEntry(
        name=name,
        fingerprint=build_fingerprint(image, size),
        source=source,
    )


def load_portrait_library(
    portraits: Iterable[tuple[str, str]] = PORTRAITS,
    size: int = FINGERPRINT_SIZE,
    base_dir: Path = PROJECT_ROOT,
    max_workers: int = LIBRARY_WORKERS,
) -> PortraitLibrary:
    """Build the reference library from ``(name, path-or-URL)`` pairs.

    Portraits are decoded and fingerprinted in parallel; ``executor.map``
    yields results in input order, so the library order always matches the
    configuration order regardless of completion order.

    Args:
        portraits: Ordered ``(name, source)`` pairs.
        size: Fingerprint grid size.
        base_dir: Directory relative paths resolve against.
        max_workers: Thread pool size.

    Returns:
        The immutable library. Portraits that failed to load are omitted.
    """
    pairs = list(portraits)
    if not pairs:
        logger.warning("No reference portraits configured")
        return PortraitLibrary()

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        results = executor.map(
            lambda pair: load_portrait(pair[0], pair[1], size, base_dir),
            pairs,
        )
        entries = tuple(entry for entry in results if entry is not None)

    logger.info("Loaded %d/%d reference portraits", len(entries), len(pairs))
    return PortraitLibrary(entries)
