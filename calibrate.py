#!/usr/bin/env python3
"""Manual calibration tool for the Crucible result extractor.

Provides commands for capturing result screens, checking the portrait slot
geometry, seeding the reference library from real screenshots, and tuning
the match threshold.

Subcommands::

    capture    Grab the primary monitor and save it as a labelled screenshot.
    slots      Draw every portrait slot onto a screenshot for visual checking.
    portrait   Crop one slot from a screenshot and save it as a reference portrait.
    distances  Print the closest library entries and distances for every slot.

Usage::

    python calibrate.py capture crucible_win
    python calibrate.py slots debug/screenshot.png
    python calibrate.py portrait debug/screenshot.png A3 iron_fist
    python calibrate.py distances debug/screenshot.png --top 3
"""

import argparse
import logging
import sys
from pathlib import Path

import cv2
import numpy as np

from capture import capture_screen, fit_to_width, load_screenshot, save_debug_image
from config import FINGERPRINT_SIZE, MATCH_THRESHOLD, PORTRAIT_DIR
from exceptions import ImageDecodeError
from fingerprint import build_fingerprint, fingerprint_distance
from library import PortraitLibrary, load_portrait_library
from regions import RelativeRect, SlotLayout, extract_region, to_pixel_box

logger = logging.getLogger(__name__)

ATTACK_COLOUR = (0, 200, 0)
DEFENSE_COLOUR = (0, 0, 255)


def _load_or_exit(source: Path) -> np.ndarray:
    try:
        image, _ = load_screenshot(source)
    except (FileNotFoundError, ImageDecodeError) as exc:
        print(f"Error: {exc}")
        sys.exit(1)
    return image


# ---------------------------------------------------------------------------
# Capture subcommand
# ---------------------------------------------------------------------------


def cmd_capture(args: argparse.Namespace) -> None:
    """Capture the primary monitor and save it to the debug directory."""
    label = args.label.replace(" ", "_")
    frame = fit_to_width(capture_screen())
    path = save_debug_image(frame, f"calibrate_{label}")
    print(f"Saved: {path}")


# ---------------------------------------------------------------------------
# Slots subcommand
# ---------------------------------------------------------------------------


def draw_slots(image: np.ndarray, layout: SlotLayout) -> np.ndarray:
    """Draw labelled rectangles for every slot on a copy of *image*.

    Attack slots are green, defense slots red. Boxes are drawn after
    clamping, so they show exactly the pixels that get fingerprinted.

    Args:
        image: BGR screenshot to annotate.
        layout: The slot geometry.

    Returns:
        Annotated copy of *image*.
    """
    annotated = image.copy()
    height, width = image.shape[:2]
    sides = [(layout.attack, ATTACK_COLOUR), (layout.defense, DEFENSE_COLOUR)]
    for slots, colour in sides:
        for rect in slots:
            x, y, w, h = to_pixel_box(rect, width, height)
            cv2.rectangle(annotated, (x, y), (x + w - 1, y + h - 1), colour, 2)
            cv2.putText(
                annotated,
                rect.id,
                (x + 4, max(12, y - 6)),
                cv2.FONT_HERSHEY_SIMPLEX,
                0.5,
                colour,
                1,
            )
    return annotated


def cmd_slots(args: argparse.Namespace) -> None:
    """Save an annotated copy of a screenshot with every slot outlined."""
    image = _load_or_exit(Path(args.source))
    annotated = draw_slots(image, SlotLayout.from_config())
    path = save_debug_image(annotated, "slots")
    print(f"Slot overlay saved: {path}")


# ---------------------------------------------------------------------------
# Portrait subcommand
# ---------------------------------------------------------------------------


def find_slot(layout: SlotLayout, slot_id: str) -> RelativeRect:
    """Return the slot named *slot_id* (case-insensitive).

    Raises:
        KeyError: If no slot has that id.
    """
    for rect in layout.slots:
        if rect.id.lower() == slot_id.lower():
            return rect
    raise KeyError(slot_id)


def save_portrait(
    image: np.ndarray,
    rect: RelativeRect,
    name: str,
    dest_dir: Path = PORTRAIT_DIR,
) -> Path:
    """Crop *rect* out of *image* and write it as ``<dest_dir>/<name>.png``."""
    dest_dir.mkdir(parents=True, exist_ok=True)
    filename = name if name.endswith(".png") else f"{name}.png"
    dest = dest_dir / filename
    cv2.imwrite(str(dest), extract_region(image, rect))
    logger.info("Saved portrait %s from slot %s", dest, rect.id)
    return dest


def cmd_portrait(args: argparse.Namespace) -> None:
    """Crop a slot from a screenshot into the portrait directory."""
    image = _load_or_exit(Path(args.source))
    layout = SlotLayout.from_config()
    try:
        rect = find_slot(layout, args.slot)
    except KeyError:
        ids = ", ".join(r.id for r in layout.slots)
        print(f"Error: unknown slot '{args.slot}'. Choose from: {ids}")
        sys.exit(1)

    dest = save_portrait(image, rect, args.name)
    print(f"Portrait saved: {dest}")
    print("Add it to PORTRAITS in config.py, e.g.:")
    print(f'    ("{args.name.replace("_", " ").title()}", "portraits/{dest.name}"),')


# ---------------------------------------------------------------------------
# Distances subcommand
# ---------------------------------------------------------------------------


def slot_distances(
    image: np.ndarray,
    layout: SlotLayout,
    library: PortraitLibrary,
    top: int = 3,
    size: int = FINGERPRINT_SIZE,
) -> dict[str, list[tuple[str, float]]]:
    """Rank library entries by distance for every slot.

    Args:
        image: The BGR screenshot.
        layout: Slot geometry.
        library: Reference library to compare against.
        top: Number of closest entries to keep per slot.
        size: Fingerprint grid size.

    Returns:
        Mapping of slot id to its *top* closest ``(name, distance)`` pairs,
        closest first.
    """
    ranking: dict[str, list[tuple[str, float]]] = {}
    for rect in layout.slots:
        fp = build_fingerprint(extract_region(image, rect), size)
        scored = [
            (entry.name, fingerprint_distance(fp, entry.fingerprint))
            for entry in library
        ]
        scored.sort(key=lambda item: item[1])
        ranking[rect.id] = scored[:top]
    return ranking


def cmd_distances(args: argparse.Namespace) -> None:
    """Print the closest portraits for each slot to help tune the threshold."""
    image = _load_or_exit(Path(args.source))
    library = load_portrait_library()
    if not library:
        print("Error: the reference library is empty — add PORTRAITS to config.py")
        sys.exit(1)

    ranking = slot_distances(image, SlotLayout.from_config(), library, top=args.top)
    for slot_id, scored in ranking.items():
        parts = [
            f"{name} {dist:.4f}{'*' if dist <= MATCH_THRESHOLD else ''}"
            for name, dist in scored
        ]
        print(f"  {slot_id}: " + ", ".join(parts))
    print(f"\n* = within MATCH_THRESHOLD ({MATCH_THRESHOLD})")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main() -> None:
    """Entry point — parse subcommand and dispatch."""
    parser = argparse.ArgumentParser(
        description="Manual calibration tool for the Crucible result extractor.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Typical workflow:\n"
            "  1. python calibrate.py capture crucible\n"
            "     Grab a result screen (or use an existing screenshot).\n"
            "  2. python calibrate.py slots debug/<screenshot>.png\n"
            "     Check the slot outlines; adjust ATTACK_SLOTS / DEFENSE_SLOTS.\n"
            "  3. python calibrate.py portrait debug/<screenshot>.png A1 name\n"
            "     Seed the reference library from known screenshots.\n"
            "  4. python calibrate.py distances debug/<screenshot>.png\n"
            "     Confirm matches fall inside MATCH_THRESHOLD."
        ),
    )
    subparsers = parser.add_subparsers(dest="command")

    capture_parser = subparsers.add_parser(
        "capture", help="Capture the primary monitor as a labelled screenshot",
    )
    capture_parser.add_argument("label", help="Label included in the filename")

    slots_parser = subparsers.add_parser(
        "slots", help="Outline every portrait slot on a screenshot",
    )
    slots_parser.add_argument("source", help="Path to the screenshot")

    portrait_parser = subparsers.add_parser(
        "portrait", help="Crop a slot into the portrait directory",
    )
    portrait_parser.add_argument("source", help="Path to the screenshot")
    portrait_parser.add_argument("slot", help="Slot id (e.g. A1, D3)")
    portrait_parser.add_argument(
        "name", help="File name (e.g. 'iron_fist' → portraits/iron_fist.png)",
    )

    distances_parser = subparsers.add_parser(
        "distances", help="Print the closest portraits for each slot",
    )
    distances_parser.add_argument("source", help="Path to the screenshot")
    distances_parser.add_argument(
        "--top", type=int, default=3, help="Entries to show per slot (default: 3)",
    )

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )

    commands = {
        "capture": cmd_capture,
        "slots": cmd_slots,
        "portrait": cmd_portrait,
        "distances": cmd_distances,
    }
    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return
    handler(args)


if __name__ == "__main__":
    main()
