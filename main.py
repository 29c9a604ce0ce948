"""Entry point and pipeline orchestration for the Crucible result extractor.

Executes the full run sequence for one screenshot:
1. Startup — build the reference portrait library.
2. Load — decode the screenshot (or capture the screen) and run OCR.
3. Extract — match the ten portrait slots and parse the text fields.
4. Export — optionally send the row to the Apps Script web app or append it
   directly to the results worksheet.

Decode and export errors are fatal: they are logged with a full traceback
and the process exits with a non-zero code. OCR failure is not; the fields
simply fall back to their defaults.

Usage::

    python main.py screenshot.png
    python main.py screenshot.png --send
    python main.py --screen --season "Season 19" --json
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from capture import capture_screen, encode_png, fit_to_width, load_screenshot
from config import (
    DEFAULT_SEASON,
    FINGERPRINT_SIZE,
    GOOGLE_SCRIPT_URL,
    MATCH_THRESHOLD,
    SPREADSHEET_ID,
)
from exceptions import ExportError, ImageDecodeError
from export import (
    append_result_row,
    build_row,
    get_sheets_client,
    open_results_sheet,
    send_to_apps_script,
)
from library import load_portrait_library
from parse import extract_text
from pipeline import ResultRecord, process
from regions import SlotLayout

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Extract Crucible match data from a result screenshot.",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("screenshot", nargs="?", type=Path, help="Screenshot file")
    source.add_argument(
        "--screen", action="store_true", help="Capture the primary monitor instead",
    )
    parser.add_argument("--season", default=DEFAULT_SEASON, help="Fallback season")
    parser.add_argument(
        "--threshold", type=float, default=MATCH_THRESHOLD,
        help="Maximum fingerprint distance accepted as a match",
    )
    parser.add_argument(
        "--size", type=int, default=FINGERPRINT_SIZE, help="Fingerprint grid size",
    )
    parser.add_argument(
        "--workers", type=int, default=None,
        help="Match slots on a thread pool of this size",
    )
    parser.add_argument("--json", action="store_true", help="Print the row as JSON")
    parser.add_argument(
        "--send", action="store_true",
        help="Send the row (and screenshot) to the configured sheet",
    )
    parser.add_argument("--script-url", default=GOOGLE_SCRIPT_URL)
    parser.add_argument("--spreadsheet-id", default=SPREADSHEET_ID)
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def format_summary(record: ResultRecord) -> str:
    """Render a record as human-readable text for the terminal."""
    fields = record.fields
    metrics = record.metrics
    lines = [
        f"Season:          {fields.season}",
        f"Stage:           {fields.stage_name}",
        f"Room:            {fields.room if fields.room is not None else ''}",
        f"Attack power:    {fields.attack_power:,}",
        f"Defense power:   {fields.defense_power:,}",
        f"Victory points:  {fields.victory_points:,}",
        f"Result:          {metrics.label}",
        f"Power diff:      {metrics.differential_text} ({metrics.percentage_text})",
        "Attack:          " + ", ".join(name or "?" for name in record.attack_names),
        "Defense:         " + ", ".join(name or "?" for name in record.defense_names),
    ]
    return "\n".join(lines)


def export_row(
    row: list,
    image_bytes: bytes,
    script_url: str,
    spreadsheet_id: str,
) -> Optional[str]:
    """Send *row* to whichever destination is configured.

    The Apps Script web app is preferred because it also stores the
    screenshot; otherwise the row is appended directly with gspread.

    Returns:
        The screenshot link from the web app, or ``None`` for direct append.

    Raises:
        ExportError: If neither destination is configured or sending fails.
    """
    if script_url:
        return send_to_apps_script(script_url, row, image_bytes)
    if spreadsheet_id:
        worksheet = open_results_sheet(get_sheets_client(), spreadsheet_id)
        append_result_row(worksheet, row)
        return None
    raise ExportError("<unset>", "set GOOGLE_SCRIPT_URL or SPREADSHEET_ID in config.py")


def main(argv: Optional[list[str]] = None) -> None:
    """Run the extract-and-export pipeline for one screenshot.

    Raises:
        SystemExit: On any fatal error, after logging the full traceback.
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )

    try:
        library = load_portrait_library(size=args.size)

        if args.screen:
            image = fit_to_width(capture_screen())
            image_bytes = encode_png(image)
        else:
            image, image_bytes = load_screenshot(args.screenshot)

        raw_text = extract_text(image)
        record = process(
            image,
            SlotLayout.from_config(),
            library,
            raw_text,
            default_season=args.season,
            threshold=args.threshold,
            size=args.size,
            max_workers=args.workers,
        )
        row = build_row(record)

        if args.json:
            print(json.dumps(row, ensure_ascii=False))
        else:
            print(format_summary(record))

        if args.send:
            link = export_row(row, image_bytes, args.script_url, args.spreadsheet_id)
            if link:
                print(f"Screenshot: {link}")
    except (FileNotFoundError, ImageDecodeError, ExportError):
        logger.exception("Fatal error")
        sys.exit(1)


if __name__ == "__main__":
    main()
