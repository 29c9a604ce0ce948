"""Central configuration for the Crucible result-screen extractor.

This module is the single source of truth for all magic values — slot
geometry, matching thresholds, fingerprint size, portrait list, and export
endpoints. Never hardcode these values elsewhere.

Slot rectangles are rough guesses for the standard Crucible result screen and
are expected to be tuned with ``calibrate.py slots``.
"""

from pathlib import Path
from typing import Final

# ---------------------------------------------------------------------------
# Project paths
# ---------------------------------------------------------------------------

PROJECT_ROOT: Final[Path] = Path(__file__).resolve().parent
DEBUG_DIR: Final[Path] = PROJECT_ROOT / "debug"
PORTRAIT_DIR: Final[Path] = PROJECT_ROOT / "portraits"

# ---------------------------------------------------------------------------
# Export — Google Apps Script web app
# ---------------------------------------------------------------------------

# Deployed web app URL (deploy as "Anyone with link"). Empty disables sending.
GOOGLE_SCRIPT_URL: Final[str] = ""

# Seconds to wait for the web app to store the image and append the row.
EXPORT_TIMEOUT: Final[float] = 30.0

# ---------------------------------------------------------------------------
# Export — direct worksheet append via gspread (no image storage)
# ---------------------------------------------------------------------------

# Path to the service account JSON key file. Never commit this file.
SERVICE_ACCOUNT_KEY_PATH: Final[Path] = PROJECT_ROOT / "service_account.json"

# The Google Spreadsheet ID (from the URL). Empty disables direct append.
SPREADSHEET_ID: Final[str] = ""

SHEET_RESULTS_TAB: Final[str] = "Crucible"

# ---------------------------------------------------------------------------
# Row layout (columns A–T, strictly enforced)
# ---------------------------------------------------------------------------

COLUMN_ORDER: Final[list[str]] = [
    "Defense 1",
    "Defense 2",
    "Defense 3",
    "Defense 4",
    "Defense 5",
    "Attack 1",
    "Attack 2",
    "Attack 3",
    "Attack 4",
    "Attack 5",
    "Season",
    "Room",
    "Punch",
    "Attack Power",
    "Defense Power",
    "Power Diff",
    "Victory Points",
    "",
    "Power Diff %",
    "Screenshot",
]

TEAM_SIZE: Final[int] = 5

# ---------------------------------------------------------------------------
# Field extraction
# ---------------------------------------------------------------------------

# Used when OCR cannot find a season on the screen.
DEFAULT_SEASON: Final[str] = "Season 18"

# ---------------------------------------------------------------------------
# Screenshots
# ---------------------------------------------------------------------------

# Screenshots wider than this are downscaled before slot extraction.
SCREENSHOT_MAX_WIDTH: Final[int] = 920

# ---------------------------------------------------------------------------
# Portrait matching
# ---------------------------------------------------------------------------

# Fingerprints are FINGERPRINT_SIZE x FINGERPRINT_SIZE grayscale grids.
FINGERPRINT_SIZE: Final[int] = 16

# Maximum RMS fingerprint distance accepted as a match (empirically tuned).
MATCH_THRESHOLD: Final[float] = 0.12

# Worker threads used to fingerprint reference portraits at startup.
LIBRARY_WORKERS: Final[int] = 4

# Seconds to wait when a portrait source is an http(s) URL.
PORTRAIT_FETCH_TIMEOUT: Final[float] = 10.0

# ---------------------------------------------------------------------------
# Portrait slots — (id, x, y, w, h) as fractions of width / height
# ---------------------------------------------------------------------------

ATTACK_SLOTS: Final[tuple[tuple[str, float, float, float, float], ...]] = (
    ("A1", 0.11, 0.40, 0.07, 0.25),
    ("A2", 0.21, 0.40, 0.07, 0.25),
    ("A3", 0.31, 0.40, 0.07, 0.25),
    ("A4", 0.41, 0.40, 0.07, 0.25),
    ("A5", 0.51, 0.40, 0.07, 0.25),
)

DEFENSE_SLOTS: Final[tuple[tuple[str, float, float, float, float], ...]] = (
    ("D1", 0.59, 0.40, 0.07, 0.25),
    ("D2", 0.69, 0.40, 0.07, 0.25),
    ("D3", 0.79, 0.40, 0.07, 0.25),
    ("D4", 0.89, 0.40, 0.07, 0.25),
    ("D5", 0.99, 0.40, 0.07, 0.25),
)

# ---------------------------------------------------------------------------
# Portrait library — (name, path or URL)
# ---------------------------------------------------------------------------
# The name is what gets written into the sheet. Relative paths resolve
# against PROJECT_ROOT. Order matters: ties go to the earlier entry.

PORTRAITS: Final[tuple[tuple[str, str], ...]] = (
    ("Lady Deathstrike", "portraits/lady_deathstrike.png"),
    ("Iron Fist", "portraits/iron_fist.png"),
    ("Iron Fist WWII", "portraits/iron_fist_wwii.png"),
    ("Sword Master", "portraits/sword_master.png"),
    ("Steel Serpent", "portraits/steel_serpent.png"),
)
