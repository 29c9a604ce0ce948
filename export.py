"""Google Sheets export of extracted result rows.

Two destinations are supported:

* A Google Apps Script web app (``send_to_apps_script``) that stores the
  screenshot on Drive, appends the row, and returns the image link.
* Direct worksheet append via ``gspread`` (``append_result_row``) using a
  service account. No image is stored in this mode.

Both write the same row, built in ``config.COLUMN_ORDER`` order by
``build_row``.
"""

import base64
import logging
from pathlib import Path
from typing import Any

import gspread
import requests

from config import (
    EXPORT_TIMEOUT,
    SERVICE_ACCOUNT_KEY_PATH,
    SHEET_RESULTS_TAB,
    TEAM_SIZE,
)
from exceptions import ExportError
from pipeline import ResultRecord

logger = logging.getLogger(__name__)


def _pad(names: tuple[str, ...], size: int = TEAM_SIZE) -> list[str]:
    """Trim/pad a team to exactly *size* names."""
    padded = [name.strip() for name in names][:size]
    return padded + [""] * (size - len(padded))


def build_row(record: ResultRecord) -> list[Any]:
    """Flatten a result record into the sheet row (columns A–T).

    Defense names come first, then attack names, each padded to
    ``TEAM_SIZE``. A missing room is written as 0. Column R is blank and
    column T is a placeholder the Apps Script fills with the image link.

    Args:
        record: The extracted result.

    Returns:
        A list with one value per entry of ``config.COLUMN_ORDER``.
    """
    fields = record.fields
    metrics = record.metrics
    row = [
        *_pad(record.defense_names),
        *_pad(record.attack_names),
        fields.season,
        fields.room or 0,
        metrics.label,
        fields.attack_power,
        fields.defense_power,
        metrics.differential,
        fields.victory_points,
        "",
        metrics.percentage,
        "",
    ]
    return row


def _guess_mime(data: bytes) -> str:
    if data.startswith(b"\x89PNG"):
        return "image/png"
    if data.startswith(b"\xff\xd8"):
        return "image/jpeg"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return "application/octet-stream"


def to_data_url(data: bytes) -> str:
    """Encode image bytes as a base64 ``data:`` URL."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{_guess_mime(data)};base64,{encoded}"


def send_to_apps_script(
    url: str,
    row: list[Any],
    image_bytes: bytes,
    timeout: float = EXPORT_TIMEOUT,
) -> str:
    """POST a row and its screenshot to the Apps Script web app.

    The payload is ``{"action": "appendRow", "row": ..., "imageDataURL":
    ...}``. The script appends the row, saves the image to Drive, and
    answers with JSON carrying ``imageUrl``.

    Args:
        url: The deployed web app URL.
        row: The row from ``build_row``.
        image_bytes: The original encoded screenshot.
        timeout: Request timeout in seconds.

    Returns:
        The Drive link for the stored screenshot, or ``""`` if the script
        did not return one.

    Raises:
        ExportError: If *url* is empty, the request fails, or the script
            answers with a non-success status.
    """
    if not url:
        raise ExportError("<unset>", "GOOGLE_SCRIPT_URL is not configured")

    payload = {
        "action": "appendRow",
        "row": row,
        "imageDataURL": to_data_url(image_bytes),
    }
    try:
        response = requests.post(url, json=payload, timeout=timeout)
    except requests.RequestException as exc:
        raise ExportError(url, f"network error: {exc}") from exc

    try:
        data = response.json()
    except ValueError:
        # Misconfigured deployments answer with an HTML page.
        data = {}
    if not isinstance(data, dict):
        data = {}

    if not response.ok:
        raise ExportError(
            url, str(data.get("error") or response.reason), status=response.status_code,
        )

    link = str(data.get("imageUrl") or "")
    if link:
        logger.info("Row added to sheet; screenshot stored at %s", link)
    else:
        logger.info("Row added to sheet (no image link returned)")
    return link


def get_sheets_client(
    key_path: Path = SERVICE_ACCOUNT_KEY_PATH,
) -> gspread.Client:
    """Authenticate with Google Sheets using the service account key.

    Raises:
        FileNotFoundError: If the service account key file does not exist.
    """
    if not Path(key_path).exists():
        raise FileNotFoundError(f"Service account key not found: {key_path}")
    return gspread.service_account(filename=str(key_path))


def open_results_sheet(
    client: gspread.Client,
    spreadsheet_id: str,
    tab: str = SHEET_RESULTS_TAB,
) -> gspread.Worksheet:
    """Open the results tab of the spreadsheet.

    Raises:
        ExportError: If no spreadsheet ID is configured.
    """
    if not spreadsheet_id:
        raise ExportError("<unset>", "SPREADSHEET_ID is not configured")
    return client.open_by_key(spreadsheet_id).worksheet(tab)


def append_result_row(worksheet: gspread.Worksheet, row: list[Any]) -> None:
    """Append a row to the results worksheet.

    Uses ``value_input_option="USER_ENTERED"`` so numbers are stored as
    numbers and can be formatted (e.g. the percentage column) in the sheet.

    Raises:
        ExportError: If the Sheets API rejects the write.
    """
    try:
        worksheet.append_row(row, value_input_option="USER_ENTERED")
    except gspread.exceptions.APIError as exc:
        raise ExportError(worksheet.title, str(exc)) from exc
    logger.info("Row appended to worksheet %r", worksheet.title)
