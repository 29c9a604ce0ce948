"""Tests for main.py — CLI orchestration and export routing."""

import json
from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from exceptions import ExportError, ImageDecodeError
from main import export_row, format_summary, main
from metrics import compute_metrics
from parse import ParsedFields
from pipeline import ResultRecord


def _record() -> ResultRecord:
    fields = ParsedFields(
        season="Season 18",
        stage_name="Stage 3-2",
        room=3,
        attack_power=5_000_000,
        defense_power=6_250_000,
        victory_points=8366,
    )
    return ResultRecord(
        attack_names=("Iron Fist", "", "", "", ""),
        defense_names=("Sword Master", "", "", "", ""),
        fields=fields,
        metrics=compute_metrics(fields.attack_power, fields.defense_power),
    )


# ---------------------------------------------------------------------------
# export_row
# ---------------------------------------------------------------------------

class TestExportRow:
    """Tests for export_row() destination selection."""

    @patch("main.send_to_apps_script")
    def test_prefers_apps_script(self, mock_send: MagicMock) -> None:
        mock_send.return_value = "https://drive/link"

        link = export_row(["row"], b"img", "https://script", "sheet-id")

        assert link == "https://drive/link"
        mock_send.assert_called_once_with("https://script", ["row"], b"img")

    @patch("main.append_result_row")
    @patch("main.open_results_sheet")
    @patch("main.get_sheets_client")
    def test_falls_back_to_gspread(
        self,
        mock_client: MagicMock,
        mock_open: MagicMock,
        mock_append: MagicMock,
    ) -> None:
        link = export_row(["row"], b"img", "", "sheet-id")

        assert link is None
        mock_open.assert_called_once_with(mock_client.return_value, "sheet-id")
        mock_append.assert_called_once_with(mock_open.return_value, ["row"])

    def test_nothing_configured_raises(self) -> None:
        with pytest.raises(ExportError):
            export_row(["row"], b"img", "", "")


# ---------------------------------------------------------------------------
# format_summary
# ---------------------------------------------------------------------------

class TestFormatSummary:
    """Tests for format_summary()."""

    def test_contains_key_values(self) -> None:
        summary = format_summary(_record())

        assert "Season 18" in summary
        assert "Punchup" in summary
        assert "-1,250,000 (-20.00%)" in summary
        assert "Iron Fist, ?, ?, ?, ?" in summary


# ---------------------------------------------------------------------------
# main
# ---------------------------------------------------------------------------

class TestMain:
    """Tests for the main() entry point."""

    @patch("main.extract_text", return_value="Season 18\nPower: 10\nPower: 5\n")
    @patch("main.load_screenshot")
    @patch("main.load_portrait_library")
    def test_prints_json_row(
        self,
        mock_library: MagicMock,
        mock_load: MagicMock,
        _mock_ocr: MagicMock,
        shade_library,
        capsys,
    ) -> None:
        """--json prints the 20-column row."""
        mock_library.return_value = shade_library
        mock_load.return_value = (np.full((100, 200, 3), 255, dtype=np.uint8), b"png")

        main(["shot.png", "--json"])

        row = json.loads(capsys.readouterr().out)
        assert len(row) == 20
        assert row[10] == "Season 18"
        assert row[13:16] == [10, 5, 5]

    @patch("main.send_to_apps_script", return_value="https://drive/x")
    @patch("main.extract_text", return_value="")
    @patch("main.load_screenshot")
    @patch("main.load_portrait_library")
    def test_send_uses_original_bytes(
        self,
        mock_library: MagicMock,
        mock_load: MagicMock,
        _mock_ocr: MagicMock,
        mock_send: MagicMock,
        shade_library,
        capsys,
    ) -> None:
        """--send uploads the untouched screenshot bytes."""
        mock_library.return_value = shade_library
        mock_load.return_value = (np.zeros((50, 100, 3), dtype=np.uint8), b"original")

        main(["shot.png", "--send", "--script-url", "https://script"])

        assert mock_send.call_args[0][2] == b"original"
        assert "https://drive/x" in capsys.readouterr().out

    @patch("main.load_screenshot")
    @patch("main.load_portrait_library")
    def test_decode_error_exits_non_zero(
        self, mock_library: MagicMock, mock_load: MagicMock,
    ) -> None:
        mock_library.return_value = MagicMock()
        mock_load.side_effect = ImageDecodeError("shot.png", "corrupt")

        with pytest.raises(SystemExit) as excinfo:
            main(["shot.png"])

        assert excinfo.value.code == 1
