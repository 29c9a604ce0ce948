"""Tests for pipeline.py — full result-screen processing."""

import numpy as np
import pytest

from library import PortraitLibrary
from metrics import PUNCHDOWN, PUNCHUP
from pipeline import ResultRecord, match_slots, process

ATTACK_SHADES = [0, 50, 100, 150, 200]
# 250 is not in the library; the rest are in reverse order.
DEFENSE_SHADES = [200, 150, 250, 50, 0]

EXPECTED_ATTACK = (
    "Lady Deathstrike", "Iron Fist", "Iron Fist WWII", "Sword Master", "Steel Serpent",
)
EXPECTED_DEFENSE = (
    "Steel Serpent", "Sword Master", "", "Iron Fist", "Lady Deathstrike",
)

OCR_TEXT = (
    "Season 18\n"
    "Stage 3-2\n"
    "Power: 5,000,000\n"
    "Power: 6,250,000\n"
    "Total Victory Points: 8,366VP\n"
)


@pytest.fixture
def screenshot(layout, paint_slots) -> np.ndarray:
    return paint_slots(layout, ATTACK_SHADES + DEFENSE_SHADES)


# ---------------------------------------------------------------------------
# match_slots
# ---------------------------------------------------------------------------

class TestMatchSlots:
    """Tests for match_slots()."""

    def test_results_in_slot_order(self, screenshot, layout, shade_library) -> None:
        results = match_slots(screenshot, layout.slots, shade_library)

        assert [r.name for r in results] == list(EXPECTED_ATTACK + EXPECTED_DEFENSE)

    def test_parallel_matches_sequential(self, screenshot, layout, shade_library) -> None:
        """A thread pool gives the same results in the same order."""
        sequential = match_slots(screenshot, layout.slots, shade_library)
        parallel = match_slots(screenshot, layout.slots, shade_library, max_workers=4)

        assert parallel == sequential

    def test_does_not_mutate_screenshot(self, screenshot, layout, shade_library) -> None:
        before = screenshot.copy()

        match_slots(screenshot, layout.slots, shade_library)

        assert np.array_equal(screenshot, before)


# ---------------------------------------------------------------------------
# process
# ---------------------------------------------------------------------------

class TestProcess:
    """Tests for process()."""

    def test_full_record(self, screenshot, layout, shade_library) -> None:
        """Names, fields and metrics are assembled into one record."""
        record = process(screenshot, layout, shade_library, OCR_TEXT)

        assert isinstance(record, ResultRecord)
        assert record.attack_names == EXPECTED_ATTACK
        assert record.defense_names == EXPECTED_DEFENSE
        assert record.fields.season == "Season 18"
        assert record.fields.room == 3
        assert record.fields.victory_points == 8366
        assert record.metrics.label == PUNCHUP
        assert record.metrics.differential == -1_250_000
        assert record.metrics.percentage == pytest.approx(-20.0)

    def test_empty_text_and_library(self, screenshot, layout) -> None:
        """Nothing to match and nothing to parse still yields a full record."""
        record = process(screenshot, layout, PortraitLibrary(), "", default_season="Season 9")

        assert record.attack_names == ("",) * 5
        assert record.defense_names == ("",) * 5
        assert record.fields.season == "Season 9"
        assert record.fields.room is None
        assert record.metrics.label == PUNCHDOWN
        assert record.metrics.percentage == 0

    def test_tiny_image_never_raises(self, layout, shade_library) -> None:
        """A degenerate 1x1 screenshot is processed without error."""
        image = np.zeros((1, 1, 3), dtype=np.uint8)

        record = process(image, layout, shade_library, "")

        assert record.attack_names == ("Lady Deathstrike",) * 5
        assert len(record.defense_names) == 5

    def test_record_is_immutable(self, screenshot, layout, shade_library) -> None:
        record = process(screenshot, layout, shade_library, OCR_TEXT)

        with pytest.raises(AttributeError):
            record.attack_names = ()  # type: ignore[misc]
