"""Tests for metrics.py — punchup / punchdown and differentials."""

import pytest

from metrics import PUNCHDOWN, PUNCHUP, Metrics, compute_metrics


class TestComputeMetrics:
    """Tests for compute_metrics()."""

    def test_stronger_attacker_is_punchdown(self) -> None:
        metrics = compute_metrics(100, 50)

        assert metrics.label == PUNCHDOWN
        assert metrics.differential == 50
        assert metrics.percentage == pytest.approx(100.0)

    def test_stronger_defender_is_punchup(self) -> None:
        metrics = compute_metrics(50, 100)

        assert metrics.label == PUNCHUP
        assert metrics.differential == -50
        assert metrics.percentage == pytest.approx(-50.0)

    def test_equal_powers_are_punchdown(self) -> None:
        """Ties resolve to Punchdown."""
        metrics = compute_metrics(1000, 1000)

        assert metrics.label == PUNCHDOWN
        assert metrics.differential == 0
        assert metrics.percentage == 0

    @pytest.mark.parametrize("attack", [0, 1, 6_774_909])
    def test_zero_defense_percentage_is_zero(self, attack: int) -> None:
        """No division error when the defender's power is 0."""
        assert compute_metrics(attack, 0).percentage == 0

    def test_both_zero(self) -> None:
        """Unparsed powers produce a neutral result."""
        assert compute_metrics(0, 0) == Metrics(PUNCHDOWN, 0, 0)


class TestMetricsText:
    """Tests for the Metrics display helpers."""

    def test_differential_text_grouped(self) -> None:
        assert Metrics(PUNCHDOWN, 1_674_909, 0).differential_text == "1,674,909"

    def test_negative_differential_text(self) -> None:
        assert Metrics(PUNCHUP, -50_000, 0).differential_text == "-50,000"

    def test_percentage_text(self) -> None:
        assert Metrics(PUNCHUP, 0, -12.3456).percentage_text == "-12.35%"
