"""Punchup / punchdown classification and power differentials."""

from dataclasses import dataclass

PUNCHUP = "Punchup"
PUNCHDOWN = "Punchdown"


@dataclass(frozen=True)
class Metrics:
    """Comparison of the attacking and defending power totals."""

    label: str
    differential: float
    percentage: float

    @property
    def differential_text(self) -> str:
        """Differential with thousands separators and no decimals."""
        return f"{self.differential:,.0f}"

    @property
    def percentage_text(self) -> str:
        """Percentage with two decimals and a ``%`` suffix."""
        return f"{self.percentage:.2f}%"


def compute_metrics(attack_power: float, defense_power: float) -> Metrics:
    """Compare the two power totals.

    The label is ``"Punchup"`` when the defender is stronger and
    ``"Punchdown"`` otherwise, equal totals included. The percentage is
    relative to the defender's power and is 0 when that power is 0.
    """
    differential = attack_power - defense_power
    label = PUNCHUP if defense_power > attack_power else PUNCHDOWN
    percentage = (differential / defense_power) * 100 if defense_power else 0
    return Metrics(label=label, differential=differential, percentage=percentage)
