"""Decision-accuracy tracking for a training session.

Persistence is the caller's concern; to_dict()/from_dict() give a plain
mapping any key-value store can hold.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass
class SessionStats:
    """Running count of analysed decisions and how many were optimal.

    Examples:
        >>> s = SessionStats()
        >>> s.record_decision(True); s.record_decision(False); s.record_decision(True)
        >>> s.accuracy
        66.7
    """

    total_hands: int = 0
    correct_decisions: int = 0

    def __post_init__(self) -> None:
        if self.total_hands < 0 or self.correct_decisions < 0:
            raise ValueError("Session counters cannot be negative.")
        if self.correct_decisions > self.total_hands:
            raise ValueError(
                f"correct_decisions ({self.correct_decisions}) exceeds "
                f"total_hands ({self.total_hands})."
            )

    @property
    def accuracy(self) -> float:
        """Percentage of optimal decisions, one decimal; 0.0 before any hand."""
        if self.total_hands == 0:
            return 0.0
        return round(100.0 * self.correct_decisions / self.total_hands, 1)

    def record_decision(self, was_correct: bool) -> None:
        self.total_hands += 1
        if was_correct:
            self.correct_decisions += 1

    def reset(self) -> None:
        self.total_hands = 0
        self.correct_decisions = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> SessionStats:
        return cls(
            total_hands=int(data.get("total_hands", 0)),
            correct_decisions=int(data.get("correct_decisions", 0)),
        )
