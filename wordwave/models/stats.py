"""
Statistics Data Models

Contains the per-player statistics record and its storage coercion rules.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..config.game_settings import MAX_ATTEMPTS


def _coerce_int(value: Any) -> int:
    """Numeric-looking values become non-negative ints, anything else becomes 0."""
    if isinstance(value, bool):
        return int(value)
    try:
        return max(0, int(float(value)))
    except (TypeError, ValueError, OverflowError):
        return 0


def _coerce_distribution(value: Any) -> List[int]:
    if not isinstance(value, list):
        return [0] * MAX_ATTEMPTS
    counts = [_coerce_int(count) for count in value[:MAX_ATTEMPTS]]
    return counts + [0] * (MAX_ATTEMPTS - len(counts))


@dataclass
class Stats:
    """Per-player statistics, mutated only when a daily game ends."""
    games_played: int = 0
    games_won: int = 0
    current_streak: int = 0
    max_streak: int = 0
    guess_distribution: List[int] = field(default_factory=lambda: [0] * MAX_ATTEMPTS)

    @property
    def win_percentage(self) -> int:
        if self.games_played <= 0:
            return 0
        return round(self.games_won / self.games_played * 100)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Stats":
        """
        Builds statistics from their stored camelCase form.

        Missing, non-numeric or negative counters become 0, wins never exceed
        games played and the guess distribution is forced to exactly
        MAX_ATTEMPTS entries.
        """
        if not isinstance(data, dict):
            return cls()
        games_played = _coerce_int(data.get('gamesPlayed'))
        return cls(
            games_played=games_played,
            games_won=min(_coerce_int(data.get('gamesWon')), games_played),
            current_streak=_coerce_int(data.get('currentStreak')),
            max_streak=_coerce_int(data.get('maxStreak')),
            guess_distribution=_coerce_distribution(data.get('guessDistribution')),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'gamesPlayed': self.games_played,
            'gamesWon': self.games_won,
            'currentStreak': self.current_streak,
            'maxStreak': self.max_streak,
            'guessDistribution': list(self.guess_distribution),
        }

    def record_result(self, won: bool, attempt_index: int) -> None:
        """
        Applies the outcome of a finished game.

        Args:
            won: Whether the target word was guessed
            attempt_index: Zero-based index of the final guess
        """
        self.games_played += 1
        if won:
            self.games_won += 1
            self.current_streak += 1
            self.max_streak = max(self.max_streak, self.current_streak)
            if 0 <= attempt_index < MAX_ATTEMPTS:
                self.guess_distribution[attempt_index] += 1
        else:
            self.current_streak = 0
