"""
Game Data Models

Contains all game-related data structures and enums.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..config.game_settings import MAX_ATTEMPTS, WORD_LENGTH


class LetterStatus(Enum):
    """Per-letter verdict of a guess, plus UNUSED for untouched keyboard keys."""
    CORRECT = "correct"
    PRESENT = "present"
    ABSENT = "absent"
    UNUSED = "unused"

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]


_STATUS_RANK = {
    LetterStatus.UNUSED: 0,
    LetterStatus.ABSENT: 1,
    LetterStatus.PRESENT: 2,
    LetterStatus.CORRECT: 3,
}


@dataclass
class GameState:
    """
    State of one player's daily game.

    While playing, len(guesses) == current_row. When the game ends the row is
    left on the final guess, so current_row + 1 attempts were used.
    """
    target_word: str
    current_row: int = 0
    current_guess: str = ""
    game_over: bool = False
    is_win: bool = False
    guesses: List[str] = field(default_factory=list)
    last_played_date: Optional[str] = None
    date: Optional[str] = None

    @property
    def attempts_used(self) -> int:
        return len(self.guesses)

    def to_snapshot(self) -> Dict[str, Any]:
        """Storage form of the state. The typing buffer is never persisted."""
        return {
            'currentRow': self.current_row,
            'guesses': list(self.guesses),
            'gameOver': self.game_over,
            'isWin': self.is_win,
            'targetWord': self.target_word,
            'date': self.date,
        }

    @classmethod
    def from_snapshot(cls, data: Dict[str, Any], fallback_word: str = "") -> "GameState":
        """
        Rebuilds a state from its storage form, tolerating missing fields.

        The stored row and outcome are not trusted: both are derived from the
        well-formed guesses, so a game with MAX_ATTEMPTS guesses or a final
        guess equal to the target is always over.
        """
        raw_guesses = data.get('guesses') or []
        if not isinstance(raw_guesses, list):
            raw_guesses = []
        guesses = [guess.upper() for guess in raw_guesses
                   if isinstance(guess, str) and len(guess) == WORD_LENGTH][:MAX_ATTEMPTS]
        target_word = str(data.get('targetWord') or fallback_word).upper()

        is_win = bool(guesses) and guesses[-1] == target_word
        game_over = bool(data.get('gameOver', False)) or is_win or len(guesses) >= MAX_ATTEMPTS
        current_row = max(len(guesses) - 1, 0) if game_over else len(guesses)

        return cls(
            target_word=target_word,
            current_row=current_row,
            game_over=game_over,
            is_win=is_win,
            guesses=guesses,
            date=data.get('date'),
        )

    def to_public_dict(self, reveal_answer: bool = False) -> Dict[str, Any]:
        """Client-facing form; the answer is only revealed once the game is over."""
        return {
            'current_row': self.current_row,
            'game_over': self.game_over,
            'is_win': self.is_win,
            'guesses': list(self.guesses),
            'last_played_date': self.last_played_date,
            'date': self.date,
            'answer': self.target_word if (self.game_over or reveal_answer) else None,
        }
