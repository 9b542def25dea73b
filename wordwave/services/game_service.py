"""
Game Service

Contains the core game logic for the daily puzzle: guess evaluation, keyboard
letter state, the daily game lifecycle and the statistics updates that happen
when a game ends.
"""

import logging
from collections import Counter
from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from ..config.game_settings import MAX_ATTEMPTS, WORD_LENGTH
from ..models.game import GameState, LetterStatus
from ..models.stats import Stats
from .storage_service import SETTING_FLAGS, LocalStore
from .word_service import WordService, format_day, parse_day, today_string

logger = logging.getLogger(__name__)

ALREADY_PLAYED_MESSAGE = "You already played today! Come back tomorrow."

SHARE_SQUARES = {
    LetterStatus.CORRECT: '\U0001F7E9',
    LetterStatus.PRESENT: '\U0001F7E8',
    LetterStatus.ABSENT: '\u2B1B',
}


def evaluate_guess(guess: str, target: str) -> List[LetterStatus]:
    """
    Evaluates a guess against the target word.

    Exact matches are resolved first so that a letter repeated in the guess is
    only reported as present as many times as it remains unmatched in the
    target.

    Args:
        guess: The 5-letter guess
        target: The 5-letter target word

    Returns:
        List[LetterStatus]: One verdict per position

    Raises:
        ValueError: If either word is not WORD_LENGTH letters long
    """
    guess = guess.upper()
    target = target.upper()
    if len(guess) != WORD_LENGTH or len(target) != WORD_LENGTH:
        raise ValueError(f"Guess and target must both be {WORD_LENGTH} letters")

    remaining = Counter(target)
    result: List[Optional[LetterStatus]] = [None] * WORD_LENGTH

    for i, letter in enumerate(guess):
        if letter == target[i]:
            result[i] = LetterStatus.CORRECT
            remaining[letter] -= 1

    for i, letter in enumerate(guess):
        if result[i] is not None:
            continue
        if remaining[letter] > 0:
            result[i] = LetterStatus.PRESENT
            remaining[letter] -= 1
        else:
            result[i] = LetterStatus.ABSENT

    return result  # type: ignore[return-value]


def new_letter_status() -> Dict[str, str]:
    return {letter: LetterStatus.UNUSED.value for letter in "ABCDEFGHIJKLMNOPQRSTUVWXYZ"}


def update_letter_status(letter_status: Dict[str, str], guess: str,
                         evaluation: List[LetterStatus]) -> None:
    """
    Updates keyboard letter status in place.

    Status can only progress in priority order, so a key already marked
    correct is never downgraded.
    """
    for letter, new_status in zip(guess.upper(), evaluation):
        current_status = LetterStatus(letter_status.get(letter, LetterStatus.UNUSED.value))
        if new_status.rank > current_status.rank:
            letter_status[letter] = new_status.value


def aggregate_letter_status(guesses: Iterable[str], target: str) -> Dict[str, str]:
    """Keyboard state after replaying every guess of a game."""
    letter_status = new_letter_status()
    for guess in guesses:
        update_letter_status(letter_status, guess, evaluate_guess(guess, target))
    return letter_status


def normalize_guess(guess) -> str:
    if not isinstance(guess, str):
        return ""
    return guess.strip().upper()


def is_valid_guess(state: GameState, guess) -> Tuple[bool, str]:
    """
    Validates a guess for the current game.

    Any alphabetic 5-letter combination is accepted; there is no dictionary
    check. A rejected guess never consumes an attempt.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if state.game_over:
        return False, ALREADY_PLAYED_MESSAGE

    normalized_guess = normalize_guess(guess)

    if len(normalized_guess) < WORD_LENGTH:
        return False, "Not enough letters"

    if len(normalized_guess) > WORD_LENGTH:
        return False, f"Guess must be exactly {WORD_LENGTH} letters"

    if not normalized_guess.isalpha():
        return False, "Guess must contain only letters"

    return True, ""


def apply_guess(state: GameState, guess: str) -> Tuple[GameState, List[LetterStatus]]:
    """
    Applies a validated guess and returns the resulting state.

    The input state is left untouched. The row only advances while the game
    continues; on a win or after the last attempt it stays on the final guess.
    """
    normalized_guess = normalize_guess(guess)
    evaluation = evaluate_guess(normalized_guess, state.target_word)
    guesses = state.guesses + [normalized_guess]

    if normalized_guess == state.target_word:
        new_state = replace(state, guesses=guesses, current_guess="", game_over=True, is_win=True)
    elif state.current_row >= MAX_ATTEMPTS - 1:
        new_state = replace(state, guesses=guesses, current_guess="", game_over=True, is_win=False)
    else:
        new_state = replace(state, guesses=guesses, current_guess="", current_row=state.current_row + 1)

    return new_state, evaluation


def build_share_text(state: GameState, share_url: str = "") -> str:
    """Spoiler-free summary of a game: one row of colored squares per guess."""
    attempts = str(len(state.guesses)) if state.is_win else 'X'
    lines = [f"Word Wave {attempts}/{MAX_ATTEMPTS}", ""]
    for guess in state.guesses:
        evaluation = evaluate_guess(guess, state.target_word)
        lines.append(''.join(SHARE_SQUARES[status] for status in evaluation))
    if share_url:
        lines.extend(["", f"Play at: {share_url}"])
    return "\n".join(lines)


@dataclass
class DailyGame:
    """A player's game for today together with the data a client renders."""
    state: GameState
    stats: Stats
    letter_status: Dict[str, str]
    already_played: bool
    evaluations: List[List[str]]

    def to_dict(self) -> Dict:
        return {
            'state': self.state.to_public_dict(),
            'stats': self.stats.to_dict(),
            'letter_status': dict(self.letter_status),
            'evaluations': [list(row) for row in self.evaluations],
            'already_played': self.already_played,
        }


class GameService:
    """
    Daily game orchestration over each player's local store.

    This class handles:
    - Restoring today's game or starting a fresh one on a new day
    - Guess validation and evaluation
    - Statistics updates when a game ends
    - Settings flags and developer date/word overrides
    """

    def __init__(self, storage_dir: str, word_service: WordService):
        self.storage_dir = storage_dir
        self.word_service = word_service

    def store_for(self, player_id: str) -> LocalStore:
        return LocalStore(self.storage_dir, player_id)

    def _build_daily_game(self, state: GameState, stats: Stats, already_played: bool) -> DailyGame:
        evaluations = [
            [status.value for status in evaluate_guess(guess, state.target_word)]
            for guess in state.guesses
        ]
        return DailyGame(
            state=state,
            stats=stats,
            letter_status=aggregate_letter_status(state.guesses, state.target_word),
            already_played=already_played,
            evaluations=evaluations,
        )

    def load_daily_game(self, player_id: str, today: Optional[date] = None) -> DailyGame:
        """
        Returns today's game for a player.

        A player whose last played date is today gets the stored result back
        with the game closed. Otherwise an in-progress snapshot from today is
        resumed, or a new game starts after yesterday's data is cleared.
        """
        store = self.store_for(player_id)
        day = today_string(store, today)
        stats = store.load_stats()
        last_played = store.get_last_played()
        snapshot = store.load_game_state()
        daily_word = self.word_service.daily_word(store, today)

        if snapshot is not None and snapshot.date == day and len(snapshot.target_word) == WORD_LENGTH:
            state = replace(snapshot, last_played_date=last_played, current_guess="")
            if last_played == day and not state.game_over:
                state.game_over = True
                state.current_row = max(len(state.guesses) - 1, 0)
            return self._build_daily_game(state, stats, already_played=last_played == day)

        if last_played == day:
            # Finished today but the snapshot is gone; the result cannot be replayed.
            state = GameState(target_word=daily_word, game_over=True,
                              last_played_date=last_played, date=day)
            return self._build_daily_game(state, stats, already_played=True)

        if snapshot is not None or last_played is not None:
            logger.info("New day %s for player %s, clearing previous game", day, player_id)
            store.clear_game_state()
            store.clear_last_played()

        state = GameState(target_word=daily_word, date=day)
        return self._build_daily_game(state, stats, already_played=False)

    def submit_guess(self, player_id: str, guess,
                     today: Optional[date] = None) -> Tuple[Optional[DailyGame], str]:
        """
        Processes a guess for today's game.

        Returns:
            Tuple of (updated DailyGame or None if rejected, error_message)
        """
        game = self.load_daily_game(player_id, today)
        is_valid, error = is_valid_guess(game.state, guess)
        if not is_valid:
            return None, error

        store = self.store_for(player_id)
        state, _ = apply_guess(game.state, guess)
        stats = game.stats

        if state.game_over:
            stats.record_result(state.is_win, state.current_row)
            state.last_played_date = state.date
            store.set_last_played(state.date)
            store.save_stats(stats)

        store.save_game_state(state)
        return self._build_daily_game(state, stats, already_played=state.game_over), ""

    def get_stats(self, player_id: str) -> Stats:
        return self.store_for(player_id).load_stats()

    def reset_stats(self, player_id: str) -> Stats:
        store = self.store_for(player_id)
        stats = Stats()
        store.save_stats(stats)
        store.clear_last_played()
        return stats

    def get_share_text(self, player_id: str, share_url: str = "",
                       today: Optional[date] = None) -> Tuple[Optional[str], str]:
        game = self.load_daily_game(player_id, today)
        if not game.state.game_over or not game.state.guesses:
            return None, "Finish today's game before sharing"
        return build_share_text(game.state, share_url), ""

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def get_settings(self, player_id: str) -> Dict[str, bool]:
        store = self.store_for(player_id)
        return {name: store.get_flag(name) for name in SETTING_FLAGS}

    def update_settings(self, player_id: str, changes: Dict,
                        today: Optional[date] = None) -> Tuple[Dict[str, bool], str]:
        """
        Updates preference flags. Hard mode can only be enabled before the
        first guess of the day.

        Returns:
            Tuple of (current settings, error_message)
        """
        store = self.store_for(player_id)
        unknown = [name for name in changes if name not in SETTING_FLAGS]
        if unknown:
            return self.get_settings(player_id), f"Unknown setting: {unknown[0]}"

        changes = {name: value is True or str(value).lower() == 'true' for name, value in changes.items()}

        if changes.get('hardMode') and not store.get_flag('hardMode'):
            game = self.load_daily_game(player_id, today)
            if game.state.current_row > 0 or game.state.guesses:
                return self.get_settings(player_id), "Hard mode can only be enabled at the start"

        for name, enabled in changes.items():
            store.set_flag(name, enabled)
        return self.get_settings(player_id), ""

    # ------------------------------------------------------------------
    # Developer overrides
    # ------------------------------------------------------------------

    def _clear_day(self, store: LocalStore) -> None:
        store.clear_last_played()
        store.clear_game_state()

    def set_dev_date(self, player_id: str, day: str) -> Tuple[bool, str]:
        try:
            normalized = format_day(parse_day(day))
        except (TypeError, ValueError):
            return False, "Date must be in YYYY-MM-DD format"
        store = self.store_for(player_id)
        store.set_dev_date(normalized)
        self._clear_day(store)
        return True, ""

    def skip_to_tomorrow(self, player_id: str, today: Optional[date] = None) -> str:
        store = self.store_for(player_id)
        tomorrow = parse_day(today_string(store, today)) + timedelta(days=1)
        store.set_dev_date(format_day(tomorrow))
        self._clear_day(store)
        return format_day(tomorrow)

    def reset_to_today(self, player_id: str) -> None:
        store = self.store_for(player_id)
        store.clear_dev_date()
        self._clear_day(store)

    def set_dev_word(self, player_id: str, word,
                     today: Optional[date] = None) -> Tuple[Optional[DailyGame], str]:
        """Restarts today's game with a chosen target word from the word list."""
        normalized_word = normalize_guess(word)
        if not self.word_service.is_known_word(normalized_word):
            return None, "Word not in word list"
        store = self.store_for(player_id)
        day = today_string(store, today)
        self._clear_day(store)
        state = GameState(target_word=normalized_word, date=day)
        store.save_game_state(state)
        return self._build_daily_game(state, store.load_stats(), already_played=False), ""


# Global service instance
_game_service = None


def get_game_service() -> Optional[GameService]:
    """Get the global game service instance."""
    return _game_service


def initialize_game_service(storage_dir: str, word_service: WordService) -> GameService:
    """Initialize the global game service instance."""
    global _game_service
    _game_service = GameService(storage_dir, word_service)
    return _game_service
