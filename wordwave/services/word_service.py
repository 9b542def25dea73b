"""
Word Service

Deterministic daily word selection and the active word list. The same calendar
date always maps to the same word for every player.
"""

import json
import logging
import time
from datetime import date, datetime
from typing import Callable, List, Optional

from ..config.game_settings import DEFAULT_WORD_LIST, validate_word_list
from .github_service import GitHubClient, GitHubError
from .storage_service import LocalStore

logger = logging.getLogger(__name__)

DATE_FORMAT = '%Y-%m-%d'


def parse_day(value: str) -> date:
    """Parses a YYYY-MM-DD string; raises ValueError otherwise."""
    return datetime.strptime(value, DATE_FORMAT).date()


def format_day(day: date) -> str:
    return day.strftime(DATE_FORMAT)


def day_of_year(day: date) -> int:
    """1-based day of the year (January 1st is day 1)."""
    return day.timetuple().tm_yday


def word_for_date(day: date, words: List[str]) -> str:
    """
    Picks the word for a calendar date.

    Args:
        day: Calendar date of the puzzle
        words: Word list to pick from

    Returns:
        str: ``words[day_of_year % len(words)]``

    Raises:
        ValueError: If the word list is empty
    """
    if not words:
        raise ValueError("Word list cannot be empty")
    return words[day_of_year(day) % len(words)]


def today_string(store: LocalStore, today: Optional[date] = None) -> str:
    """
    Today's date for a player as YYYY-MM-DD.

    A developer-override date stored for the player takes precedence over the
    real calendar date.
    """
    dev_date = store.get_dev_date()
    if dev_date:
        try:
            return format_day(parse_day(dev_date))
        except ValueError:
            logger.warning("Ignoring malformed dev date %r for player %s", dev_date, store.player_id)
    return format_day(today or date.today())


class WordService:
    """
    Holds the active word list.

    The list comes from a Gist when one is configured and is refreshed at most
    once per cache period; otherwise, or when the Gist cannot be used, the
    built-in list is kept.
    """

    def __init__(self, github: Optional[GitHubClient] = None, gist_id: str = '',
                 filename: str = 'wordwave-words.json', cache_seconds: int = 3600,
                 clock: Callable[[], float] = time.time):
        self.github = github
        self.gist_id = gist_id
        self.filename = filename
        self.cache_seconds = cache_seconds
        self.clock = clock
        self.word_list: List[str] = list(DEFAULT_WORD_LIST)
        self._loaded_at: Optional[float] = None

    def get_word_list(self) -> List[str]:
        if self._cache_valid():
            return self.word_list
        if self.gist_id and self.github is not None:
            self._refresh_from_gist()
        self._loaded_at = self.clock()
        return self.word_list

    def _cache_valid(self) -> bool:
        return self._loaded_at is not None and self.clock() - self._loaded_at < self.cache_seconds

    def _refresh_from_gist(self) -> None:
        try:
            gist = self.github.get_gist(self.gist_id)
            content = gist.file_content(self.filename)
            if not content:
                raise ValueError(f"{self.filename} not found in Gist")
            payload = json.loads(content)
            if not isinstance(payload, dict):
                raise ValueError("Invalid word list format")
            self.word_list = validate_word_list(payload.get('words'))
            logger.info("Loaded %d words from Gist %s", len(self.word_list), self.gist_id)
        except (GitHubError, ValueError) as e:
            logger.warning("Keeping current word list (%d words): %s", len(self.word_list), e)

    def word_for(self, day: str) -> str:
        return word_for_date(parse_day(day), self.get_word_list())

    def daily_word(self, store: LocalStore, today: Optional[date] = None) -> str:
        return self.word_for(today_string(store, today))

    def is_known_word(self, word: str) -> bool:
        return word.strip().upper() in self.get_word_list()
