"""
Game Configuration Constants Module

Defines the fixed rules of the daily puzzle and the built-in word list used
when no remote word list is configured or reachable.
"""

from typing import Iterable, List, Final

WORD_LENGTH: Final[int] = 5
"""Number of letters in every target word and every guess."""

MAX_ATTEMPTS: Final[int] = 6
"""
Maximum number of guess attempts allowed per daily game.
Also the size of the guess distribution in the statistics.
"""

# Press & science themed words
DEFAULT_WORD_LIST: Final[List[str]] = [
    'PRESS', 'STORY', 'MEDIA', 'WRITE', 'QUOTE',
    'ATOMS', 'CELLS', 'GENES', 'VIRUS', 'BRAIN',
    'LASER', 'ORBIT', 'COMET', 'SOLAR', 'LIGHT',
    'PAPER', 'PRINT', 'COVER', 'ISSUE', 'PHOTO',
    'FACTS', 'TRUTH', 'PROOF', 'STUDY', 'TESTS',
    'FIELD', 'TOPIC', 'THEME', 'DRAFT', 'RADIO',
    'WAVES', 'FORCE', 'POWER', 'SPEED', 'SPACE',
]


def validate_word_list(words: Iterable[str]) -> List[str]:
    """
    Normalizes and validates a candidate word list.

    Args:
        words: Words as loaded from configuration or a remote source

    Returns:
        List[str]: Uppercase words, in their original order

    Raises:
        ValueError: If the list is empty or contains a word that is not
            exactly WORD_LENGTH alphabetic characters
    """
    if isinstance(words, (str, bytes)) or not isinstance(words, Iterable):
        raise ValueError("Word list must be an array of words")

    uppercase_words = []
    for index, word in enumerate(words):
        if not isinstance(word, str):
            raise ValueError(f"Word at index {index} is not a string")
        word = word.strip().upper()
        if len(word) != WORD_LENGTH:
            raise ValueError(f"Word '{word}' is not {WORD_LENGTH} characters long")
        if not word.isalpha():
            raise ValueError(f"Word '{word}' contains non-alphabetic characters")
        uppercase_words.append(word)

    if not uppercase_words:
        raise ValueError("Word list cannot be empty")

    return uppercase_words
