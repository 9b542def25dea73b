"""
Utilities Package

Contains utility functions, decorators, and helper modules.
"""

from .decorators import require_player, require_github_token, require_dev_tools
from .helpers import get_player_id, get_bearer_token
from .game_logger import game_logger
from .countdown import Countdown, next_word_countdown, format_remaining

__all__ = [
    'require_player', 'require_github_token', 'require_dev_tools',
    'get_player_id', 'get_bearer_token', 'game_logger',
    'Countdown', 'next_word_countdown', 'format_remaining'
]
