"""
Services Package

Contains business logic services for the application.
"""

from .game_service import GameService, get_game_service, initialize_game_service
from .github_service import GitHubClient, GitHubError
from .storage_service import LocalStore
from .sync_service import SyncService, SyncStatus, merge_stats, get_sync_service, initialize_sync_service
from .token_service import TokenService, TokenExchangeError, get_token_service, initialize_token_service
from .word_service import WordService, word_for_date

__all__ = [
    'GameService', 'get_game_service', 'initialize_game_service',
    'GitHubClient', 'GitHubError',
    'LocalStore',
    'SyncService', 'SyncStatus', 'merge_stats', 'get_sync_service', 'initialize_sync_service',
    'TokenService', 'TokenExchangeError', 'get_token_service', 'initialize_token_service',
    'WordService', 'word_for_date',
]
