"""
Game Logger Module for the Word Wave server

This module provides structured logging for player actions, server responses,
game events and cloud sync activity.
"""

import logging
import json
from datetime import datetime
from typing import Dict, Any, Optional
from pathlib import Path

from ..config.app_config import Config

SENSITIVE_KEYS = ('access_token', 'refresh_token', 'token', 'client_secret')


class GameLogger:
    """
    Centralized logging system for the Word Wave server.

    Features:
    - Player action tracking with IP/player identification
    - Server response logging
    - Game and sync event logging
    - JSON structured logs for easy parsing
    """

    def __init__(self, log_dir: str = "logs", level: str = "INFO"):
        self.configure(log_dir, level)

    def configure(self, log_dir: str, level: str = "INFO") -> None:
        """Point the logger at a log directory, replacing any previous handlers."""
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.level = getattr(logging, str(level).upper(), logging.INFO)

        # Setup main game logger
        self.logger = self._setup_logger()

    def _setup_logger(self) -> logging.Logger:
        """Setup the main game logger with file handler."""
        logger = logging.getLogger('wordwave_game')
        logger.setLevel(self.level)
        logger.propagate = False

        # Prevent duplicate handlers
        if logger.handlers:
            for handler in list(logger.handlers):
                handler.close()
            logger.handlers.clear()

        # File handler for detailed logs
        file_handler = logging.FileHandler(self._log_file(), encoding='utf-8')
        file_handler.setLevel(self.level)

        # Console handler for only important messages (WARNING and above)
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)

        file_formatter = logging.Formatter(
            '%(asctime)s | %(levelname)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_formatter = logging.Formatter(
            '%(levelname)s: %(message)s'
        )

        file_handler.setFormatter(file_formatter)
        console_handler.setFormatter(console_formatter)

        logger.addHandler(file_handler)
        logger.addHandler(console_handler)

        return logger

    def _log_file(self) -> Path:
        return self.log_dir / f"game_log_{datetime.now().strftime('%Y-%m-%d')}.log"

    def _get_user_identity(self, request, player_id: Optional[str] = None) -> Dict[str, Optional[str]]:
        """Extract user identity information from request."""
        return {
            'user_ip': getattr(request, 'remote_addr', None) or 'unknown',
            'player_id': player_id,
        }

    def _create_log_entry(self,
                          event_type: str,
                          action: str,
                          user_info: Dict[str, Optional[str]],
                          details: Dict[str, Any]) -> str:
        """Create a structured log entry."""
        log_entry = {
            'timestamp': datetime.now().isoformat(),
            'event_type': event_type,
            'action': action,
            'user': user_info,
            'details': details
        }
        return json.dumps(log_entry, ensure_ascii=False, default=str)

    def log_user_action(self,
                        request,
                        action: str,
                        player_id: Optional[str] = None,
                        **kwargs):
        """
        Log player actions with full context.

        Args:
            request: Flask request object
            action: Type of action (e.g., 'get_game', 'submit_guess', 'sync')
            player_id: Player identifier if applicable
            **kwargs: Additional details to log
        """
        details = {
            'endpoint': getattr(request, 'endpoint', None),
            'method': getattr(request, 'method', None),
            'url': getattr(request, 'url', None),
            **self._sanitize_details(kwargs)
        }

        log_message = self._create_log_entry('USER_ACTION', action,
                                             self._get_user_identity(request, player_id), details)
        self.logger.info(log_message)

    def log_server_response(self,
                            request,
                            action: str,
                            success: bool,
                            response_data: Dict[str, Any],
                            player_id: Optional[str] = None,
                            **kwargs):
        """
        Log server responses with full context.

        Args:
            request: Flask request object
            action: Action that was performed
            success: Whether the action succeeded
            response_data: Data being returned to client
            player_id: Player identifier if applicable
            **kwargs: Additional details to log
        """
        details = {
            'success': success,
            'response_size': len(str(response_data)),
            'response_data': self._sanitize_response_data(response_data),
            **self._sanitize_details(kwargs)
        }

        event_type = 'SERVER_RESPONSE_SUCCESS' if success else 'SERVER_RESPONSE_ERROR'
        log_message = self._create_log_entry(event_type, action,
                                             self._get_user_identity(request, player_id), details)

        if success:
            self.logger.info(log_message)
        else:
            self.logger.error(log_message)

    def log_game_event(self,
                       player_id: Optional[str],
                       event: str,
                       user_ip: str,
                       **kwargs):
        """
        Log game-specific events (wins, losses, resets, developer overrides).

        Args:
            player_id: Player identifier
            event: Type of game event (e.g., 'game_won', 'game_lost', 'stats_reset')
            user_ip: User's IP address
            **kwargs: Additional game details
        """
        user_info = {'user_ip': user_ip, 'player_id': player_id}
        log_message = self._create_log_entry('GAME_EVENT', event, user_info,
                                             self._sanitize_details(kwargs))
        self.logger.info(log_message)

    def log_sync_event(self,
                       player_id: Optional[str],
                       event: str,
                       **kwargs):
        """
        Log cloud sync activity.

        Args:
            player_id: Player identifier
            event: Type of sync event (e.g., 'sync_started', 'sync_merged', 'sync_error')
            **kwargs: Additional sync details
        """
        user_info = {'user_ip': 'system', 'player_id': player_id}
        log_message = self._create_log_entry('SYNC_EVENT', event, user_info,
                                             self._sanitize_details(kwargs))
        if event.endswith('error'):
            self.logger.warning(log_message)
        else:
            self.logger.info(log_message)

    def log_error(self,
                  request,
                  error: Exception,
                  action: str,
                  player_id: Optional[str] = None):
        """
        Log errors with full context.

        Args:
            request: Flask request object
            error: Exception that occurred
            action: Action that was being performed
            player_id: Player identifier if applicable
        """
        details = {
            'error_type': type(error).__name__,
            'error_message': str(error),
            'action': action
        }

        log_message = self._create_log_entry('ERROR', action,
                                             self._get_user_identity(request, player_id), details)
        self.logger.error(log_message)

    def _sanitize_details(self, details: Dict[str, Any]) -> Dict[str, Any]:
        return {
            key: ('***' if key in SENSITIVE_KEYS and value else value)
            for key, value in details.items()
        }

    def _sanitize_response_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Mask tokens and summarise game state so answers never reach the log early."""
        if not isinstance(data, dict):
            return {'data_type': type(data).__name__}

        sanitized = self._sanitize_details(data)

        game = sanitized.get('game')
        if isinstance(game, dict) and isinstance(game.get('state'), dict):
            state = game['state']
            sanitized['game'] = {
                'current_row': state.get('current_row'),
                'game_over': state.get('game_over'),
                'is_win': state.get('is_win'),
                'guesses_count': len(state.get('guesses', [])),
                'answer_revealed': state.get('answer') is not None
            }

        return sanitized

    def get_log_stats(self) -> Dict[str, Any]:
        """Get statistics about logged events (useful for monitoring)."""
        try:
            log_file = self._log_file()
            if not log_file.exists():
                return {'error': 'No log file found for today'}

            stats = {
                'log_file': str(log_file),
                'file_size_mb': round(log_file.stat().st_size / (1024 * 1024), 2),
                'total_entries': 0,
                'user_actions': 0,
                'server_responses': 0,
                'game_events': 0,
                'sync_events': 0,
                'errors': 0
            }

            with open(log_file, 'r', encoding='utf-8') as f:
                for line in f:
                    if line.strip():
                        stats['total_entries'] += 1
                        if 'USER_ACTION' in line:
                            stats['user_actions'] += 1
                        elif 'SERVER_RESPONSE' in line:
                            stats['server_responses'] += 1
                        elif 'GAME_EVENT' in line:
                            stats['game_events'] += 1
                        elif 'SYNC_EVENT' in line:
                            stats['sync_events'] += 1
                        elif 'ERROR' in line:
                            stats['errors'] += 1

            return stats

        except OSError as e:
            return {'error': f'Failed to get stats: {str(e)}'}


# Global logger instance
game_logger = GameLogger(Config.LOG_DIR, Config.LOG_LEVEL)
