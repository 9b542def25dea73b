"""
Configuration Management Module

Centralized configuration management following the 12-factor app methodology.
All configuration is loaded from environment variables with sensible defaults.
"""

import os
from dotenv import load_dotenv

# Load environment variables from config.env
load_dotenv(os.path.join(os.path.dirname(os.path.abspath(__file__)), 'config.env'))


class Config:
    """Base configuration class with all settings."""

    # Flask Settings
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
    TESTING = False

    # Server Settings
    HOST = os.getenv('HOST', '127.0.0.1')
    PORT = int(os.getenv('PORT', 5000))

    # Local Storage Settings
    STORAGE_DIR = os.getenv('STORAGE_DIR', os.path.join('data', 'players'))

    # GitHub OAuth Settings
    GITHUB_CLIENT_ID = os.getenv('GITHUB_CLIENT_ID', '')
    GITHUB_CLIENT_SECRET = os.getenv('GITHUB_CLIENT_SECRET', '')
    GITHUB_REDIRECT_URI = os.getenv('GITHUB_REDIRECT_URI', '')
    GITHUB_OAUTH_SCOPE = os.getenv('GITHUB_OAUTH_SCOPE', 'gist')
    GITHUB_API_URL = os.getenv('GITHUB_API_URL', 'https://api.github.com')
    GITHUB_OAUTH_URL = os.getenv('GITHUB_OAUTH_URL', 'https://github.com/login/oauth')

    # Gist Storage Settings
    LEADERBOARD_GIST_ID = os.getenv('LEADERBOARD_GIST_ID', '')
    LEADERBOARD_FILENAME = os.getenv('LEADERBOARD_FILENAME', 'wordwave-leaderboard.json')
    WORD_LIST_GIST_ID = os.getenv('WORD_LIST_GIST_ID', '')
    WORD_LIST_FILENAME = os.getenv('WORD_LIST_FILENAME', 'wordwave-words.json')
    WORD_LIST_CACHE_SECONDS = int(os.getenv('WORD_LIST_CACHE_SECONDS', 3600))

    # Sync Settings
    HTTP_TIMEOUT_SECONDS = float(os.getenv('HTTP_TIMEOUT_SECONDS', 10))
    SYNC_MAX_RETRIES = int(os.getenv('SYNC_MAX_RETRIES', 3))

    # Game Settings
    DEV_TOOLS_ENABLED = os.getenv('DEV_TOOLS_ENABLED', 'False').lower() == 'true'
    SHARE_URL = os.getenv('SHARE_URL', '')

    # Logging Settings
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_DIR = os.getenv('LOG_DIR', 'logs')


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    DEV_TOOLS_ENABLED = True


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    DEV_TOOLS_ENABLED = False


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    DEBUG = True
    DEV_TOOLS_ENABLED = True
    LEADERBOARD_GIST_ID = 'test-leaderboard-gist'
    WORD_LIST_GIST_ID = ''
    GITHUB_CLIENT_ID = 'test-client-id'
    GITHUB_CLIENT_SECRET = 'test-client-secret'
    GITHUB_REDIRECT_URI = 'http://localhost/game.html'


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
