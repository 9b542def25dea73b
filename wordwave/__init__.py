"""
Word Wave Server Application Package

Daily word-guessing game server: guess evaluation, per-player statistics,
GitHub Gist cloud sync and the OAuth token-exchange proxy.
"""

from flask import Flask, jsonify
from flask_cors import CORS
from .config import Config


def create_app(config_class=Config, github_client=None):
    """
    Application factory pattern for creating Flask app instances.

    Args:
        config_class: Configuration class to use
        github_client: Optional GitHub client, replaced by a fake in tests

    Returns:
        Flask application instance with all services initialized
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize extensions
    CORS(app)

    # Route structured logs to the configured directory
    from .utils.game_logger import game_logger
    game_logger.configure(app.config['LOG_DIR'], app.config['LOG_LEVEL'])

    # Initialize services
    from .services.github_service import GitHubClient
    from .services.word_service import WordService
    from .services.game_service import initialize_game_service
    from .services.sync_service import initialize_sync_service
    from .services.token_service import initialize_token_service

    github = github_client or GitHubClient(
        api_url=app.config['GITHUB_API_URL'],
        oauth_url=app.config['GITHUB_OAUTH_URL'],
        timeout=app.config['HTTP_TIMEOUT_SECONDS'],
    )
    word_service = WordService(
        github=github,
        gist_id=app.config['WORD_LIST_GIST_ID'],
        filename=app.config['WORD_LIST_FILENAME'],
        cache_seconds=app.config['WORD_LIST_CACHE_SECONDS'],
    )
    initialize_game_service(app.config['STORAGE_DIR'], word_service)
    initialize_sync_service(
        github,
        app.config['LEADERBOARD_GIST_ID'],
        app.config['LEADERBOARD_FILENAME'],
        app.config['SYNC_MAX_RETRIES'],
    )
    initialize_token_service(
        github,
        app.config['GITHUB_CLIENT_SECRET'],
        app.config['GITHUB_CLIENT_ID'],
        app.config['GITHUB_REDIRECT_URI'],
        app.config['GITHUB_OAUTH_SCOPE'],
    )

    # Register blueprints
    from .controllers.auth_controller import auth_bp
    from .controllers.game_controller import game_bp
    from .controllers.sync_controller import sync_bp
    from .controllers.dev_controller import dev_bp

    app.register_blueprint(auth_bp, url_prefix='/api')
    app.register_blueprint(game_bp, url_prefix='/api')
    app.register_blueprint(sync_bp, url_prefix='/api')
    app.register_blueprint(dev_bp, url_prefix='/api/dev')

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'error': 'Method not allowed'}), 405

    return app
