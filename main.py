"""
Word Wave Server - Main Entry Point

This is the main entry point for the Word Wave server.
It builds the Flask application with all services and starts it.
"""

import os
from wordwave import create_app
from wordwave.config import config
from wordwave.utils.game_logger import game_logger


def main():
    """Main function to create the application and start the server."""
    config_class = config.get(os.getenv('WORDWAVE_ENV', 'default'), config['default'])

    try:
        print("Creating Flask application...")
        app = create_app(config_class)
        print("✓ Flask application created successfully")

        if not config_class.LEADERBOARD_GIST_ID:
            print("✗ LEADERBOARD_GIST_ID not configured - cloud sync disabled")
        if not config_class.GITHUB_CLIENT_SECRET:
            print("✗ GITHUB_CLIENT_SECRET not configured - token exchange disabled")

        game_logger.logger.info("Word Wave Server starting")

        print(f"\nStarting Word Wave Server on {config_class.HOST}:{config_class.PORT}")
        print(f"Debug mode: {config_class.DEBUG}")
        print(f"Developer tools: {config_class.DEV_TOOLS_ENABLED}")
        print("=" * 50)

        app.run(host=config_class.HOST, port=config_class.PORT, debug=config_class.DEBUG)

    except KeyboardInterrupt:
        print("\nServer shutting down...")
        game_logger.logger.info("Word Wave Server shutting down (KeyboardInterrupt)")
    except Exception as e:
        print(f"Error starting server: {e}")
        game_logger.logger.error(f"Error starting server: {e}")
        raise


if __name__ == '__main__':
    main()
