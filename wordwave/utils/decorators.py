"""
Request Decorators

Contains decorators for player identification, GitHub authentication and
developer-only endpoints.
"""

from functools import wraps
from flask import request, jsonify, current_app

from ..services.storage_service import is_valid_player_id
from .helpers import get_bearer_token, get_player_id


def require_player(f):
    """
    Decorator to require a valid player identifier.

    The identifier is passed to the view as the ``player_id`` keyword.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        player_id = get_player_id(request)
        if not player_id:
            return jsonify({
                'success': False,
                'error': 'Player id required (X-Player-Id header)'
            }), 400

        if not is_valid_player_id(player_id):
            return jsonify({
                'success': False,
                'error': 'Invalid player id'
            }), 400

        kwargs['player_id'] = player_id
        return f(*args, **kwargs)

    return decorated_function


def require_github_token(f):
    """
    Decorator to require a GitHub access token for cloud sync endpoints.

    The token is passed to the view as the ``token`` keyword.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = get_bearer_token(request)
        if not token:
            return jsonify({
                'success': False,
                'error': 'Authorization token required'
            }), 401

        kwargs['token'] = token
        return f(*args, **kwargs)

    return decorated_function


def require_dev_tools(f):
    """Decorator hiding developer override endpoints unless they are enabled."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_app.config.get('DEV_TOOLS_ENABLED'):
            return jsonify({
                'success': False,
                'error': 'Not found'
            }), 404
        return f(*args, **kwargs)

    return decorated_function
