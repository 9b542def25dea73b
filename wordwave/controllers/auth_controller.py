"""
Authentication Controller

Handles the GitHub OAuth endpoints: the authorize URL and the token-exchange
proxy that injects the server-held client secret.
"""

from flask import Blueprint, request, jsonify
from ..services.token_service import get_token_service, TokenExchangeError
from ..utils.game_logger import game_logger

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/token', methods=['POST'])
def exchange_token():
    """Exchange an OAuth authorization code for an access token."""
    try:
        token_service = get_token_service()
        if not token_service:
            return jsonify({'error': 'Authentication service unavailable'}), 500

        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            data = {}

        game_logger.log_user_action(request, 'token_exchange', client_id=data.get('client_id'))

        result = token_service.exchange(data.get('code'), data.get('client_id'), data.get('redirect_uri'))

        game_logger.log_server_response(request, 'token_exchange', True, result)
        return jsonify(result), 200

    except TokenExchangeError as e:
        error_response = {'error': e.message}
        game_logger.log_server_response(request, 'token_exchange', False, error_response, status=e.status)
        return jsonify(error_response), e.status

    except Exception as e:
        game_logger.log_error(request, e, 'token_exchange')
        return jsonify({'error': 'Internal server error'}), 500


@auth_bp.route('/auth/login-url', methods=['GET'])
def login_url():
    """Return the GitHub authorize URL the client should redirect to."""
    token_service = get_token_service()
    if not token_service:
        return jsonify({
            'success': False,
            'error': 'Authentication service unavailable'
        }), 500

    if not token_service.client_id:
        return jsonify({
            'success': False,
            'error': 'GitHub OAuth is not configured'
        }), 500

    game_logger.log_user_action(request, 'login_url')
    return jsonify({'success': True, 'url': token_service.authorize_url()})
