"""
Sync Controller

Handles cloud sync and leaderboard HTTP endpoints.
"""

from flask import Blueprint, request, jsonify
from ..services.game_service import get_game_service
from ..services.github_service import GitHubError
from ..services.sync_service import get_sync_service, SyncStatus
from ..services.word_service import today_string
from ..utils.decorators import require_player, require_github_token
from ..utils.game_logger import game_logger

sync_bp = Blueprint('sync', __name__)


@sync_bp.route('/sync', methods=['POST'])
@require_player
@require_github_token
def sync(player_id, token):
    """Reconcile the player's local stats with their cloud copy."""
    try:
        sync_service = get_sync_service()
        game_service = get_game_service()
        if not sync_service or not game_service:
            return jsonify({
                'success': False,
                'error': 'Sync service unavailable'
            }), 500

        game_logger.log_user_action(request, 'sync', player_id)

        try:
            user = sync_service.get_user(token)
        except GitHubError as e:
            error_response = {
                'success': False,
                'error': 'Login failed. Please try again.',
                'sync_status': SyncStatus.NOT_SYNCED.value
            }
            game_logger.log_sync_event(player_id, 'sync_auth_error', error=str(e))
            game_logger.log_server_response(request, 'sync', False, error_response, player_id)
            return jsonify(error_response), 401

        store = game_service.store_for(player_id)
        game_logger.log_sync_event(player_id, 'sync_started', username=user['login'],
                                   status=SyncStatus.SYNCING.value)

        result = sync_service.sync_player(store, token, today_string(store), user=user)

        if result.status == SyncStatus.ERROR:
            game_logger.log_sync_event(player_id, 'sync_error', username=user['login'], error=result.error)
        else:
            game_logger.log_sync_event(player_id, f'sync_{result.source}', username=user['login'])

        response_data = {
            'success': result.status != SyncStatus.ERROR,
            'sync': result.to_dict(),
            'game': game_service.load_daily_game(player_id).to_dict()
        }
        game_logger.log_server_response(request, 'sync', response_data['success'], response_data, player_id)
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'sync', player_id)
        return jsonify({'success': False, 'error': str(e)}), 500


@sync_bp.route('/leaderboard', methods=['GET'])
def leaderboard():
    """Top players by win rate, then games played."""
    sync_service = get_sync_service()
    if not sync_service:
        return jsonify({
            'success': False,
            'error': 'Sync service unavailable'
        }), 500

    limit = request.args.get('limit', 10, type=int)
    game_logger.log_user_action(request, 'leaderboard', limit=limit)

    try:
        players = sync_service.top_players(limit)
    except GitHubError as e:
        game_logger.log_error(request, e, 'leaderboard')
        return jsonify({
            'success': False,
            'error': 'Leaderboard unavailable'
        }), 502

    return jsonify({
        'success': True,
        'players': [player.to_dict() for player in players]
    })
