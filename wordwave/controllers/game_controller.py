"""
Game Controller

Handles all game-related HTTP endpoints.
"""

from flask import Blueprint, request, jsonify, current_app
from ..services.game_service import get_game_service
from ..services.sync_service import get_sync_service
from ..utils.countdown import next_word_countdown
from ..utils.decorators import require_player
from ..utils.helpers import get_bearer_token
from ..utils.game_logger import game_logger

game_bp = Blueprint('game', __name__)


def _service_unavailable(name: str):
    return jsonify({
        'success': False,
        'error': f'{name} service unavailable'
    }), 500


def _push_to_cloud(player_id: str, token: str):
    """Uploads a player's stats after a finished game or a reset; failures stay local."""
    sync_service = get_sync_service()
    game_service = get_game_service()
    if not sync_service or not token:
        return None

    game_logger.log_sync_event(player_id, 'sync_started', reason='push')
    result = sync_service.push_player(game_service.store_for(player_id), token)
    event = 'sync_pushed' if result.error is None else 'sync_error'
    game_logger.log_sync_event(player_id, event, status=result.status.value, error=result.error)
    return result.status.value


@game_bp.route('/game', methods=['GET'])
@require_player
def get_game(player_id):
    """Get today's game, or the stored result if today's game is finished."""
    try:
        game_service = get_game_service()
        if not game_service:
            return _service_unavailable('Game')

        game_logger.log_user_action(request, 'get_game', player_id)

        game = game_service.load_daily_game(player_id)
        response_data = {
            'success': True,
            'game': game.to_dict()
        }
        if game.already_played:
            response_data['message'] = 'You already played today! Come back tomorrow.'

        game_logger.log_server_response(
            request, 'get_game', True, response_data, player_id,
            current_row=game.state.current_row, game_over=game.state.game_over
        )
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'get_game', player_id)
        error_response = {
            'success': False,
            'error': str(e)
        }
        game_logger.log_server_response(request, 'get_game', False, error_response, player_id)
        return jsonify(error_response), 500


@game_bp.route('/game/guess', methods=['POST'])
@require_player
def submit_guess(player_id):
    """Submit a guess for evaluation."""
    try:
        game_service = get_game_service()
        if not game_service:
            return _service_unavailable('Game')

        data = request.get_json(silent=True)
        if not data or 'guess' not in data:
            error_response = {
                'success': False,
                'error': 'Guess is required'
            }
            game_logger.log_server_response(request, 'submit_guess', False, error_response, player_id)
            return jsonify(error_response), 400

        guess = data['guess']
        game_logger.log_user_action(request, 'submit_guess', player_id, guess_length=len(str(guess)))

        game, error = game_service.submit_guess(player_id, guess)
        if game is None:
            error_response = {
                'success': False,
                'error': error
            }
            game_logger.log_server_response(
                request, 'submit_guess', False, error_response, player_id,
                validation_error=error
            )
            return jsonify(error_response), 400

        response_data = {
            'success': True,
            'game': game.to_dict(),
            'evaluation': game.evaluations[-1]
        }

        state = game.state
        if state.game_over:
            game_logger.log_game_event(
                player_id, 'game_won' if state.is_win else 'game_lost', request.remote_addr,
                attempts=state.attempts_used, day=state.date, target_word=state.target_word
            )
            sync_status = _push_to_cloud(player_id, get_bearer_token(request))
            if sync_status is not None:
                response_data['sync_status'] = sync_status

        game_logger.log_server_response(
            request, 'submit_guess', True, response_data, player_id,
            round=state.current_row, game_over=state.game_over
        )
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'submit_guess', player_id)
        error_response = {
            'success': False,
            'error': str(e)
        }
        game_logger.log_server_response(request, 'submit_guess', False, error_response, player_id)
        return jsonify(error_response), 500


@game_bp.route('/game/share', methods=['GET'])
@require_player
def share_results(player_id):
    """Spoiler-free share text for today's finished game."""
    game_service = get_game_service()
    if not game_service:
        return _service_unavailable('Game')

    game_logger.log_user_action(request, 'share', player_id)
    text, error = game_service.get_share_text(player_id, current_app.config.get('SHARE_URL', ''))
    if text is None:
        return jsonify({'success': False, 'error': error}), 409
    return jsonify({'success': True, 'text': text})


@game_bp.route('/stats', methods=['GET'])
@require_player
def get_stats(player_id):
    """Get the player's statistics."""
    game_service = get_game_service()
    if not game_service:
        return _service_unavailable('Game')

    game_logger.log_user_action(request, 'get_stats', player_id)
    stats = game_service.get_stats(player_id)
    return jsonify({
        'success': True,
        'stats': stats.to_dict(),
        'win_percentage': stats.win_percentage
    })


@game_bp.route('/stats/reset', methods=['POST'])
@require_player
def reset_stats(player_id):
    """Reset the player's statistics, including the cloud copy when a token is sent."""
    try:
        game_service = get_game_service()
        if not game_service:
            return _service_unavailable('Game')

        game_logger.log_user_action(request, 'reset_stats', player_id)
        stats = game_service.reset_stats(player_id)
        game_logger.log_game_event(player_id, 'stats_reset', request.remote_addr)

        response_data = {
            'success': True,
            'stats': stats.to_dict()
        }

        token = get_bearer_token(request)
        sync_service = get_sync_service()
        if token and sync_service:
            result = sync_service.push_player(game_service.store_for(player_id), token,
                                              include_game_state=False)
            response_data['sync_status'] = result.status.value
            game_logger.log_sync_event(player_id, 'sync_error' if result.error else 'sync_reset',
                                       error=result.error)

        game_logger.log_server_response(request, 'reset_stats', True, response_data, player_id)
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'reset_stats', player_id)
        return jsonify({'success': False, 'error': str(e)}), 500


@game_bp.route('/settings', methods=['GET', 'POST'])
@require_player
def settings(player_id):
    """Read or update the player's preference flags."""
    game_service = get_game_service()
    if not game_service:
        return _service_unavailable('Game')

    if request.method == 'GET':
        return jsonify({'success': True, 'settings': game_service.get_settings(player_id)})

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'success': False, 'error': 'Request body is required'}), 400

    changes = {key: value for key, value in data.items() if key != 'player_id'}
    game_logger.log_user_action(request, 'update_settings', player_id, **changes)

    current, error = game_service.update_settings(player_id, changes)
    if error:
        return jsonify({'success': False, 'error': error, 'settings': current}), 400
    return jsonify({'success': True, 'settings': current})


@game_bp.route('/countdown', methods=['GET'])
def countdown():
    """Time left until the next daily word."""
    timer = next_word_countdown()
    return jsonify({
        'success': True,
        'next_word_in': timer.formatted(),
        'seconds': int(timer.remaining_seconds()),
        'target': timer.target.isoformat()
    })


@game_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    try:
        game_service = get_game_service()
        sync_service = get_sync_service()

        game_logger.log_user_action(request, 'health_check')

        response_data = {
            'status': 'healthy',
            'word_count': len(game_service.word_service.get_word_list()) if game_service else 0,
            'cloud_sync_configured': bool(sync_service and sync_service.gist_id),
            'log_stats': game_logger.get_log_stats()
        }

        game_logger.log_server_response(request, 'health_check', True, response_data)
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'health_check')
        error_response = {
            'status': 'error',
            'error': str(e)
        }
        game_logger.log_server_response(request, 'health_check', False, error_response)
        return jsonify(error_response), 500
