"""
Developer Controller

Date and word overrides for exercising day rollover without waiting a real
day. Every endpoint answers 404 unless DEV_TOOLS_ENABLED is set.
"""

from flask import Blueprint, request, jsonify
from ..services.game_service import get_game_service
from ..utils.decorators import require_dev_tools, require_player
from ..utils.game_logger import game_logger

dev_bp = Blueprint('dev', __name__)


@dev_bp.route('/date', methods=['POST'])
@require_dev_tools
@require_player
def set_date(player_id):
    """Override the player's current date (YYYY-MM-DD)."""
    data = request.get_json(silent=True) or {}
    day = data.get('date') if isinstance(data, dict) else None

    ok, error = get_game_service().set_dev_date(player_id, day)
    if not ok:
        return jsonify({'success': False, 'error': error}), 400

    game_logger.log_game_event(player_id, 'dev_date_set', request.remote_addr, day=day)
    return jsonify({'success': True, 'game': get_game_service().load_daily_game(player_id).to_dict()})


@dev_bp.route('/date', methods=['DELETE'])
@require_dev_tools
@require_player
def reset_date(player_id):
    """Drop the date override and return to the real calendar date."""
    get_game_service().reset_to_today(player_id)
    game_logger.log_game_event(player_id, 'dev_date_reset', request.remote_addr)
    return jsonify({'success': True, 'game': get_game_service().load_daily_game(player_id).to_dict()})


@dev_bp.route('/skip', methods=['POST'])
@require_dev_tools
@require_player
def skip_day(player_id):
    """Advance the override date by one day."""
    day = get_game_service().skip_to_tomorrow(player_id)
    game_logger.log_game_event(player_id, 'dev_date_set', request.remote_addr, day=day)
    return jsonify({'success': True, 'date': day,
                    'game': get_game_service().load_daily_game(player_id).to_dict()})


@dev_bp.route('/word', methods=['POST'])
@require_dev_tools
@require_player
def set_word(player_id):
    """Restart today's game with a chosen word from the word list."""
    data = request.get_json(silent=True) or {}
    word = data.get('word') if isinstance(data, dict) else None

    game, error = get_game_service().set_dev_word(player_id, word)
    if game is None:
        return jsonify({'success': False, 'error': error}), 400

    game_logger.log_game_event(player_id, 'dev_word_set', request.remote_addr)
    return jsonify({'success': True, 'game': game.to_dict()})
