import json
from datetime import date

import pytest

from wordwave.services.game_service import (
    ALREADY_PLAYED_MESSAGE,
    GameService,
    apply_guess,
    build_share_text,
    is_valid_guess,
)
from wordwave.models import GameState
from wordwave.services.storage_service import GAME_STATE_KEY
from wordwave.services.word_service import WordService

DAY = date(2024, 3, 10)          # word: PRESS
NEXT_DAY = date(2024, 3, 11)     # word: STORY
PLAYER = 'player-one'


@pytest.fixture
def service(storage_dir):
    return GameService(storage_dir, WordService())


def play(service, guesses, today=DAY):
    game = None
    for guess in guesses:
        game, error = service.submit_guess(PLAYER, guess, today)
        assert error == ''
    return game


def test_new_game(service):
    game = service.load_daily_game(PLAYER, DAY)
    assert game.state.target_word == 'PRESS'
    assert game.state.date == '2024-03-10'
    assert game.state.guesses == []
    assert game.already_played is False
    assert game.to_dict()['state']['answer'] is None


@pytest.mark.parametrize('guess,message', [
    ('PRE', 'Not enough letters'),
    ('', 'Not enough letters'),
    ('PRESSES', 'Guess must be exactly 5 letters'),
    ('PR3SS', 'Guess must contain only letters'),
])
def test_rejected_guess_does_not_use_an_attempt(service, guess, message):
    game, error = service.submit_guess(PLAYER, guess, DAY)
    assert game is None
    assert error == message
    assert service.load_daily_game(PLAYER, DAY).state.current_row == 0


def test_guess_is_case_insensitive(service):
    game, _ = service.submit_guess(PLAYER, 'speed', DAY)
    assert game.state.guesses == ['SPEED']
    assert game.evaluations == [['present', 'present', 'correct', 'absent', 'absent']]


def test_in_progress_game_is_resumed(service):
    play(service, ['LIGHT', 'SPEED'])
    game = service.load_daily_game(PLAYER, DAY)
    assert game.state.guesses == ['LIGHT', 'SPEED']
    assert game.state.current_row == len(game.state.guesses)
    assert not game.state.game_over
    assert game.letter_status['P'] == 'present'
    assert game.letter_status['E'] == 'correct'


def test_win_updates_stats_and_last_played(service):
    game = play(service, ['SPEED', 'PRESS'])
    assert game.state.game_over and game.state.is_win
    assert game.state.current_row == 1
    assert game.already_played

    stats = service.get_stats(PLAYER)
    assert stats.games_played == 1
    assert stats.games_won == 1
    assert stats.current_streak == 1
    assert stats.guess_distribution == [0, 1, 0, 0, 0, 0]
    assert service.store_for(PLAYER).get_last_played() == '2024-03-10'


def test_finished_game_rejects_more_guesses(service):
    play(service, ['PRESS'])
    game, error = service.submit_guess(PLAYER, 'LIGHT', DAY)
    assert game is None
    assert error == ALREADY_PLAYED_MESSAGE

    reloaded = service.load_daily_game(PLAYER, DAY)
    assert reloaded.already_played
    assert reloaded.state.guesses == ['PRESS']
    assert reloaded.to_dict()['state']['answer'] == 'PRESS'
    assert service.get_stats(PLAYER).games_played == 1


def test_loss_after_six_guesses(service):
    game = play(service, ['LIGHT'] * 6)
    assert game.state.game_over
    assert not game.state.is_win
    assert game.state.current_row == 5

    stats = service.get_stats(PLAYER)
    assert stats.games_played == 1
    assert stats.games_won == 0
    assert stats.current_streak == 0
    assert stats.guess_distribution == [0] * 6


def store_snapshot(service, guesses, current_row):
    service.store_for(PLAYER).set_item(GAME_STATE_KEY, json.dumps({
        'currentRow': current_row, 'guesses': guesses, 'gameOver': False,
        'isWin': False, 'targetWord': 'PRESS', 'date': '2024-03-10',
    }))


def test_snapshot_with_six_guesses_rejects_a_seventh(service):
    store_snapshot(service, ['LIGHT'] * 6, current_row=6)

    game, error = service.submit_guess(PLAYER, 'PRESS', DAY)
    assert game is None
    assert error == ALREADY_PLAYED_MESSAGE
    assert len(service.load_daily_game(PLAYER, DAY).state.guesses) == 6


def test_stale_row_in_snapshot_does_not_end_the_game_early(service):
    store_snapshot(service, ['LIGHT'], current_row=5)

    game, error = service.submit_guess(PLAYER, 'SPEED', DAY)
    assert error == ''
    assert not game.state.game_over
    assert game.state.current_row == 2
    assert service.get_stats(PLAYER).games_played == 0


def test_new_day_starts_fresh(service):
    play(service, ['LIGHT'])
    game = service.load_daily_game(PLAYER, NEXT_DAY)
    assert game.state.target_word == 'STORY'
    assert game.state.guesses == []
    assert not game.already_played
    assert service.store_for(PLAYER).load_game_state() is None


def test_streak_across_days(service):
    play(service, ['PRESS'], DAY)
    play(service, ['STORY'], NEXT_DAY)
    stats = service.get_stats(PLAYER)
    assert stats.current_streak == 2
    assert stats.max_streak == 2

    play(service, ['LIGHT'] * 6, date(2024, 3, 12))
    stats = service.get_stats(PLAYER)
    assert stats.current_streak == 0
    assert stats.max_streak == 2
    assert stats.games_played == 3


def test_already_played_without_snapshot_stays_closed(service):
    play(service, ['PRESS'])
    service.store_for(PLAYER).clear_game_state()
    game = service.load_daily_game(PLAYER, DAY)
    assert game.already_played
    assert game.state.game_over


def test_reset_stats(service):
    play(service, ['PRESS'])
    stats = service.reset_stats(PLAYER)
    assert stats.games_played == 0
    assert service.get_stats(PLAYER).games_played == 0
    assert service.store_for(PLAYER).get_last_played() is None


def test_share_text(service):
    text, error = service.get_share_text(PLAYER, today=DAY)
    assert text is None
    assert error == "Finish today's game before sharing"

    play(service, ['SPEED', 'PRESS'])
    text, _ = service.get_share_text(PLAYER, 'https://example.com/wordwave', DAY)
    assert text == (
        "Word Wave 2/6\n"
        "\n"
        "\U0001F7E8\U0001F7E8\U0001F7E9⬛⬛\n"
        "\U0001F7E9\U0001F7E9\U0001F7E9\U0001F7E9\U0001F7E9\n"
        "\n"
        "Play at: https://example.com/wordwave"
    )


def test_share_text_for_a_loss():
    state = GameState(target_word='PRESS', current_row=5, game_over=True,
                      guesses=['LIGHT'] * 6)
    assert build_share_text(state).startswith("Word Wave X/6\n\n")


def test_apply_guess_leaves_input_untouched():
    state = GameState(target_word='PRESS')
    new_state, evaluation = apply_guess(state, 'SPEED')
    assert state.guesses == []
    assert state.current_row == 0
    assert new_state.guesses == ['SPEED']
    assert new_state.current_row == 1
    assert len(evaluation) == 5


def test_is_valid_guess_on_finished_game():
    state = GameState(target_word='PRESS', game_over=True)
    assert is_valid_guess(state, 'LIGHT') == (False, ALREADY_PLAYED_MESSAGE)


def test_settings_round_trip(service):
    assert service.get_settings(PLAYER) == {'darkMode': False, 'colorBlind': False, 'hardMode': False}
    settings, error = service.update_settings(PLAYER, {'darkMode': True, 'colorBlind': 'true'}, DAY)
    assert error == ''
    assert settings == {'darkMode': True, 'colorBlind': True, 'hardMode': False}


def test_unknown_setting_is_rejected(service):
    _, error = service.update_settings(PLAYER, {'fontSize': 'large'}, DAY)
    assert error == 'Unknown setting: fontSize'


def test_hard_mode_only_at_start(service):
    settings, error = service.update_settings(PLAYER, {'hardMode': True}, DAY)
    assert error == ''
    assert settings['hardMode'] is True

    service.update_settings(PLAYER, {'hardMode': False}, DAY)
    play(service, ['LIGHT'])
    settings, error = service.update_settings(PLAYER, {'hardMode': True}, DAY)
    assert error == 'Hard mode can only be enabled at the start'
    assert settings['hardMode'] is False


def test_dev_date_override(service):
    ok, error = service.set_dev_date(PLAYER, '2024-01-01')
    assert ok and error == ''
    game = service.load_daily_game(PLAYER, DAY)
    assert game.state.date == '2024-01-01'
    assert game.state.target_word == 'STORY'

    ok, error = service.set_dev_date(PLAYER, '01/01/2024')
    assert not ok
    assert error == 'Date must be in YYYY-MM-DD format'


def test_skip_to_tomorrow_and_back(service):
    play(service, ['PRESS'])
    assert service.skip_to_tomorrow(PLAYER, DAY) == '2024-03-11'

    game = service.load_daily_game(PLAYER, DAY)
    assert game.state.target_word == 'STORY'
    assert not game.already_played

    service.reset_to_today(PLAYER)
    assert service.store_for(PLAYER).get_dev_date() is None


def test_dev_word(service):
    game, error = service.set_dev_word(PLAYER, 'light', DAY)
    assert error == ''
    assert game.state.target_word == 'LIGHT'

    game = play(service, ['LIGHT'])
    assert game.state.is_win

    game, error = service.set_dev_word(PLAYER, 'ZZZZZ', DAY)
    assert game is None
    assert error == 'Word not in word list'
