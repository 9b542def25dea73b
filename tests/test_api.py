import re

import pytest

from conftest import LEADERBOARD_GIST
from wordwave import create_app
from wordwave.config import TestingConfig
from wordwave.models import Stats
from wordwave.services.github_service import GitHubError


@pytest.fixture
def on_day(client, player_headers):
    """Pin the player's date to 2024-03-10, whose word is PRESS."""
    response = client.post('/api/dev/date', json={'date': '2024-03-10'}, headers=player_headers)
    assert response.status_code == 200
    return '2024-03-10'


def guess(client, headers, word):
    return client.post('/api/game/guess', json={'guess': word}, headers=headers)


# ---------------------------------------------------------------------------
# Token exchange proxy
# ---------------------------------------------------------------------------

def test_token_exchange_success(client, fake_github):
    fake_github.exchange_responses['good-code'] = {
        'access_token': 'gho_new', 'token_type': 'bearer', 'scope': 'gist'
    }
    response = client.post('/api/token', json={
        'code': 'good-code',
        'client_id': 'test-client-id',
        'redirect_uri': 'http://localhost/game.html',
    })
    assert response.status_code == 200
    assert response.get_json()['access_token'] == 'gho_new'
    assert fake_github.last_exchange['client_secret'] == 'test-client-secret'


@pytest.mark.parametrize('body', [
    {},
    {'code': 'abc'},
    {'code': 'abc', 'client_id': 'test-client-id'},
    {'client_id': 'test-client-id', 'redirect_uri': 'http://localhost/game.html'},
])
def test_token_exchange_missing_parameters(client, fake_github, body):
    response = client.post('/api/token', json=body)
    assert response.status_code == 400
    assert response.get_json() == {'error': 'Missing required parameters'}
    assert fake_github.last_exchange is None


def test_token_exchange_refused_code(client):
    response = client.post('/api/token', json={
        'code': 'expired', 'client_id': 'test-client-id', 'redirect_uri': 'http://localhost/game.html',
    })
    assert response.status_code == 400
    assert response.get_json() == {'error': 'The code passed is incorrect or expired.'}


def test_token_exchange_transport_failure(client, fake_github):
    fake_github.exchange_error = GitHubError('connection reset')
    response = client.post('/api/token', json={
        'code': 'abc', 'client_id': 'test-client-id', 'redirect_uri': 'http://localhost/game.html',
    })
    assert response.status_code == 500
    assert response.get_json() == {'error': 'Internal server error'}


def test_token_exchange_without_secret(storage_dir, fake_github):
    class NoSecretConfig(TestingConfig):
        STORAGE_DIR = storage_dir
        GITHUB_CLIENT_SECRET = ''

    client = create_app(NoSecretConfig, github_client=fake_github).test_client()
    response = client.post('/api/token', json={
        'code': 'abc', 'client_id': 'test-client-id', 'redirect_uri': 'http://localhost/game.html',
    })
    assert response.status_code == 500
    assert 'client secret not configured' in response.get_json()['error']


def test_token_endpoint_rejects_get(client):
    response = client.get('/api/token')
    assert response.status_code == 405
    assert response.get_json() == {'error': 'Method not allowed'}


def test_token_preflight_has_cors_headers(client):
    response = client.options('/api/token', headers={
        'Origin': 'https://player.example',
        'Access-Control-Request-Method': 'POST',
    })
    assert response.status_code == 200
    assert 'Access-Control-Allow-Origin' in response.headers


def test_login_url(client):
    response = client.get('/api/auth/login-url')
    url = response.get_json()['url']
    assert url.startswith('https://github.com/login/oauth/authorize?')
    assert 'client_id=test-client-id' in url
    assert 'scope=gist' in url


# ---------------------------------------------------------------------------
# Game endpoints
# ---------------------------------------------------------------------------

def test_player_id_is_required(client):
    response = client.get('/api/game')
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Player id required (X-Player-Id header)'

    response = client.get('/api/game', headers={'X-Player-Id': '../../etc'})
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Invalid player id'


def test_full_game(client, player_headers, on_day):
    response = client.get('/api/game', headers=player_headers)
    state = response.get_json()['game']['state']
    assert state['date'] == on_day
    assert state['guesses'] == []
    assert state['answer'] is None

    response = guess(client, player_headers, 'PRE')
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Not enough letters'

    response = guess(client, player_headers, 'speed')
    body = response.get_json()
    assert response.status_code == 200
    assert body['evaluation'] == ['present', 'present', 'correct', 'absent', 'absent']
    assert body['game']['state']['current_row'] == 1
    assert body['game']['letter_status']['E'] == 'correct'

    response = guess(client, player_headers, 'PRESS')
    body = response.get_json()
    assert body['game']['state']['game_over'] is True
    assert body['game']['state']['is_win'] is True
    assert body['game']['state']['answer'] == 'PRESS'
    assert 'sync_status' not in body

    response = guess(client, player_headers, 'LIGHT')
    assert response.status_code == 400
    assert response.get_json()['error'] == 'You already played today! Come back tomorrow.'

    body = client.get('/api/game', headers=player_headers).get_json()
    assert body['game']['already_played'] is True
    assert body['message'] == 'You already played today! Come back tomorrow.'

    body = client.get('/api/stats', headers=player_headers).get_json()
    assert body['stats']['gamesPlayed'] == 1
    assert body['stats']['guessDistribution'] == [0, 1, 0, 0, 0, 0]
    assert body['win_percentage'] == 100

    body = client.get('/api/game/share', headers=player_headers).get_json()
    assert body['text'].startswith('Word Wave 2/6')


def test_guess_requires_body(client, player_headers):
    response = client.post('/api/game/guess', json={}, headers=player_headers)
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Guess is required'


def test_share_before_finishing(client, player_headers, on_day):
    response = client.get('/api/game/share', headers=player_headers)
    assert response.status_code == 409


def test_finished_game_is_pushed_to_cloud(client, auth_headers, on_day, fake_github):
    response = guess(client, auth_headers, 'PRESS')
    assert response.get_json()['sync_status'] == 'synced'

    entry = fake_github.document()['players']['octocat']
    assert entry['stats']['gamesWon'] == 1
    assert entry['lastPlayedDate'] == on_day
    assert entry['gameState']['guesses'] == ['PRESS']


def test_reset_stats(client, player_headers, on_day):
    guess(client, player_headers, 'PRESS')
    body = client.post('/api/stats/reset', headers=player_headers).get_json()
    assert body['stats']['gamesPlayed'] == 0
    assert client.get('/api/stats', headers=player_headers).get_json()['stats']['gamesPlayed'] == 0


def test_settings(client, player_headers, on_day):
    response = client.post('/api/settings', json={'darkMode': True}, headers=player_headers)
    assert response.get_json()['settings']['darkMode'] is True

    guess(client, player_headers, 'LIGHT')
    response = client.post('/api/settings', json={'hardMode': True}, headers=player_headers)
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Hard mode can only be enabled at the start'

    response = client.get('/api/settings', headers=player_headers)
    assert response.get_json()['settings'] == {'darkMode': True, 'colorBlind': False, 'hardMode': False}


def test_countdown(client):
    body = client.get('/api/countdown').get_json()
    assert re.fullmatch(r'\d{2}:\d{2}:\d{2}', body['next_word_in'])
    assert 0 <= body['seconds'] <= 24 * 3600


def test_health(client):
    body = client.get('/api/health').get_json()
    assert body['status'] == 'healthy'
    assert body['word_count'] == 35
    assert body['cloud_sync_configured'] is True


def test_unknown_route(client):
    response = client.get('/api/nothing-here')
    assert response.status_code == 404
    assert response.get_json() == {'error': 'Not found'}


# ---------------------------------------------------------------------------
# Developer overrides
# ---------------------------------------------------------------------------

def test_dev_skip_and_word(client, player_headers, on_day):
    body = client.post('/api/dev/skip', headers=player_headers).get_json()
    assert body['date'] == '2024-03-11'
    assert body['game']['state']['date'] == '2024-03-11'

    response = client.post('/api/dev/word', json={'word': 'light'}, headers=player_headers)
    assert response.status_code == 200
    assert guess(client, player_headers, 'LIGHT').get_json()['game']['state']['is_win'] is True

    response = client.post('/api/dev/word', json={'word': 'QQQQQ'}, headers=player_headers)
    assert response.status_code == 400

    response = client.post('/api/dev/date', json={'date': 'soon'}, headers=player_headers)
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Date must be in YYYY-MM-DD format'

    response = client.delete('/api/dev/date', headers=player_headers)
    assert response.status_code == 200


def test_dev_tools_hidden_when_disabled(storage_dir, fake_github, player_headers):
    class ProductionLikeConfig(TestingConfig):
        STORAGE_DIR = storage_dir
        DEV_TOOLS_ENABLED = False

    client = create_app(ProductionLikeConfig, github_client=fake_github).test_client()
    response = client.post('/api/dev/date', json={'date': '2024-03-10'}, headers=player_headers)
    assert response.status_code == 404


# ---------------------------------------------------------------------------
# Cloud sync and leaderboard
# ---------------------------------------------------------------------------

def test_sync_requires_token(client, player_headers):
    response = client.post('/api/sync', headers=player_headers)
    assert response.status_code == 401
    assert response.get_json()['error'] == 'Authorization token required'


def test_sync_with_bad_token(client, player_headers):
    headers = {**player_headers, 'Authorization': 'Bearer gho_revoked'}
    response = client.post('/api/sync', headers=headers)
    assert response.status_code == 401
    assert response.get_json()['error'] == 'Login failed. Please try again.'


def test_sync_merges_stats(client, auth_headers, on_day, fake_github):
    guess(client, auth_headers, 'LIGHT')
    client.post('/api/stats/reset', headers={'X-Player-Id': auth_headers['X-Player-Id']})
    remote = Stats(games_played=5, games_won=4, current_streak=1, max_streak=3,
                   guess_distribution=[0, 1, 2, 1, 0, 0])
    fake_github.put_document({
        'players': {'octocat': {'username': 'octocat', 'stats': remote.to_dict(),
                                'lastPlayedDate': '2024-03-09', 'gameState': None}},
        'lastUpdated': None,
        'version': '2.0',
    }, gist_id=LEADERBOARD_GIST)

    body = client.post('/api/sync', headers=auth_headers).get_json()

    assert body['success'] is True
    assert body['sync']['source'] == 'merged'
    assert body['sync']['stats'] == remote.to_dict()
    assert body['game']['state']['guesses'] == ['LIGHT']


def test_leaderboard(client, auth_headers, on_day):
    guess(client, auth_headers, 'PRESS')
    players = client.get('/api/leaderboard').get_json()['players']
    assert players[0]['username'] == 'octocat'
    assert players[0]['win_percentage'] == 100


def test_leaderboard_unavailable(client, fake_github):
    fake_github.gist_error = GitHubError('HTTP 503', 503)
    response = client.get('/api/leaderboard')
    assert response.status_code == 502
