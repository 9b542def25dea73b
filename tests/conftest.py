"""
Shared fixtures: an in-memory GitHub stand-in and a Flask app wired to it.
"""

import json
import os
import tempfile

import pytest

# The module-level game logger is built on import; keep its files out of the working tree
os.environ.setdefault('LOG_DIR', tempfile.mkdtemp(prefix='wordwave-logs-'))

from wordwave import create_app  # noqa: E402
from wordwave.config import TestingConfig  # noqa: E402
from wordwave.services.github_service import GistResponse, GitHubError  # noqa: E402
from wordwave.services.storage_service import LocalStore  # noqa: E402
from wordwave.services.sync_service import SyncService  # noqa: E402

LEADERBOARD_GIST = TestingConfig.LEADERBOARD_GIST_ID
LEADERBOARD_FILE = TestingConfig.LEADERBOARD_FILENAME
PLAYER = 'player-one'
TOKEN = 'gho_octocat'


class FakeGitHub:
    """In-memory GitHub with revision tags on Gists."""

    oauth_url = 'https://github.com/login/oauth'

    def __init__(self):
        self.users = {TOKEN: {'login': 'octocat', 'avatar_url': 'https://avatars.example/octocat'}}
        self.gists = {}
        self.exchange_responses = {}
        self.exchange_error = None
        self.gist_error = None
        self.on_conditional_get = None
        self.last_exchange = None
        self.updates = []

    # Gist helpers for tests
    def add_gist(self, gist_id, files=None):
        self.gists[gist_id] = {'files': dict(files or {}), 'version': 1}

    def put_document(self, document, gist_id=LEADERBOARD_GIST, filename=LEADERBOARD_FILE):
        if gist_id not in self.gists:
            self.add_gist(gist_id)
        gist = self.gists[gist_id]
        gist['files'][filename] = json.dumps(document)
        gist['version'] += 1

    def document(self, gist_id=LEADERBOARD_GIST, filename=LEADERBOARD_FILE):
        return json.loads(self.gists[gist_id]['files'][filename])

    def _etag(self, gist_id):
        return f'W/"v{self.gists[gist_id]["version"]}"'

    def _response(self, gist_id):
        files = {name: {'content': content} for name, content in self.gists[gist_id]['files'].items()}
        return GistResponse(data={'id': gist_id, 'files': files}, etag=self._etag(gist_id))

    # GitHubClient interface
    def exchange_code(self, code, client_id, client_secret, redirect_uri):
        self.last_exchange = {
            'code': code,
            'client_id': client_id,
            'client_secret': client_secret,
            'redirect_uri': redirect_uri,
        }
        if self.exchange_error is not None:
            raise self.exchange_error
        return dict(self.exchange_responses.get(code, {
            'error': 'bad_verification_code',
            'error_description': 'The code passed is incorrect or expired.',
        }))

    def get_user(self, token):
        if token not in self.users:
            raise GitHubError('Failed to fetch user info', 401)
        return dict(self.users[token])

    def get_gist(self, gist_id, token=None, etag=None):
        if self.gist_error is not None:
            raise self.gist_error
        if gist_id not in self.gists:
            raise GitHubError('HTTP 404', 404)
        if etag is not None:
            if self.on_conditional_get is not None:
                self.on_conditional_get(self)
            if etag == self._etag(gist_id):
                return GistResponse(data=None, etag=etag, not_modified=True)
        return self._response(gist_id)

    def update_gist(self, gist_id, files, token, description=None, etag=None):
        if self.gist_error is not None:
            raise self.gist_error
        if gist_id not in self.gists:
            raise GitHubError('HTTP 404', 404)
        if etag is not None and etag != self._etag(gist_id):
            raise GitHubError('HTTP 412', 412)
        gist = self.gists[gist_id]
        gist['files'].update(files)
        gist['version'] += 1
        self.updates.append({'gist_id': gist_id, 'files': dict(files), 'token': token})
        return self._response(gist_id)


@pytest.fixture
def fake_github():
    github = FakeGitHub()
    github.add_gist(LEADERBOARD_GIST)
    return github


@pytest.fixture
def storage_dir(tmp_path):
    return str(tmp_path / 'players')


@pytest.fixture
def store(storage_dir):
    return LocalStore(storage_dir, PLAYER)


@pytest.fixture
def sync_service(fake_github):
    return SyncService(fake_github, LEADERBOARD_GIST, LEADERBOARD_FILE, max_retries=3)


@pytest.fixture
def log_dir(tmp_path):
    return str(tmp_path / 'logs')


@pytest.fixture
def app(storage_dir, log_dir, fake_github):
    class Config(TestingConfig):
        STORAGE_DIR = storage_dir
        LOG_DIR = log_dir
        LOG_LEVEL = 'INFO'

    return create_app(Config, github_client=fake_github)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def player_headers():
    return {'X-Player-Id': PLAYER}


@pytest.fixture
def auth_headers(player_headers):
    return {**player_headers, 'Authorization': f'Bearer {TOKEN}'}
