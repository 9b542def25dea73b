"""
GitHub Service

Thin client over the GitHub OAuth and Gist REST endpoints used for cloud sync.
Every non-2xx answer is raised as GitHubError so callers can decide whether to
fall back to local-only state.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

GITHUB_ACCEPT = 'application/vnd.github.v3+json'


class GitHubError(Exception):
    """Raised when a GitHub request fails or returns an unexpected status."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


@dataclass
class GistResponse:
    """A fetched Gist together with its revision tag."""
    data: Optional[Dict[str, Any]]
    etag: Optional[str]
    not_modified: bool = False

    def file_content(self, filename: str) -> Optional[str]:
        if not self.data:
            return None
        file_info = (self.data.get('files') or {}).get(filename) or {}
        return file_info.get('content')


class GitHubClient:
    """
    GitHub API client.

    Args:
        api_url: REST API base URL
        oauth_url: OAuth base URL (authorize / access_token)
        timeout: Per-request timeout in seconds
        session: Optional requests session (injected in tests)
    """

    def __init__(self, api_url: str = 'https://api.github.com',
                 oauth_url: str = 'https://github.com/login/oauth',
                 timeout: float = 10,
                 session: Optional[requests.Session] = None):
        self.api_url = api_url.rstrip('/')
        self.oauth_url = oauth_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self, token: Optional[str] = None, **extra: str) -> Dict[str, str]:
        headers = {'Accept': GITHUB_ACCEPT}
        if token:
            headers['Authorization'] = f'Bearer {token}'
        headers.update(extra)
        return headers

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        logger.debug("GitHub %s %s", method, url)
        try:
            return self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise GitHubError(f"{method} {url} failed: {e}") from e

    @staticmethod
    def _json(response: requests.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise GitHubError("GitHub returned a non-JSON body", response.status_code) from e
        if not isinstance(data, dict):
            raise GitHubError("GitHub returned an unexpected body", response.status_code)
        return data

    def exchange_code(self, code: str, client_id: str, client_secret: str,
                      redirect_uri: str) -> Dict[str, Any]:
        """
        Exchanges an OAuth authorization code for an access token.

        Returns the provider's JSON body as-is; it carries ``error`` and
        ``error_description`` instead of ``access_token`` when GitHub refuses
        the code (GitHub answers those with a 200).
        """
        response = self._request(
            'POST', f'{self.oauth_url}/access_token',
            headers={'Accept': 'application/json', 'Content-Type': 'application/json'},
            json={
                'client_id': client_id,
                'client_secret': client_secret,
                'code': code,
                'redirect_uri': redirect_uri,
            },
        )
        if response.status_code >= 500:
            raise GitHubError(f"HTTP {response.status_code}", response.status_code)
        return self._json(response)

    def get_user(self, token: str) -> Dict[str, Any]:
        """Returns the authenticated user's profile (login, avatar_url, ...)."""
        response = self._request('GET', f'{self.api_url}/user', headers=self._headers(token))
        if not response.ok:
            raise GitHubError("Failed to fetch user info", response.status_code)
        return self._json(response)

    def get_gist(self, gist_id: str, token: Optional[str] = None,
                 etag: Optional[str] = None) -> GistResponse:
        """
        Fetches a Gist.

        When ``etag`` is given the request is conditional and an unchanged
        Gist comes back as ``not_modified`` without a body.
        """
        extra = {'If-None-Match': etag} if etag else {}
        response = self._request('GET', f'{self.api_url}/gists/{gist_id}',
                                 headers=self._headers(token, **extra))
        if response.status_code == 304:
            return GistResponse(data=None, etag=etag, not_modified=True)
        if not response.ok:
            raise GitHubError(f"HTTP {response.status_code}", response.status_code)
        return GistResponse(data=self._json(response), etag=response.headers.get('ETag'))

    def update_gist(self, gist_id: str, files: Dict[str, str], token: str,
                    description: Optional[str] = None,
                    etag: Optional[str] = None) -> GistResponse:
        """Replaces the content of the given files in a Gist (full-body PATCH)."""
        body: Dict[str, Any] = {'files': {name: {'content': content} for name, content in files.items()}}
        if description is not None:
            body['description'] = description
        extra = {'If-Match': etag} if etag else {}
        response = self._request('PATCH', f'{self.api_url}/gists/{gist_id}',
                                 headers=self._headers(token, **extra), json=body)
        if not response.ok:
            raise GitHubError(f"HTTP {response.status_code}", response.status_code)
        return GistResponse(data=self._json(response), etag=response.headers.get('ETag'))
