"""
Token Exchange Service

Server side of the OAuth handshake: trades an authorization code for an access
token, adding the client secret that must never reach the browser.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

from .github_service import GitHubClient, GitHubError

logger = logging.getLogger(__name__)


class TokenExchangeError(Exception):
    """Token exchange failure carrying the HTTP status to answer with."""

    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message


class TokenService:
    """
    OAuth token-exchange proxy.

    Args:
        github: GitHub API client
        client_secret: Server-held OAuth client secret
        client_id: Default OAuth client id for building the authorize URL
        redirect_uri: Default OAuth callback URL
        scope: Requested OAuth scope
    """

    def __init__(self, github: GitHubClient, client_secret: str, client_id: str = '',
                 redirect_uri: str = '', scope: str = 'gist'):
        self.github = github
        self.client_secret = client_secret
        self.client_id = client_id
        self.redirect_uri = redirect_uri
        self.scope = scope

    def authorize_url(self) -> str:
        query = urlencode({
            'client_id': self.client_id,
            'redirect_uri': self.redirect_uri,
            'scope': self.scope,
        })
        return f"{self.github.oauth_url}/authorize?{query}"

    def exchange(self, code: Optional[str], client_id: Optional[str],
                 redirect_uri: Optional[str]) -> Dict[str, Any]:
        """
        Exchanges an authorization code for an access token.

        Returns:
            Dict: The provider response, including ``access_token``

        Raises:
            TokenExchangeError: 400 for missing parameters or a refused code,
                500 for configuration or transport problems
        """
        if not code or not client_id or not redirect_uri:
            raise TokenExchangeError(400, 'Missing required parameters')

        if not self.client_secret:
            logger.error("GITHUB_CLIENT_SECRET is not configured")
            raise TokenExchangeError(500, 'Server configuration error: client secret not configured')

        try:
            data = self.github.exchange_code(code, client_id, self.client_secret, redirect_uri)
        except GitHubError as e:
            logger.error("Token exchange error: %s", e)
            raise TokenExchangeError(500, 'Internal server error') from e

        if data.get('error'):
            logger.warning("GitHub OAuth error: %s", data.get('error'))
            raise TokenExchangeError(400, data.get('error_description') or data['error'])

        if not data.get('access_token'):
            raise TokenExchangeError(400, 'Failed to get access token')

        return data


# Global service instance
_token_service = None


def get_token_service() -> Optional[TokenService]:
    """Get the global token service instance."""
    return _token_service


def initialize_token_service(github: GitHubClient, client_secret: str, client_id: str,
                             redirect_uri: str, scope: str) -> TokenService:
    """Initialize the global token service instance."""
    global _token_service
    _token_service = TokenService(github, client_secret, client_id, redirect_uri, scope)
    return _token_service
