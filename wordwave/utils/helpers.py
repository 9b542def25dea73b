"""
Helper Functions

Contains utility functions used throughout the application.
"""

from typing import Optional
from flask import request


def get_player_id(request_obj=None) -> Optional[str]:
    """Extract the player identifier from the header, query string or JSON body."""
    if request_obj is None:
        request_obj = request

    player_id = request_obj.headers.get('X-Player-Id') or request_obj.args.get('player_id')
    if not player_id and request_obj.is_json:
        body = request_obj.get_json(silent=True) or {}
        if isinstance(body, dict):
            player_id = body.get('player_id')

    return player_id if isinstance(player_id, str) else None


def get_bearer_token(request_obj=None) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer`` header, if any."""
    if request_obj is None:
        request_obj = request

    auth_header = request_obj.headers.get('Authorization', '')
    if not auth_header.startswith('Bearer '):
        return None
    token = auth_header[len('Bearer '):].strip()
    return token or None
