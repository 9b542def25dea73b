"""
Sync Service

Reconciles a player's local statistics with the copy kept in the shared
leaderboard Gist, and keeps that Gist up to date.

The Gist holds one JSON document for every player and can only be replaced as
a whole, so every write is a read-modify-write. Writes are guarded by a
conditional re-read of the document revision and retried when another writer
got in first.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..config.game_settings import MAX_ATTEMPTS
from ..models.game import GameState
from ..models.stats import Stats
from .github_service import GitHubClient, GitHubError
from .storage_service import LocalStore

logger = logging.getLogger(__name__)

LEADERBOARD_VERSION = '2.0'
LEADERBOARD_DESCRIPTION = 'Word Wave - Global Leaderboard'


class SyncStatus(Enum):
    """Sync indicator states shown to the player."""
    NOT_SYNCED = "not_synced"
    SYNCING = "syncing"
    SYNCED = "synced"
    ERROR = "error"


class SyncConflictError(GitHubError):
    """Raised when the leaderboard kept changing under every write attempt."""


def merge_stats(local: Optional[Stats], remote: Optional[Stats]) -> Optional[Stats]:
    """
    Combines two statistics records by taking the field-wise maximum.

    When only one side exists it wins outright. The guess distribution is
    merged element by element, so the result can describe a distribution that
    neither side produced on its own.
    """
    if remote is None:
        return local
    if local is None:
        return remote

    local_dist = list(local.guess_distribution) + [0] * MAX_ATTEMPTS
    remote_dist = list(remote.guess_distribution) + [0] * MAX_ATTEMPTS
    return Stats(
        games_played=max(local.games_played, remote.games_played),
        games_won=max(local.games_won, remote.games_won),
        current_streak=max(local.current_streak, remote.current_streak),
        max_streak=max(local.max_streak, remote.max_streak),
        guess_distribution=[max(local_dist[i], remote_dist[i]) for i in range(MAX_ATTEMPTS)],
    )


def _is_further_along(remote: GameState, local: Optional[GameState], today: str) -> bool:
    if local is None or local.date != today:
        return True
    if remote.game_over != local.game_over:
        return remote.game_over
    return len(remote.guesses) > len(local.guesses)


def empty_leaderboard() -> Dict[str, Any]:
    return {'players': {}, 'lastUpdated': None, 'version': LEADERBOARD_VERSION}


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


@dataclass
class SyncResult:
    """Outcome of reconciling one player's local and remote data."""
    status: SyncStatus
    source: str
    stats: Stats
    last_played_date: Optional[str] = None
    game_state: Optional[Dict[str, Any]] = None
    username: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status.value,
            'source': self.source,
            'stats': self.stats.to_dict(),
            'last_played_date': self.last_played_date,
            'username': self.username,
            'error': self.error,
        }


@dataclass
class PlayerRanking:
    username: str
    avatar: Optional[str]
    stats: Stats = field(default_factory=Stats)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'username': self.username,
            'avatar': self.avatar,
            'stats': self.stats.to_dict(),
            'win_percentage': self.stats.win_percentage,
        }


class SyncService:
    """
    Cloud sync against the leaderboard Gist.

    Args:
        github: GitHub API client
        gist_id: Leaderboard Gist id; when empty, sync reports the empty document
        filename: File inside the Gist holding the document
        max_retries: Write attempts before giving up on a contended document
    """

    def __init__(self, github: GitHubClient, gist_id: str = '',
                 filename: str = 'wordwave-leaderboard.json', max_retries: int = 3):
        self.github = github
        self.gist_id = gist_id
        self.filename = filename
        self.max_retries = max(1, max_retries)

    # ------------------------------------------------------------------
    # Leaderboard document
    # ------------------------------------------------------------------

    def _parse_document(self, content: Optional[str]) -> Dict[str, Any]:
        if not content:
            return empty_leaderboard()
        try:
            document = json.loads(content)
        except ValueError as e:
            raise GitHubError(f"Leaderboard document is not valid JSON: {e}") from e
        if not isinstance(document, dict):
            raise GitHubError("Leaderboard document is not an object")
        if not isinstance(document.get('players'), dict):
            document['players'] = {}
        document.setdefault('version', LEADERBOARD_VERSION)
        return document

    def load_leaderboard(self, token: Optional[str] = None) -> Tuple[Dict[str, Any], Optional[str]]:
        """
        Loads the leaderboard document and its revision tag.

        A missing Gist or file yields the empty document. Any other failure is
        raised so that a broken read never turns into a write that drops
        other players.
        """
        if not self.gist_id:
            logger.warning("Leaderboard Gist ID not configured")
            return empty_leaderboard(), None
        try:
            gist = self.github.get_gist(self.gist_id, token=token)
        except GitHubError as e:
            if e.status == 404:
                logger.info("Leaderboard Gist %s not found", self.gist_id)
                return empty_leaderboard(), None
            raise
        return self._parse_document(gist.file_content(self.filename)), gist.etag

    def _unchanged_since(self, etag: Optional[str], token: str) -> bool:
        if not etag:
            return True
        return self.github.get_gist(self.gist_id, token=token, etag=etag).not_modified

    def update_document(self, mutate: Callable[[Dict[str, Any]], None], token: str) -> Dict[str, Any]:
        """
        Applies ``mutate`` to the latest document and writes it back.

        Raises:
            GitHubError: If the Gist is not configured or a request fails
            SyncConflictError: If every attempt lost a race with another writer
        """
        if not self.gist_id:
            raise GitHubError("Leaderboard Gist ID not configured")

        for attempt in range(1, self.max_retries + 1):
            document, etag = self.load_leaderboard(token)
            mutate(document)
            document['lastUpdated'] = _now_iso()

            if not self._unchanged_since(etag, token):
                logger.info("Leaderboard changed during update (attempt %d), retrying", attempt)
                continue

            try:
                self.github.update_gist(
                    self.gist_id,
                    {self.filename: json.dumps(document, indent=2)},
                    token=token,
                    description=LEADERBOARD_DESCRIPTION,
                    etag=etag,
                )
            except GitHubError as e:
                if e.status in (409, 412):
                    logger.info("Leaderboard write rejected as stale (attempt %d), retrying", attempt)
                    continue
                raise
            return document

        raise SyncConflictError(f"Leaderboard still contended after {self.max_retries} attempts", 409)

    def load_player(self, login: str, token: Optional[str] = None) -> Optional[Dict[str, Any]]:
        document, _ = self.load_leaderboard(token)
        entry = document['players'].get(login)
        return entry if isinstance(entry, dict) else None

    def save_player(self, user: Dict[str, Any], token: str, stats: Stats,
                    last_played_date: Optional[str],
                    game_state: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        login = user['login']
        entry = {
            'username': login,
            'avatar': user.get('avatar_url'),
            'stats': stats.to_dict(),
            'lastPlayedDate': last_played_date,
            'gameState': game_state,
            'lastUpdated': _now_iso(),
        }

        def mutate(document: Dict[str, Any]) -> None:
            document['players'][login] = entry

        self.update_document(mutate, token)
        return entry

    # ------------------------------------------------------------------
    # Player sync
    # ------------------------------------------------------------------

    def get_user(self, token: str) -> Dict[str, Any]:
        user = self.github.get_user(token)
        if not user.get('login'):
            raise GitHubError("User profile has no login", 401)
        return user

    def sync_player(self, store: LocalStore, token: str, today: str,
                    user: Optional[Dict[str, Any]] = None) -> SyncResult:
        """
        Reconciles a player's local store with their leaderboard entry.

        Both sides present: statistics are merged and the remote last played
        date is preferred. One side present: it wins outright. The result is
        written back to the leaderboard and then to the local store. A remote
        game snapshot from ``today`` is copied locally so the day's result is
        restored on this device.

        Remote failures, including a failed write, leave local data untouched
        and are reported as ``SyncStatus.ERROR``.
        """
        local_stats = store.load_raw_stats()
        local_last_played = store.get_last_played()

        try:
            user = user or self.get_user(token)
            remote_entry = self.load_player(user['login'], token)
        except GitHubError as e:
            logger.warning("Sync failed for player %s: %s", store.player_id, e)
            return SyncResult(status=SyncStatus.ERROR, source='local',
                              stats=local_stats or Stats(),
                              last_played_date=local_last_played, error=str(e))

        remote_stats = None
        remote_last_played = None
        remote_game_state = None
        if remote_entry is not None and isinstance(remote_entry.get('stats'), dict):
            remote_stats = Stats.from_dict(remote_entry['stats'])
            remote_last_played = remote_entry.get('lastPlayedDate')
            remote_game_state = remote_entry.get('gameState')

        if local_stats is not None and remote_stats is not None:
            source = 'merged'
            last_played = remote_last_played or local_last_played
        elif remote_stats is not None:
            source = 'remote'
            last_played = remote_last_played
        elif local_stats is not None:
            source = 'local'
            last_played = local_last_played
        else:
            return SyncResult(status=SyncStatus.SYNCED, source='none', stats=Stats(),
                              username=user['login'])

        stats = merge_stats(local_stats, remote_stats)

        local_snapshot = store.load_game_state()
        restored_snapshot = None
        if isinstance(remote_game_state, dict) and remote_game_state.get('date') == today:
            remote_snapshot = GameState.from_snapshot(remote_game_state)
            if _is_further_along(remote_snapshot, local_snapshot, today):
                restored_snapshot = local_snapshot = remote_snapshot
        game_state = local_snapshot.to_snapshot() if local_snapshot is not None else remote_game_state

        try:
            self.save_player(user, token, stats, last_played, game_state)
        except GitHubError as e:
            logger.warning("Could not write merged stats for %s: %s", user['login'], e)
            return SyncResult(status=SyncStatus.ERROR, source='local',
                              stats=local_stats or Stats(),
                              last_played_date=local_last_played,
                              username=user['login'], error=str(e))

        store.save_stats(stats)
        if last_played:
            store.set_last_played(last_played)
        if restored_snapshot is not None:
            store.save_game_state(restored_snapshot)

        return SyncResult(status=SyncStatus.SYNCED, source=source, stats=stats,
                          last_played_date=last_played, game_state=game_state,
                          username=user['login'])

    def push_player(self, store: LocalStore, token: str,
                    include_game_state: bool = True) -> SyncResult:
        """Uploads the local stats (and today's snapshot) after a game ends or a reset."""
        stats = store.load_stats()
        last_played = store.get_last_played()
        snapshot = store.load_game_state() if include_game_state else None
        game_state = snapshot.to_snapshot() if snapshot is not None else None
        try:
            user = self.get_user(token)
            self.save_player(user, token, stats, last_played, game_state)
        except GitHubError as e:
            logger.warning("Push failed for player %s: %s", store.player_id, e)
            return SyncResult(status=SyncStatus.ERROR, source='local', stats=stats,
                              last_played_date=last_played, error=str(e))
        return SyncResult(status=SyncStatus.SYNCED, source='local', stats=stats,
                          last_played_date=last_played, game_state=game_state,
                          username=user['login'])

    def top_players(self, limit: int = 10) -> List[PlayerRanking]:
        """Players ordered by win rate, then by games played."""
        document, _ = self.load_leaderboard()
        rankings = []
        for login, entry in document['players'].items():
            if not isinstance(entry, dict):
                continue
            rankings.append(PlayerRanking(
                username=entry.get('username') or login,
                avatar=entry.get('avatar'),
                stats=Stats.from_dict(entry.get('stats')),
            ))

        def sort_key(ranking: PlayerRanking):
            played = ranking.stats.games_played
            win_rate = ranking.stats.games_won / played if played > 0 else 0
            return (-win_rate, -played)

        rankings.sort(key=sort_key)
        return rankings[:max(0, limit)]


# Global service instance
_sync_service = None


def get_sync_service() -> Optional[SyncService]:
    """Get the global sync service instance."""
    return _sync_service


def initialize_sync_service(github: GitHubClient, gist_id: str, filename: str,
                            max_retries: int) -> SyncService:
    """Initialize the global sync service instance."""
    global _sync_service
    _sync_service = SyncService(github, gist_id, filename, max_retries)
    return _sync_service
