"""
Local Storage Service

Per-player key/value storage with browser local-storage semantics: string keys
mapped to string values, persisted as one JSON file per player. Malformed data
never fails a request; it is logged and replaced with defaults.
"""

import json
import logging
import os
import re
import tempfile
from typing import Any, Dict, Optional

from ..models.game import GameState
from ..models.stats import Stats

logger = logging.getLogger(__name__)

STATS_KEY = 'wordWaveStats'
LAST_PLAYED_KEY = 'wordWaveLastPlayed'
GAME_STATE_KEY = 'wordWaveGameState'
DEV_DATE_KEY = 'wordWaveDevDate'

SETTING_FLAGS = ('darkMode', 'colorBlind', 'hardMode')

PLAYER_ID_PATTERN = re.compile(r'^[A-Za-z0-9_-]{1,64}$')


def is_valid_player_id(player_id: Optional[str]) -> bool:
    return bool(player_id) and PLAYER_ID_PATTERN.match(player_id) is not None


class LocalStore:
    """
    Storage scoped to one player, the server-side counterpart of a browser origin.

    Concurrent writers to the same player are last-write-wins.
    """

    def __init__(self, storage_dir: str, player_id: str):
        if not is_valid_player_id(player_id):
            raise ValueError(f"Invalid player id: {player_id!r}")
        self.player_id = player_id
        self.storage_dir = storage_dir
        self.path = os.path.join(storage_dir, f"{player_id}.json")

    # ------------------------------------------------------------------
    # Raw key/value access
    # ------------------------------------------------------------------

    def _read_all(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Unreadable store for player %s, starting empty: %s", self.player_id, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Store for player %s is not an object, starting empty", self.player_id)
            return {}
        return {str(key): str(value) for key, value in data.items()}

    def _write_all(self, items: Dict[str, str]) -> None:
        os.makedirs(self.storage_dir, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.storage_dir, prefix=f".{self.player_id}.", suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(items, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: Any) -> None:
        items = self._read_all()
        items[key] = value if isinstance(value, str) else json.dumps(value)
        self._write_all(items)

    def remove_item(self, key: str) -> None:
        items = self._read_all()
        if key in items:
            del items[key]
            self._write_all(items)

    def _get_json(self, key: str) -> Optional[Any]:
        raw = self.get_item(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.warning("Malformed JSON under %s for player %s: %s", key, self.player_id, e)
            return None

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def load_raw_stats(self) -> Optional[Stats]:
        """Returns the stored statistics, or None when absent or malformed."""
        data = self._get_json(STATS_KEY)
        if not isinstance(data, dict):
            return None
        return Stats.from_dict(data)

    def load_stats(self) -> Stats:
        """Returns the stored statistics, falling back to defaults."""
        return self.load_raw_stats() or Stats()

    def save_stats(self, stats: Stats) -> None:
        self.set_item(STATS_KEY, stats.to_dict())

    # ------------------------------------------------------------------
    # Daily game snapshot and last-played marker
    # ------------------------------------------------------------------

    def load_game_state(self) -> Optional[GameState]:
        data = self._get_json(GAME_STATE_KEY)
        if not isinstance(data, dict):
            return None
        return GameState.from_snapshot(data)

    def save_game_state(self, state: GameState) -> None:
        self.set_item(GAME_STATE_KEY, state.to_snapshot())

    def clear_game_state(self) -> None:
        self.remove_item(GAME_STATE_KEY)

    def get_last_played(self) -> Optional[str]:
        return self.get_item(LAST_PLAYED_KEY) or None

    def set_last_played(self, day: str) -> None:
        self.set_item(LAST_PLAYED_KEY, day)

    def clear_last_played(self) -> None:
        self.remove_item(LAST_PLAYED_KEY)

    # ------------------------------------------------------------------
    # Developer overrides and settings
    # ------------------------------------------------------------------

    def get_dev_date(self) -> Optional[str]:
        return self.get_item(DEV_DATE_KEY) or None

    def set_dev_date(self, day: str) -> None:
        self.set_item(DEV_DATE_KEY, day)

    def clear_dev_date(self) -> None:
        self.remove_item(DEV_DATE_KEY)

    def get_flag(self, name: str) -> bool:
        return self.get_item(name) == 'true'

    def set_flag(self, name: str, enabled: bool) -> None:
        self.set_item(name, 'true' if enabled else 'false')
