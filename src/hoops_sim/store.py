from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class GameStateStore:
    """JSON files of in-progress games, one per game id."""

    SAVE_VERSION = 1

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self.last_load_error: str = ""

    def path_for(self, game_id: str) -> Path:
        return self.root / f"game_{game_id}.json"

    def exists(self, game_id: str) -> bool:
        return self.path_for(game_id).exists()

    def save(self, game_id: str, state: dict[str, Any]) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        path = self.path_for(game_id)
        payload = {
            "save_version": self.SAVE_VERSION,
            "game_id": game_id,
            "game_state": state,
        }
        self._write_json_with_backup(path, payload)
        return path

    def load(self, game_id: str) -> dict[str, Any] | None:
        self.last_load_error = ""
        path = self.path_for(game_id)
        if not path.exists():
            return None
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            if isinstance(raw, dict):
                version = int(raw.get("save_version", 1) or 1)
                if version > self.SAVE_VERSION:
                    self.last_load_error = (
                        f"Unsupported game state version {version}; app supports up to {self.SAVE_VERSION}."
                    )
                    return None
                state = raw.get("game_state")
                if isinstance(state, dict):
                    return state
                self.last_load_error = "Game state payload is invalid; ignoring saved game."
                return None
            self.last_load_error = "Game state file has invalid format; ignoring saved game."
        except (json.JSONDecodeError, OSError) as exc:
            self.last_load_error = f"Failed to load game state ({exc}); ignoring saved game."
            return None
        return None

    def delete(self, game_id: str) -> bool:
        path = self.path_for(game_id)
        if not path.exists():
            return False
        path.unlink()
        return True

    def list_games(self) -> list[str]:
        if not self.root.exists():
            return []
        return sorted(p.stem.removeprefix("game_") for p in self.root.glob("game_*.json"))

    def _write_json_with_backup(self, path: Path, payload: Any, *, with_backup: bool = True) -> None:
        if with_backup and path.exists():
            backup = path.with_suffix(path.suffix + ".bak")
            try:
                shutil.copy2(path, backup)
            except OSError as exc:
                logger.warning("Could not back up %s: %s", path, exc)
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
