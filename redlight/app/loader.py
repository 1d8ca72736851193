from __future__ import annotations
import importlib.util
import logging
from pathlib import Path
import yaml
from typing import Any, Dict, List, Tuple

from redlight.api.config import GameSettings
from redlight.game.state import RGB, validate_color

logger = logging.getLogger(__name__)


def load_game_manifest(game_root: Path) -> Dict[str, Any]:
    manifest = game_root / "manifest.yaml"
    if not manifest.exists():
        raise FileNotFoundError(f"Missing manifest.yaml in {game_root}")
    with open(manifest, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{manifest} must contain a mapping")
    return data


def load_game_module(game_root: Path):
    """
    Loads games/<id>/main.py module and returns the module object.
    The file must define a get_game() -> Game factory.
    """
    main_py = game_root / "main.py"
    if not main_py.exists():
        raise FileNotFoundError(f"Missing main.py in {game_root}")
    spec = importlib.util.spec_from_file_location(f"games.{game_root.name}.main", main_py)
    module = importlib.util.module_from_spec(spec)
    assert spec and spec.loader
    spec.loader.exec_module(module)  # type: ignore[attr-defined]
    if not hasattr(module, "get_game"):
        raise AttributeError("Game module must define get_game()")
    return module


def settings_from_manifest(manifest: Dict[str, Any]) -> GameSettings:
    """
    options:
      difficulty: medium
      color_threshold: 60
      ...
    """
    return GameSettings.from_options(manifest.get("options"))


def roster_from_manifest(manifest: Dict[str, Any]) -> List[Tuple[str, RGB]]:
    """
    players:
      - id: player1
        color: [200, 50, 50]
    """
    roster: List[Tuple[str, RGB]] = []
    for i, entry in enumerate(manifest.get("players") or []):
        if not isinstance(entry, dict) or "id" not in entry or "color" not in entry:
            raise ValueError(f"players[{i}] needs an id and a color")
        roster.append((str(entry["id"]), validate_color(entry["color"])))
    logger.debug("manifest roster: %s", [pid for pid, _ in roster])
    return roster
