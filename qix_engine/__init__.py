"""Territory, motion and collision core of a Qix-style arcade game."""

from qix_engine.collision import Hazard, check_collisions, detect_collision
from qix_engine.config import DEFAULT_CONFIG, GameConfig, level_settings
from qix_engine.engine import (
    create_initial_state,
    next_level,
    parse_script,
    queue_test_commands,
    update_game,
)
from qix_engine.models import (
    DrawSpeed,
    Fuse,
    GamePhase,
    GameState,
    InputState,
    Player,
    Point,
    Qix,
    QixLine,
    Segment,
    Sparx,
    TestCommand,
)
from qix_engine.territory import TerritoryError, split_territory

__all__ = [
    "DEFAULT_CONFIG",
    "DrawSpeed",
    "Fuse",
    "GameConfig",
    "GamePhase",
    "GameState",
    "Hazard",
    "InputState",
    "Player",
    "Point",
    "Qix",
    "QixLine",
    "Segment",
    "Sparx",
    "TerritoryError",
    "TestCommand",
    "check_collisions",
    "create_initial_state",
    "detect_collision",
    "level_settings",
    "next_level",
    "parse_script",
    "queue_test_commands",
    "split_territory",
    "update_game",
]
