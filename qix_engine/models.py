"""
Game state value types.

Every type here is immutable. The frame update builds a new GameState
each tick with dataclasses.replace, so a renderer or a test can hold on
to any previous state safely.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import NamedTuple, Optional, Tuple


# ============================================================================
# PRIMITIVES
# ============================================================================

class Point(NamedTuple):
    """Plain 2D coordinate in playfield pixels (Y grows downward)."""
    x: float
    y: float


class Segment(NamedTuple):
    """Directed edge between two points."""
    start: Point
    end: Point


Polygon = Tuple[Point, ...]
Path = Tuple[Point, ...]


# ============================================================================
# ENUMS
# ============================================================================

class GamePhase(IntEnum):
    """Top-level game phase."""
    START = 0
    PLAYING = 1
    PAUSED = 2
    DYING = 3
    GAMEOVER = 4
    LEVELCOMPLETE = 5


class DrawSpeed(IntEnum):
    """Speed of the path being drawn; slow paths score double."""
    FAST = 0
    SLOW = 1


# ============================================================================
# ENTITIES
# ============================================================================

@dataclass(frozen=True)
class Player:
    """
    The player's marker.

    current_path is non-empty exactly while is_drawing is set, and its
    first point lies on the boundary polygon.
    """
    pos: Point
    last_border_pos: Point          # Respawn anchor
    lives: int
    is_drawing: bool = False
    draw_speed: DrawSpeed = DrawSpeed.FAST
    current_path: Path = ()
    death_animation: float = 0.0    # 0..1 progress of the death effect
    death_pause: int = 0            # Frames to wait after the animation


@dataclass(frozen=True)
class QixLine:
    start: Point
    end: Point
    age: int = 0


@dataclass(frozen=True)
class Qix:
    """
    Free-roaming hostile drawn as a trail of aging line segments.

    The multipliers and the initial time phase differ per instance so that
    several Qixes driven by the same motion model do not move in lockstep.
    """
    lines: Tuple[QixLine, ...]      # Newest first
    center: Point
    angle: float
    base_speed: float
    time: float
    color_a: Tuple[int, int, int]
    color_b: Tuple[int, int, int]
    rotation_mult: float
    translation_mult: float
    length_mult: float


@dataclass(frozen=True)
class Sparx:
    """
    Border-bound hostile.

    clockwise is the visual rotational sense on screen, independent of the
    winding of the boundary polygon it walks on.
    """
    pos: Point
    clockwise: bool
    speed: float
    is_super: bool = False


@dataclass(frozen=True)
class Fuse:
    active: bool
    pos: Point
    path_index: int
    speed: float


@dataclass(frozen=True)
class TestCommand:
    """Scripted direction held for a number of frames."""
    __test__ = False                # Not a pytest test class
    direction: Point
    frames: int


@dataclass(frozen=True)
class InputState:
    """
    Normalized input snapshot for one tick.

    start and pause are edge-triggered: the host sets them only on the tick
    the key went down.
    """
    direction: Optional[Point] = None
    slow_draw: bool = False
    start: bool = False
    pause: bool = False


NO_INPUT = InputState()


# ============================================================================
# GAME STATE
# ============================================================================

@dataclass(frozen=True)
class GameState:
    """Complete per-level game state."""
    phase: GamePhase
    level: int
    score: int
    player: Player
    qixes: Tuple[Qix, ...]
    sparx: Tuple[Sparx, ...]
    fuse: Fuse
    boundary: Polygon               # Unclaimed region the Qix lives in
    drawn_segments: Tuple[Segment, ...]
    total_area: float
    claimed_area: float
    claim_percentage: float
    target_percentage: float
    test_commands: Tuple[TestCommand, ...] = ()
