"""
Frame update and game phase state machine.

update_game is the single per-tick entry point. It never mutates the
state it is given: every tick returns a new GameState built with
dataclasses.replace, so earlier states stay valid for renderers, replays
and tests.
"""

import logging
import math
import random
from dataclasses import replace
from typing import Iterable, Optional, Tuple

from qix_engine.collision import detect_collision, level_won
from qix_engine.config import DEFAULT_CONFIG, GameConfig, level_settings
from qix_engine.fuse import INACTIVE_FUSE, advance_fuse, ignite_fuse
from qix_engine.geometry import (
    closest_point_on_polygon,
    distance,
    is_on_segment_set,
    path_length,
    path_to_segments,
    point_in_polygon,
    polygon_to_segments,
)
from qix_engine.models import (
    DrawSpeed,
    GamePhase,
    GameState,
    InputState,
    Player,
    Point,
    TestCommand,
)
from qix_engine.qix import create_qix, relocate_qix, update_qix
from qix_engine.sparx import create_sparx, relocate_sparx, update_sparx
from qix_engine.territory import TerritoryError, claim_territory

logger = logging.getLogger(__name__)

ARRIVAL_TOLERANCE = 4.0     # Drawing ends once the player is this close to the boundary
WALK_TOLERANCE = 3.0        # Positions this close to the boundary count as on it
MIN_CLOSING_PATH = 4        # Points a path needs before it can close

DIRECTIONS = {
    "up": Point(0, -1),
    "down": Point(0, 1),
    "left": Point(-1, 0),
    "right": Point(1, 0),
    "u": Point(0, -1),
    "d": Point(0, 1),
    "l": Point(-1, 0),
    "r": Point(1, 0),
}


# ============================================================================
# STATE CONSTRUCTION
# ============================================================================

def create_initial_state(config: GameConfig = DEFAULT_CONFIG, level: int = 1,
                         rng: Optional[random.Random] = None) -> GameState:
    """
    Build a fresh level.

    The boundary is the playfield rectangle inside the margins, the player
    stands at the middle of the bottom edge and the phase is START.

    Args:
        config: Game configuration
        level: Level number, drives the hostile count
        rng: Random source for the Qix orientation

    Returns:
        New GameState.
    """
    m = config.MARGIN
    w = config.WIDTH - m
    h = config.HEIGHT - m
    boundary = (Point(m, m), Point(w, m), Point(w, h), Point(m, h))
    start = Point(config.WIDTH / 2, h)
    settings = level_settings(level)

    n = settings.qix_count
    qixes = tuple(
        create_qix(config,
                   Point((i - (n - 1) / 2) * 80 * config.SCALE, ((i % 2) * 40 - 20) * config.SCALE),
                   i, rng)
        for i in range(n)
    )

    return GameState(
        phase=GamePhase.START,
        level=level,
        score=0,
        player=Player(pos=start, last_border_pos=start, lives=config.LIVES_PER_GAME),
        qixes=qixes,
        sparx=create_sparx(config, level, settings.sparx_count),
        fuse=replace(INACTIVE_FUSE, speed=config.FUSE_SPEED),
        boundary=boundary,
        drawn_segments=(),
        total_area=config.playfield_area,
        claimed_area=0.0,
        claim_percentage=0.0,
        target_percentage=config.TARGET_PERCENTAGE,
    )


def next_level(state: GameState, config: GameConfig = DEFAULT_CONFIG) -> GameState:
    """Generate the following level, carrying score and lives over."""
    fresh = create_initial_state(config, state.level + 1)
    logger.info("Level %d complete, score %d", state.level, state.score)
    return replace(fresh, score=state.score,
                   player=replace(fresh.player, lives=state.player.lives))


def queue_test_commands(state: GameState, commands: Iterable[TestCommand]) -> GameState:
    """Append scripted input; one command is consumed per playing tick."""
    return replace(state, test_commands=state.test_commands + tuple(commands))


def parse_script(script: str) -> Tuple[TestCommand, ...]:
    """
    Parse a compact input script such as ``"l:5,u:20"``.

    Each item is a direction name (up/down/left/right or u/d/l/r) and a
    frame count.

    Raises:
        ValueError: On an unknown direction or a malformed item.
    """
    commands = []
    for item in filter(None, (part.strip() for part in script.split(","))):
        name, _, frames = item.partition(":")
        direction = DIRECTIONS.get(name.strip().lower())
        if direction is None:
            raise ValueError(f"unknown direction {name!r} in script")
        commands.append(TestCommand(direction=direction, frames=int(frames or 1)))
    return tuple(commands)


# ============================================================================
# PER-TICK UPDATE
# ============================================================================

def update_game(state: GameState, inputs: InputState, config: GameConfig = DEFAULT_CONFIG,
                dt: float = 1.0) -> GameState:
    """
    Advance the game by one frame.

    Args:
        state: Previous state (left untouched)
        inputs: Input snapshot for this frame
        config: Game configuration
        dt: Elapsed time in nominal frames, clamped to MAX_FRAME_STEP

    Returns:
        The next GameState.
    """
    signalled = _apply_signals(state, inputs, config)
    if signalled is not state:
        return signalled

    if state.phase == GamePhase.DYING:
        return _update_dying(state, config)
    if state.phase != GamePhase.PLAYING:
        return state

    dt = max(0.0, min(dt, config.MAX_FRAME_STEP))
    state, inputs = _consume_test_command(state, inputs)

    direction = inputs.direction
    if direction is not None:
        speed = config.PLAYER_SPEED
        if inputs.slow_draw:
            speed *= config.SLOW_DRAW_MULTIPLIER
        target = _clamp_to_playfield(
            Point(state.player.pos.x + direction.x * speed,
                  state.player.pos.y + direction.y * speed),
            config,
        )
        # A target equal to the current position means the player pushed
        # against the playfield edge
        if target != state.player.pos:
            if state.player.is_drawing:
                state = _step_drawing(state, target, config)
            else:
                state = _step_walking(state, target, speed, inputs.slow_draw)

    state = _update_fuse(state, direction is not None, config)
    state = replace(
        state,
        qixes=tuple(update_qix(q, config, state.boundary, state.drawn_segments, dt)
                    for q in state.qixes),
        sparx=update_sparx(state.sparx, state.boundary, dt),
    )

    hazard = detect_collision(state)
    if hazard is not None:
        logger.info("Player hit by %s at %s", hazard.name, tuple(state.player.pos))
        return replace(
            state,
            phase=GamePhase.DYING,
            player=replace(state.player, death_animation=0.0,
                           death_pause=config.DEATH_PAUSE_FRAMES),
        )
    if level_won(state):
        logger.info("Claimed %.1f%% of level %d", state.claim_percentage, state.level)
        return replace(state, phase=GamePhase.LEVELCOMPLETE)
    return state


def _apply_signals(state: GameState, inputs: InputState, config: GameConfig) -> GameState:
    """Handle the edge-triggered start and pause signals."""
    phase = state.phase
    if inputs.start:
        if phase in (GamePhase.START, GamePhase.PAUSED):
            return replace(state, phase=GamePhase.PLAYING)
        if phase == GamePhase.GAMEOVER:
            return replace(create_initial_state(config), phase=GamePhase.PLAYING)
        if phase == GamePhase.LEVELCOMPLETE:
            return replace(next_level(state, config), phase=GamePhase.PLAYING)
    if inputs.pause and phase == GamePhase.PLAYING:
        return replace(state, phase=GamePhase.PAUSED)
    return state


def _consume_test_command(state: GameState, inputs: InputState) -> Tuple[GameState, InputState]:
    """Scripted commands override live input while any are queued."""
    if not state.test_commands:
        return state, inputs

    cmd, rest = state.test_commands[0], state.test_commands[1:]
    if cmd.frames > 1:
        rest = (replace(cmd, frames=cmd.frames - 1),) + rest
    return replace(state, test_commands=rest), InputState(direction=cmd.direction)


def _clamp_to_playfield(p: Point, config: GameConfig) -> Point:
    m = config.MARGIN
    return Point(max(m, min(config.WIDTH - m, p.x)),
                 max(m, min(config.HEIGHT - m, p.y)))


# ============================================================================
# PLAYER MOVEMENT
# ============================================================================

def _step_walking(state: GameState, target: Point, speed: float, slow_draw: bool) -> GameState:
    """
    Move a player who is not drawing.

    A move whose boundary projection barely changes heads into the field
    and starts a path; any other move walks along the boundary. Moves into
    claimed territory are ignored.
    """
    player = state.player
    boundary = state.boundary
    inside = point_in_polygon(target, boundary)
    if not inside and not is_on_segment_set(target, polygon_to_segments(boundary), WALK_TOLERANCE):
        return state

    snapped_current = closest_point_on_polygon(player.pos, boundary)
    snapped_target = closest_point_on_polygon(target, boundary)
    along_border = distance(snapped_current, snapped_target) > speed * 0.5

    if inside and not along_border:
        logger.debug("Drawing started at %s", tuple(snapped_current))
        return replace(state, player=replace(
            player,
            pos=target,
            is_drawing=True,
            draw_speed=DrawSpeed.SLOW if slow_draw else DrawSpeed.FAST,
            current_path=(snapped_current, target),
        ))

    return replace(state, player=replace(player, pos=snapped_target,
                                         last_border_pos=snapped_target))


def _step_drawing(state: GameState, target: Point, config: GameConfig) -> GameState:
    """
    Extend the path; close it once the player is back on the boundary.

    Targets outside the boundary are claimed territory and the move is
    ignored. A path too short to close that touches the boundary again ends
    the draw where it touched, leaving nothing claimed.
    """
    player = state.player
    boundary = state.boundary
    touching = is_on_segment_set(target, polygon_to_segments(boundary), ARRIVAL_TOLERANCE)
    if not touching and not point_in_polygon(target, boundary):
        return state

    path = player.current_path + (target,)
    if not touching:
        return replace(state, player=replace(player, pos=target, current_path=path))

    end = closest_point_on_polygon(target, boundary)
    if len(path) < MIN_CLOSING_PATH:
        logger.debug("Drawing abandoned at %s", tuple(end))
        return _end_drawing(replace(state, player=replace(player, pos=end)))

    path = path[:-1] + (end,)
    state = replace(state, player=replace(player, pos=end, current_path=path))
    return _complete_drawing(state, config)


def _end_drawing(state: GameState) -> GameState:
    player = state.player
    return replace(
        state,
        player=replace(player, is_drawing=False, current_path=(), last_border_pos=player.pos),
        fuse=replace(state.fuse, active=False),
    )


def _complete_drawing(state: GameState, config: GameConfig) -> GameState:
    """
    Claim territory with the finished path.

    If the territory engine rejects the path the draw is cancelled and the
    boundary is left as it was.
    """
    path = state.player.current_path
    if len(path) < 2:
        return _end_drawing(state)

    reference = (state.qixes[0].center if state.qixes
                 else Point(config.WIDTH / 2, config.HEIGHT / 2))
    try:
        claim = claim_territory(state.boundary, path, reference,
                                state.total_area, state.claimed_area)
    except TerritoryError as e:
        logger.warning("Drawing cancelled: %s", e)
        return _end_drawing(state)

    multiplier = 2 if state.player.draw_speed == DrawSpeed.SLOW else 1
    points = math.floor(path_length(path) * multiplier)
    logger.info("Claimed %.0f px2, total %.1f%%, +%d points",
                claim.claimed_delta, claim.claim_percentage, points)

    state = replace(
        state,
        boundary=claim.boundary,
        claimed_area=claim.claimed_area,
        claim_percentage=claim.claim_percentage,
        drawn_segments=state.drawn_segments + path_to_segments(path),
        score=state.score + points,
        sparx=relocate_sparx(state.sparx, claim.boundary, state.player.pos),
        qixes=tuple(relocate_qix(q, claim.boundary) for q in state.qixes),
    )
    return _end_drawing(state)


def _update_fuse(state: GameState, moving: bool, config: GameConfig) -> GameState:
    """Light and burn the fuse while the player idles mid-draw."""
    player = state.player
    fuse = state.fuse
    if player.is_drawing and not moving:
        if not fuse.active:
            fuse = ignite_fuse(player.current_path, config.FUSE_SPEED)
        return replace(state, fuse=advance_fuse(fuse, player.current_path))
    if moving and fuse.active:
        return replace(state, fuse=replace(fuse, active=False))
    return state


# ============================================================================
# DEATH SEQUENCE
# ============================================================================

def _update_dying(state: GameState, config: GameConfig) -> GameState:
    """Play the death animation, pause, then respawn or end the game."""
    player = state.player
    if player.death_animation < 1:
        return replace(state, player=replace(
            player, death_animation=player.death_animation + config.DEATH_ANIMATION_STEP))
    if player.death_pause > 0:
        return replace(state, player=replace(player, death_pause=player.death_pause - 1))

    lives = player.lives - 1
    if lives <= 0:
        logger.info("Game over on level %d with score %d", state.level, state.score)
        return replace(state, phase=GamePhase.GAMEOVER, player=replace(player, lives=lives))

    anchor = player.last_border_pos
    return replace(
        state,
        phase=GamePhase.PLAYING,
        player=replace(player, pos=anchor, is_drawing=False, current_path=(),
                       death_animation=0.0, lives=lives),
        sparx=relocate_sparx(state.sparx, state.boundary, anchor, respawn_all=True),
        fuse=replace(state.fuse, active=False),
    )
