"""Per-frame hazard checks and the claim win condition."""

from enum import IntEnum
from typing import Optional

from qix_engine.fuse import fuse_reached_player
from qix_engine.geometry import distance, point_to_segment_distance, segments_intersect
from qix_engine.models import GameState, Segment
from qix_engine.qix import qix_segments

SPARX_HIT_RADIUS = 10.0
QIX_LINE_PATH_RADIUS = 6.0      # Qix line ends this close to the new path segment
QIX_LINE_PLAYER_RADIUS = 10.0
QIX_CENTER_PLAYER_RADIUS = 12.0


class Hazard(IntEnum):
    """What killed the player."""
    FUSE = 0
    SPARX = 1
    QIX_PATH = 2
    QIX_PLAYER = 3


def detect_collision(state: GameState) -> Optional[Hazard]:
    """
    Run the hazard checks in order and report the first that fires.

    1. The fuse has burned to the tip of the path.
    2. A Sparx is within SPARX_HIT_RADIUS of the player.
    3. While drawing, the newest path segment crosses a Qix line or passes
       within QIX_LINE_PATH_RADIUS of a Qix line end.
    4. While drawing, the player is near a Qix line end or the Qix center.

    Returns:
        The Hazard that fired, or None.
    """
    player = state.player
    path = player.current_path

    if state.fuse.active and fuse_reached_player(state.fuse, path):
        return Hazard.FUSE

    for s in state.sparx:
        if distance(player.pos, s.pos) < SPARX_HIT_RADIUS:
            return Hazard.SPARX

    if not player.is_drawing:
        return None

    for qix in state.qixes:
        if len(path) >= 2:
            newest = Segment(path[-2], path[-1])
            if any(segments_intersect(newest, seg) for seg in qix_segments(qix)):
                return Hazard.QIX_PATH
            for line in qix.lines:
                if (point_to_segment_distance(line.start, newest) < QIX_LINE_PATH_RADIUS or
                        point_to_segment_distance(line.end, newest) < QIX_LINE_PATH_RADIUS):
                    return Hazard.QIX_PATH

        for line in qix.lines:
            if (distance(player.pos, line.start) < QIX_LINE_PLAYER_RADIUS or
                    distance(player.pos, line.end) < QIX_LINE_PLAYER_RADIUS):
                return Hazard.QIX_PLAYER
        if distance(player.pos, qix.center) < QIX_CENTER_PLAYER_RADIUS:
            return Hazard.QIX_PLAYER

    return None


def check_collisions(state: GameState) -> bool:
    return detect_collision(state) is not None


def level_won(state: GameState) -> bool:
    """True once the claimed share reaches the level target."""
    return state.claim_percentage >= state.target_percentage
