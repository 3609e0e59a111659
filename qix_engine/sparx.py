"""
Border walker for Sparx.

A Sparx walks a fixed arc length along the boundary polygon each tick.
Its clockwise flag is the direction it appears to travel on screen, so it
is combined with the polygon's current winding to pick a direction
through the vertex list; after a territory split flips the winding, the
Sparx keeps going the same way visually.
"""

import logging
from dataclasses import replace
from typing import List, Sequence, Tuple

from qix_engine.config import GameConfig
from qix_engine.geometry import (
    distance,
    is_clockwise,
    is_on_segment_set,
    lerp,
    nearest_point_on_polygon,
    polygon_to_segments,
)
from qix_engine.models import Point, Polygon, Sparx

logger = logging.getLogger(__name__)

MIN_EDGE_LENGTH = 1.0       # Shorter edges are passed through instantly
T_MIN = 0.001
T_MAX = 0.999
ARRIVAL_SLACK = 0.1         # Distance within which an edge end counts as reached
RELOCATE_TOLERANCE = 5.0    # Sparx farther than this from a new boundary are moved


def create_sparx(config: GameConfig, level: int, count: int) -> Tuple[Sparx, ...]:
    """
    Spawn Sparx alternately at the top-left and top-right corners.

    Args:
        config: Game configuration
        level: Current level; from level 5 the first Sparx is a super Sparx
        count: Number of Sparx to create

    Returns:
        Tuple of Sparx all travelling clockwise on screen.
    """
    m = config.MARGIN
    spawns = (Point(m, m), Point(config.WIDTH - m, m))
    speed = config.PLAYER_SPEED * config.SPARX_SPEED_FACTOR
    return tuple(
        Sparx(pos=spawns[i % len(spawns)], clockwise=True, speed=speed,
              is_super=level >= 5 and i == 0)
        for i in range(count)
    )


def move_along_boundary(pos: Point, dist: float, polygon: Polygon, clockwise: bool) -> Point:
    """
    Walk dist pixels along the polygon boundary from pos.

    pos is first snapped onto its nearest edge, so a position left slightly
    off a freshly changed boundary is picked up again. The walk carries any
    remainder onto the next (or previous) edge, wrapping around, and stops
    after at most twice the edge count of transitions.

    Args:
        pos: Current position, on or near the boundary
        dist: Arc length to travel
        polygon: Boundary polygon, any winding
        clockwise: Desired rotational sense on screen

    Returns:
        New position on the boundary.
    """
    n = len(polygon)
    if n < 2:
        return pos

    edge, t = nearest_point_on_polygon(pos, polygon)
    forward = clockwise == is_clockwise(polygon)
    t = max(T_MIN, min(T_MAX, t))
    remaining = dist

    for _ in range(2 * n):
        if remaining <= 0.001:
            break
        a = polygon[edge]
        b = polygon[(edge + 1) % n]
        edge_len = distance(a, b)

        if edge_len < MIN_EDGE_LENGTH:
            if forward:
                edge, t = (edge + 1) % n, T_MIN
            else:
                edge, t = (edge - 1) % n, T_MAX
            continue

        if forward:
            to_end = (1 - t) * edge_len
            if to_end <= remaining + ARRIVAL_SLACK:
                remaining = max(0.0, remaining - to_end)
                edge, t = (edge + 1) % n, T_MIN
            else:
                t = min(T_MAX, t + remaining / edge_len)
                remaining = 0.0
        else:
            to_start = t * edge_len
            if to_start <= remaining + ARRIVAL_SLACK:
                remaining = max(0.0, remaining - to_start)
                edge, t = (edge - 1) % n, T_MAX
            else:
                t = max(T_MIN, t - remaining / edge_len)
                remaining = 0.0

    return lerp(polygon[edge], polygon[(edge + 1) % n], t)


def update_sparx(sparx: Sequence[Sparx], polygon: Polygon, dt: float) -> Tuple[Sparx, ...]:
    """Advance every Sparx by speed * dt along the boundary."""
    if len(polygon) < 3:
        return tuple(sparx)
    return tuple(
        replace(s, pos=move_along_boundary(s.pos, s.speed * dt, polygon, s.clockwise))
        for s in sparx
    )


def find_far_points(anchor: Point, border: Sequence[Point], count: int) -> List[Point]:
    """
    Pick count boundary vertices far from anchor and spread apart.

    Greedy selection: each candidate scores its distance to the anchor plus
    half of min(distance to anchor, distance to the nearest already picked
    point).
    """
    if not border:
        return [anchor] * count

    picked: List[Point] = []
    for _ in range(count):
        best = border[0]
        best_score = float("-inf")
        for p in border:
            anchor_dist = distance(anchor, p)
            picked_dist = min((distance(p, q) for q in picked), default=float("inf"))
            score = anchor_dist + min(picked_dist, anchor_dist) * 0.5
            if score > best_score:
                best_score = score
                best = p
        picked.append(best)
    return picked


def relocate_sparx(sparx: Sequence[Sparx], polygon: Polygon, player_pos: Point,
                   respawn_all: bool = False) -> Tuple[Sparx, ...]:
    """
    Move Sparx that no longer sit on the boundary to far boundary points.

    Args:
        sparx: Current Sparx
        polygon: New boundary
        player_pos: Position to keep the relocated Sparx away from
        respawn_all: Relocate every Sparx, as after the player dies

    Returns:
        Sparx tuple with stranded members moved.
    """
    edges = polygon_to_segments(polygon)
    stranded = [respawn_all or not is_on_segment_set(s.pos, edges, RELOCATE_TOLERANCE)
                for s in sparx]
    if not any(stranded):
        return tuple(sparx)

    far_points = iter(find_far_points(player_pos, polygon, sum(stranded)))
    result = []
    for s, moved in zip(sparx, stranded):
        if moved:
            new_pos = next(far_points)
            logger.debug("Sparx relocated from %s to %s", tuple(s.pos), tuple(new_pos))
            s = replace(s, pos=new_pos)
        result.append(s)
    return tuple(result)
