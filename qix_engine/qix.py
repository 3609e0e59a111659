"""
Qix motion model.

The Qix is a ring of line segments: every tick a new segment is built
from an oscillating center, angle and length and pushed to the front,
and the oldest one falls off the back. Per-instance multipliers and time
offsets make several Qixes trace different patterns.
"""

import logging
import math
import random
from dataclasses import replace
from typing import Optional, Sequence, Tuple

from qix_engine.config import GameConfig
from qix_engine.geometry import interior_point, is_on_segment_set, point_in_polygon
from qix_engine.models import Point, Polygon, Qix, QixLine, Segment

logger = logging.getLogger(__name__)

NUM_LINES = 12
BASE_LINE_LENGTH = 45.0
MIN_LINE_LENGTH = 20.0
MAX_LINE_LENGTH = 70.0
TIME_STEP = 0.06            # Phase advance per nominal frame
DRAWN_LINE_CLEARANCE = 15.0
EDGE_CLEARANCE = 10.0

# Colour pairs for successive Qixes (alternating line colours)
QIX_COLORS = (
    ((0, 255, 0), (255, 0, 0)),       # Green/Red (classic)
    ((0, 255, 255), (255, 0, 255)),   # Cyan/Magenta
    ((255, 255, 0), (0, 136, 255)),   # Yellow/Blue
    ((255, 136, 0), (136, 0, 255)),   # Orange/Purple
)


def _line_at(center: Point, angle: float, length: float) -> QixLine:
    dx = math.cos(angle) * length / 2
    dy = math.sin(angle) * length / 2
    return QixLine(start=Point(center.x - dx, center.y - dy),
                   end=Point(center.x + dx, center.y + dy))


def create_qix(config: GameConfig, offset: Point = Point(0, 0), index: int = 0,
               rng: Optional[random.Random] = None) -> Qix:
    """
    Create a Qix near the middle of the playfield.

    Args:
        config: Game configuration
        offset: Displacement of the spawn point from the playfield center
        index: Instance number, selects colours and motion multipliers
        rng: Random source for the initial angle (module random if None)

    Returns:
        New Qix with a single line.
    """
    rng = rng or random
    center = Point(config.WIDTH / 2 + offset.x, config.HEIGHT / 2 + offset.y)
    angle = rng.random() * math.pi * 2
    color_a, color_b = QIX_COLORS[index % len(QIX_COLORS)]

    return Qix(
        lines=(_line_at(center, angle, BASE_LINE_LENGTH * config.SCALE),),
        center=center,
        angle=angle,
        base_speed=config.QIX_BASE_SPEED * (0.9 + index * 0.15),
        time=index * 100.0,
        color_a=color_a,
        color_b=color_b,
        rotation_mult=index * 0.7 + 0.8,
        translation_mult=1.2 - index * 0.2,
        length_mult=1 + index * 0.3,
    )


def update_qix(qix: Qix, config: GameConfig, boundary: Polygon,
               drawn_segments: Sequence[Segment], dt: float) -> Qix:
    """
    Advance the Qix by one tick.

    The candidate center is rejected (the Qix turns and stretches in place)
    if it leaves the boundary polygon, comes within DRAWN_LINE_CLEARANCE of
    a drawn line, or leaves the playfield margins for the new length.

    Args:
        qix: Current Qix
        config: Game configuration
        boundary: Unclaimed boundary polygon
        drawn_segments: Lines the player has already completed
        dt: Elapsed time in nominal frames

    Returns:
        Updated Qix with a new front line.
    """
    if not qix.lines:
        return qix

    scale = config.SCALE
    time = qix.time + dt * TIME_STEP
    rm, tm, lm = qix.rotation_mult, qix.translation_mult, qix.length_mult

    rotation = math.sin(time * 2.1 * rm) * 0.15 + math.sin(time * 0.7 * rm) * 0.08
    shift_x = (math.sin(time * 1.3 * tm) * 1.2 + math.sin(time * 0.4 * tm) * 0.8) * tm * scale
    shift_y = (math.cos(time * 1.1 * tm) * 1.2 + math.cos(time * 0.5 * tm) * 0.8) * tm * scale
    stretch = (math.sin(time * 0.9 * lm) * 5 + math.sin(time * 2.5 * lm) * 3) * lm * scale

    newest = qix.lines[0]
    center = Point((newest.start.x + newest.end.x) / 2, (newest.start.y + newest.end.y) / 2)
    current_angle = math.atan2(newest.end.y - newest.start.y, newest.end.x - newest.start.x)
    current_length = math.hypot(newest.end.x - newest.start.x, newest.end.y - newest.start.y)

    angle = current_angle + rotation
    length = max(MIN_LINE_LENGTH * scale,
                 min(MAX_LINE_LENGTH * scale, current_length + stretch * 0.1))
    candidate = Point(center.x + shift_x * qix.base_speed, center.y + shift_y * qix.base_speed)

    margin = config.MARGIN + length / 2 + EDGE_CLEARANCE * scale
    if ((len(boundary) >= 3 and not point_in_polygon(candidate, boundary)) or
            is_on_segment_set(candidate, drawn_segments, DRAWN_LINE_CLEARANCE * scale) or
            not margin <= candidate.x <= config.WIDTH - margin or
            not margin <= candidate.y <= config.HEIGHT - margin):
        candidate = center

    aged = tuple(replace(line, age=i + 1) for i, line in enumerate(qix.lines))
    return replace(
        qix,
        lines=((_line_at(candidate, angle, length),) + aged)[:NUM_LINES],
        center=candidate,
        angle=angle,
        time=time,
    )


def qix_segments(qix: Qix) -> Tuple[Segment, ...]:
    return tuple(Segment(line.start, line.end) for line in qix.lines)


def relocate_qix(qix: Qix, boundary: Polygon) -> Qix:
    """
    Move a Qix stranded outside the boundary to a point inside it.

    The whole line trail is shifted with the center so the shape is kept.
    """
    if len(boundary) < 3 or point_in_polygon(qix.center, boundary):
        return qix

    target = interior_point(boundary)
    dx = target.x - qix.center.x
    dy = target.y - qix.center.y
    logger.debug("Qix relocated from %s to %s", tuple(qix.center), tuple(target))
    lines = tuple(
        replace(line,
                start=Point(line.start.x + dx, line.start.y + dy),
                end=Point(line.end.x + dx, line.end.y + dy))
        for line in qix.lines
    )
    return replace(qix, lines=lines, center=target)
