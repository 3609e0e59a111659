"""Fuse that burns along an idle in-progress path towards the player."""

from dataclasses import replace
from typing import Sequence

from qix_engine.geometry import distance
from qix_engine.models import Fuse, Point

INACTIVE_FUSE = Fuse(active=False, pos=Point(0, 0), path_index=0, speed=0.0)


def ignite_fuse(path: Sequence[Point], speed: float) -> Fuse:
    """Light a fuse at the first point of the path."""
    return Fuse(active=True, pos=path[0], path_index=0, speed=speed)


def advance_fuse(fuse: Fuse, path: Sequence[Point]) -> Fuse:
    """
    Burn the fuse forward by its speed along the path.

    Distance left over after reaching a path point carries on to the next
    one; the fuse never goes past the last point.
    """
    if not fuse.active or len(path) < 2:
        return fuse

    index = fuse.path_index
    pos = fuse.pos
    remaining = fuse.speed

    while remaining > 0 and index < len(path) - 1:
        target = path[index + 1]
        gap = distance(pos, target)
        if gap <= remaining:
            pos = target
            index += 1
            remaining -= gap
        else:
            pos = Point(pos.x + (target.x - pos.x) / gap * remaining,
                        pos.y + (target.y - pos.y) / gap * remaining)
            remaining = 0

    return replace(fuse, pos=pos, path_index=index)


def fuse_reached_player(fuse: Fuse, path: Sequence[Point]) -> bool:
    """True once an active fuse has burned to the tip of the path."""
    return fuse.active and fuse.path_index >= len(path) - 1
