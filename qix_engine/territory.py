"""
Territory engine.

Splits the unclaimed boundary polygon along a completed player path and
keeps the half that still holds the roaming Qix.
"""

import logging
from typing import List, NamedTuple, Sequence, Tuple

from qix_engine.geometry import (
    distance,
    is_simple_polygon,
    nearest_point_on_polygon,
    point_in_polygon,
    polygon_area,
)
from qix_engine.models import Point, Polygon

logger = logging.getLogger(__name__)

VERTEX_SNAP_T = 0.001       # Path ends this close to a vertex reuse it
DUPLICATE_EPSILON = 0.5     # Points closer than this to their predecessor are dropped
COLLINEAR_EPSILON = 1.0     # Cross-product magnitude below which a vertex is redundant


class TerritoryError(ValueError):
    """A completed path could not be turned into a valid boundary."""


class TerritoryClaim(NamedTuple):
    boundary: Polygon
    claimed_area: float         # Running total for the level
    claimed_delta: float        # Newly claimed by this path
    claim_percentage: float


# ============================================================================
# SPLIT HELPERS
# ============================================================================

def _nearest_vertex_index(p: Point, polygon: Sequence[Point]) -> int:
    return min(range(len(polygon)), key=lambda i: distance(p, polygon[i]))


def insert_path_endpoints(polygon: Polygon, start: Point, end: Point) -> Tuple[Polygon, int, int]:
    """
    Insert the path's endpoints into the polygon's vertex cycle.

    Each endpoint splits the edge it lands on, unless it lies within
    VERTEX_SNAP_T of an existing vertex, in which case that vertex is
    reused.

    Returns:
        (new_polygon, start_index, end_index)
    """
    start_loc = nearest_point_on_polygon(start, polygon)
    end_loc = nearest_point_on_polygon(end, polygon)

    start_first = (start_loc.edge_index, start_loc.t) < (end_loc.edge_index, end_loc.t)
    ordered = [(start_loc, start, True), (end_loc, end, False)]
    if not start_first:
        ordered.reverse()

    result: List[Point] = []
    start_idx = end_idx = -1

    for i, vertex in enumerate(polygon):
        result.append(vertex)
        for loc, pt, is_start in ordered:
            if loc.edge_index == i and VERTEX_SNAP_T < loc.t < 1 - VERTEX_SNAP_T:
                result.append(pt)
                if is_start:
                    start_idx = len(result) - 1
                else:
                    end_idx = len(result) - 1

    if start_idx < 0:
        start_idx = _nearest_vertex_index(start, result)
    if end_idx < 0:
        end_idx = _nearest_vertex_index(end, result)

    return tuple(result), start_idx, end_idx


def build_candidate(polygon: Polygon, start_idx: int, end_idx: int,
                    path: Sequence[Point], forward: bool) -> Polygon:
    """
    Close the path into a polygon using one side of the boundary.

    The path runs start -> end; the boundary is then followed from end
    back to start, forward or backward through the vertex cycle.
    """
    n = len(polygon)
    step = 1 if forward else -1
    result = list(path)

    i = (end_idx + step) % n
    while i != start_idx:
        result.append(polygon[i])
        i = (i + step) % n

    return tuple(result)


def _is_collinear(a: Point, b: Point, c: Point) -> bool:
    cross = (b.x - a.x) * (c.y - a.y) - (b.y - a.y) * (c.x - a.x)
    return abs(cross) < COLLINEAR_EPSILON


def clean_polygon(polygon: Polygon) -> Polygon:
    """
    Drop duplicate and collinear vertices.

    Returns the deduplicated list when removing collinear points would leave
    fewer than three vertices, and the input unchanged when even that is
    too short.
    """
    if len(polygon) < 3:
        return polygon

    deduped: List[Point] = []
    for curr in polygon:
        prev = deduped[-1] if deduped else polygon[-1]
        if distance(curr, prev) < DUPLICATE_EPSILON:
            continue
        deduped.append(curr)

    n = len(deduped)
    final = [
        deduped[i] for i in range(n)
        if not _is_collinear(deduped[i - 1], deduped[i], deduped[(i + 1) % n])
    ]

    if len(final) >= 3:
        return tuple(final)
    if len(deduped) >= 3:
        return tuple(deduped)
    return polygon


# ============================================================================
# PUBLIC API
# ============================================================================

def split_territory(polygon: Polygon, path: Sequence[Point], reference: Point) -> Polygon:
    """
    Split the boundary along a completed path.

    Args:
        polygon: Current unclaimed boundary
        path: Completed path, first and last points on the boundary
        reference: Logical center of the roaming Qix

    Returns:
        The candidate containing reference, cleaned. If reference is in both
        candidates or neither, the larger candidate is kept. A path with
        fewer than two points, or a boundary with fewer than three, returns
        the polygon unchanged.

    Raises:
        TerritoryError: If the kept candidate is not a simple polygon with
            positive area.
    """
    if len(path) < 2 or len(polygon) < 3:
        return polygon

    cycle, start_idx, end_idx = insert_path_endpoints(polygon, path[0], path[-1])

    forward = build_candidate(cycle, start_idx, end_idx, path, forward=True)
    backward = build_candidate(cycle, start_idx, end_idx, path, forward=False)

    in_forward = point_in_polygon(reference, forward)
    in_backward = point_in_polygon(reference, backward)

    if in_forward != in_backward:
        kept = forward if in_forward else backward
    else:
        logger.warning(
            "Qix reference %s is %s both split candidates; keeping the larger",
            tuple(reference), "inside" if in_forward else "outside",
        )
        kept = forward if polygon_area(forward) >= polygon_area(backward) else backward

    kept = clean_polygon(kept)
    if len(kept) < 3 or polygon_area(kept) <= 0 or not is_simple_polygon(kept):
        raise TerritoryError(f"split produced an invalid boundary of {len(kept)} vertices")
    return kept


def claim_territory(polygon: Polygon, path: Sequence[Point], reference: Point,
                    playfield_area: float, claimed_area: float) -> TerritoryClaim:
    """
    Split the boundary and account for the newly claimed area.

    Args:
        polygon: Current unclaimed boundary
        path: Completed path
        reference: Logical center of the roaming Qix
        playfield_area: Total claimable area of the level
        claimed_area: Area claimed before this path

    Returns:
        TerritoryClaim with the new boundary and the updated totals.
    """
    boundary = split_territory(polygon, path, reference)
    new_claimed = playfield_area - polygon_area(boundary)
    return TerritoryClaim(
        boundary=boundary,
        claimed_area=new_claimed,
        claimed_delta=new_claimed - claimed_area,
        claim_percentage=new_claimed / playfield_area * 100 if playfield_area > 0 else 0.0,
    )
