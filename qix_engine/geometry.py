"""
Geometry kernel.

Pure functions over Point, Segment and polygon tuples. Polygons are
closed implicitly (the last vertex connects back to the first) and their
winding is never assumed.
"""

import math
from typing import NamedTuple, Sequence, Tuple

from qix_engine.models import Point, Polygon, Segment

DEGENERATE_LENGTH_SQ = 0.01         # Edges shorter than 0.1px are treated as points


class EdgeLocation(NamedTuple):
    """Position on a polygon boundary: edge index and parameter t in [0, 1]."""
    edge_index: int
    t: float


def distance(a: Point, b: Point) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def lerp(a: Point, b: Point, t: float) -> Point:
    return Point(a.x + (b.x - a.x) * t, a.y + (b.y - a.y) * t)


def path_to_segments(path: Sequence[Point]) -> Tuple[Segment, ...]:
    """Open sequence of points to consecutive segments."""
    return tuple(Segment(path[i], path[i + 1]) for i in range(len(path) - 1))


def polygon_to_segments(polygon: Sequence[Point]) -> Tuple[Segment, ...]:
    """Closed polygon to its edges, including the closing edge."""
    n = len(polygon)
    return tuple(Segment(polygon[i], polygon[(i + 1) % n]) for i in range(n))


def path_length(path: Sequence[Point]) -> float:
    return sum(distance(path[i - 1], path[i]) for i in range(1, len(path)))


# ============================================================================
# PROJECTIONS AND DISTANCES
# ============================================================================

def project_onto_segment(p: Point, a: Point, b: Point) -> Tuple[float, float]:
    """
    Project a point onto segment a-b.

    Returns:
        (t, dist) where t in [0, 1] is the clamped parameter of the closest
        point and dist the distance to it. Degenerate segments report t=0
        and the distance to a.
    """
    dx = b.x - a.x
    dy = b.y - a.y
    len2 = dx * dx + dy * dy
    if len2 < DEGENERATE_LENGTH_SQ:
        return 0.0, distance(p, a)

    t = max(0.0, min(1.0, ((p.x - a.x) * dx + (p.y - a.y) * dy) / len2))
    return t, math.hypot(p.x - (a.x + t * dx), p.y - (a.y + t * dy))


def point_to_segment_distance(p: Point, seg: Segment) -> float:
    return project_onto_segment(p, seg.start, seg.end)[1]


def is_on_segment_set(p: Point, segments: Sequence[Segment], tolerance: float = 3.0) -> bool:
    """True if p is closer than tolerance to any of the segments."""
    return any(point_to_segment_distance(p, seg) < tolerance for seg in segments)


def nearest_point_on_polygon(p: Point, polygon: Sequence[Point]) -> EdgeLocation:
    """
    Locate the boundary position closest to p.

    Every edge is tried in order; the first edge reaching the minimal
    distance wins ties.
    """
    best = EdgeLocation(0, 0.0)
    min_dist = math.inf
    n = len(polygon)
    for i in range(n):
        t, d = project_onto_segment(p, polygon[i], polygon[(i + 1) % n])
        if d < min_dist:
            min_dist = d
            best = EdgeLocation(i, t)
    return best


def closest_point_on_polygon(p: Point, polygon: Sequence[Point]) -> Point:
    """Snap p onto the polygon boundary."""
    if not polygon:
        return p
    edge_index, t = nearest_point_on_polygon(p, polygon)
    return lerp(polygon[edge_index], polygon[(edge_index + 1) % len(polygon)], t)


# ============================================================================
# POLYGON PROPERTIES
# ============================================================================

def point_in_polygon(p: Point, polygon: Sequence[Point]) -> bool:
    """
    Even-odd ray casting.

    Edges are treated half-open in y, so of two polygons sharing an edge a
    point on that edge belongs to at most one of them.
    """
    inside = False
    j = len(polygon) - 1
    for i in range(len(polygon)):
        xi, yi = polygon[i]
        xj, yj = polygon[j]
        if (yi > p.y) != (yj > p.y):
            if p.x < (xj - xi) * (p.y - yi) / (yj - yi) + xi:
                inside = not inside
        j = i
    return inside


def signed_area(polygon: Sequence[Point]) -> float:
    """
    Shoelace area with sign.

    Positive means clockwise on screen, where Y grows downward.
    """
    n = len(polygon)
    total = 0.0
    for i in range(n):
        a = polygon[i]
        b = polygon[(i + 1) % n]
        total += a.x * b.y - b.x * a.y
    return total / 2


def polygon_area(polygon: Sequence[Point]) -> float:
    """Absolute shoelace area; 0 for fewer than three points."""
    if len(polygon) < 3:
        return 0.0
    return abs(signed_area(polygon))


def is_clockwise(polygon: Sequence[Point]) -> bool:
    """Winding as seen on screen (Y down)."""
    return signed_area(polygon) > 0


def _orientation(a: Point, b: Point, c: Point) -> float:
    return (c.x - a.x) * (b.y - a.y) - (b.x - a.x) * (c.y - a.y)


def segments_intersect(a: Segment, b: Segment) -> bool:
    """
    Strict crossing test.

    Collinear overlap and touching endpoints do not count.
    """
    d1 = _orientation(b.start, b.end, a.start)
    d2 = _orientation(b.start, b.end, a.end)
    d3 = _orientation(a.start, a.end, b.start)
    d4 = _orientation(a.start, a.end, b.end)
    return (((d1 > 0 > d2) or (d1 < 0 < d2)) and
            ((d3 > 0 > d4) or (d3 < 0 < d4)))


def is_simple_polygon(polygon: Sequence[Point]) -> bool:
    """True if no two non-adjacent edges cross."""
    edges = polygon_to_segments(polygon)
    n = len(edges)
    if n < 3:
        return False
    for i in range(n):
        for j in range(i + 2, n):
            if i == 0 and j == n - 1:
                continue    # Adjacent through the closing vertex
            if segments_intersect(edges[i], edges[j]):
                return False
    return True


def centroid(polygon: Sequence[Point]) -> Point:
    """Area centroid; falls back to the vertex mean for degenerate polygons."""
    area = signed_area(polygon)
    if abs(area) < 1e-9:
        n = len(polygon)
        return Point(sum(p.x for p in polygon) / n, sum(p.y for p in polygon) / n)

    cx = cy = 0.0
    n = len(polygon)
    for i in range(n):
        a = polygon[i]
        b = polygon[(i + 1) % n]
        cross = a.x * b.y - b.x * a.y
        cx += (a.x + b.x) * cross
        cy += (a.y + b.y) * cross
    return Point(cx / (6 * area), cy / (6 * area))


def interior_point(polygon: Polygon) -> Point:
    """
    Find some point strictly inside the polygon.

    Tries the centroid first (enough for convex shapes), then midpoints of
    vertex pairs. Returns the first vertex if nothing qualifies.
    """
    center = centroid(polygon)
    if point_in_polygon(center, polygon):
        return center

    n = len(polygon)
    for i in range(n):
        for j in range(i + 2, n):
            mid = lerp(polygon[i], polygon[j], 0.5)
            if point_in_polygon(mid, polygon):
                return mid
    return polygon[0]
