"""Tests for the Qix motion model."""

import math
import random

import pytest

from qix_engine.config import GameConfig
from qix_engine.geometry import distance, is_on_segment_set, point_in_polygon
from qix_engine.models import Point, Segment
from qix_engine.qix import (
    NUM_LINES,
    create_qix,
    qix_segments,
    relocate_qix,
    update_qix,
)

CONFIG = GameConfig()
FULL_FIELD = (Point(20, 20), Point(780, 20), Point(780, 580), Point(20, 580))


def test_create_qix_centers_on_playfield():
    qix = create_qix(CONFIG, rng=random.Random(1))
    assert qix.center == Point(400, 300)
    assert len(qix.lines) == 1
    line = qix.lines[0]
    assert distance(line.start, line.end) == pytest.approx(45)
    assert distance(qix.center, line.start) == pytest.approx(22.5)


def test_instances_get_distinct_patterns():
    first = create_qix(CONFIG, index=0, rng=random.Random(1))
    second = create_qix(CONFIG, index=1, rng=random.Random(1))
    assert (first.rotation_mult, first.translation_mult, first.length_mult) != \
        (second.rotation_mult, second.translation_mult, second.length_mult)
    assert first.time != second.time
    assert first.color_a != second.color_a


def test_update_prepends_and_ages_lines():
    qix = create_qix(CONFIG, rng=random.Random(2))
    for _ in range(NUM_LINES + 5):
        qix = update_qix(qix, CONFIG, FULL_FIELD, (), 1.0)
    assert len(qix.lines) == NUM_LINES
    assert [line.age for line in qix.lines] == list(range(NUM_LINES))


def test_line_length_stays_within_limits():
    qix = create_qix(CONFIG, rng=random.Random(3))
    for _ in range(400):
        qix = update_qix(qix, CONFIG, FULL_FIELD, (), 1.0)
        length = distance(qix.lines[0].start, qix.lines[0].end)
        assert 20 - 1e-6 <= length <= 70 + 1e-6


def test_center_stays_inside_boundary():
    boundary = (Point(250, 150), Point(600, 200), Point(520, 450), Point(300, 420))
    qix = create_qix(CONFIG, rng=random.Random(4))
    assert point_in_polygon(qix.center, boundary)
    for _ in range(1000):
        qix = update_qix(qix, CONFIG, boundary, (), 1.0)
        assert point_in_polygon(qix.center, boundary)


def test_center_keeps_clear_of_drawn_lines():
    drawn = (Segment(Point(440, 20), Point(440, 580)),)
    qix = create_qix(CONFIG, rng=random.Random(5))
    for _ in range(1000):
        qix = update_qix(qix, CONFIG, FULL_FIELD, drawn, 1.0)
        assert not is_on_segment_set(qix.center, drawn, 15)


def test_time_advances_with_dt():
    qix = create_qix(CONFIG, rng=random.Random(6))
    assert update_qix(qix, CONFIG, FULL_FIELD, (), 2.0).time == pytest.approx(qix.time + 0.12)


def test_qix_segments_match_lines():
    qix = create_qix(CONFIG, rng=random.Random(7))
    qix = update_qix(qix, CONFIG, FULL_FIELD, (), 1.0)
    segments = qix_segments(qix)
    assert len(segments) == 2
    assert segments[0] == Segment(qix.lines[0].start, qix.lines[0].end)


def test_relocate_stranded_qix_moves_whole_trail():
    qix = create_qix(CONFIG, rng=random.Random(8))
    qix = update_qix(qix, CONFIG, FULL_FIELD, (), 1.0)
    boundary = (Point(500, 20), Point(780, 20), Point(780, 580), Point(500, 580))
    moved = relocate_qix(qix, boundary)

    assert point_in_polygon(moved.center, boundary)
    dx = moved.center.x - qix.center.x
    for old, new in zip(qix.lines, moved.lines):
        assert new.start.x - old.start.x == pytest.approx(dx)
        assert math.isclose(distance(new.start, new.end), distance(old.start, old.end))


def test_relocate_leaves_qix_inside_alone():
    qix = create_qix(CONFIG, rng=random.Random(9))
    assert relocate_qix(qix, FULL_FIELD) is qix
