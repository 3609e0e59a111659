"""Tests for the fuse."""

import math

import pytest

from qix_engine.fuse import INACTIVE_FUSE, advance_fuse, fuse_reached_player, ignite_fuse
from qix_engine.models import Point

PATH = (Point(0, 0), Point(4, 0), Point(10, 0))


def burn(fuse, path, ticks):
    for _ in range(ticks):
        fuse = advance_fuse(fuse, path)
    return fuse


def test_ignite_starts_at_first_point():
    fuse = ignite_fuse(PATH, 3.0)
    assert fuse.active
    assert fuse.pos == Point(0, 0)
    assert fuse.path_index == 0


def test_leftover_distance_carries_past_path_points():
    fuse = burn(ignite_fuse(PATH, 3.0), PATH, 2)
    assert fuse.pos == Point(6, 0)
    assert fuse.path_index == 1


def test_reaches_tip_after_ceil_length_over_speed_ticks():
    fuse = ignite_fuse(PATH, 3.0)
    fuse = burn(fuse, PATH, 3)
    assert not fuse_reached_player(fuse, PATH)
    fuse = advance_fuse(fuse, PATH)
    assert fuse_reached_player(fuse, PATH)
    assert fuse.pos == Point(10, 0)


@pytest.mark.parametrize("length,speed", [(20, 2.0), (21, 2.0), (7, 7.0), (50, 3.0)])
def test_burn_time_matches_path_length(length, speed):
    path = (Point(0, 0), Point(0, length))
    ticks = math.ceil(length / speed)
    fuse = burn(ignite_fuse(path, speed), path, ticks - 1)
    assert not fuse_reached_player(fuse, path)
    assert fuse_reached_player(advance_fuse(fuse, path), path)


def test_fuse_never_overshoots_the_tip():
    fuse = burn(ignite_fuse(PATH, 3.0), PATH, 10)
    assert fuse.pos == Point(10, 0)
    assert fuse.path_index == len(PATH) - 1


def test_inactive_fuse_does_nothing():
    assert advance_fuse(INACTIVE_FUSE, PATH) is INACTIVE_FUSE
    assert not fuse_reached_player(INACTIVE_FUSE, PATH)


def test_single_point_path_leaves_fuse_in_place():
    fuse = ignite_fuse((Point(5, 5),), 2.0)
    assert advance_fuse(fuse, (Point(5, 5),)) is fuse
