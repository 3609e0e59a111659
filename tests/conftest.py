"""Shared builders for engine tests."""

import random
from dataclasses import replace
from typing import Optional, Sequence

import pytest

from qix_engine.config import GameConfig
from qix_engine.engine import create_initial_state, update_game
from qix_engine.models import (
    NO_INPUT,
    GamePhase,
    GameState,
    InputState,
    Point,
    Qix,
    QixLine,
    Sparx,
)

# 200x200 field with a 20px margin: the boundary starts as the 160x160
# square (20, 20)-(180, 180) and the player starts at (100, 180).
SMALL_CONFIG = GameConfig(WIDTH=200, HEIGHT=200, MARGIN=20, SCALE=0.1)

RECT = (Point(20, 20), Point(180, 20), Point(180, 180), Point(20, 180))


def stationary_qix(center: Point, half_length: float = 1.0) -> Qix:
    """A Qix that turns in place but never translates."""
    return Qix(
        lines=(QixLine(Point(center.x - half_length, center.y),
                       Point(center.x + half_length, center.y)),),
        center=center,
        angle=0.0,
        base_speed=0.0,
        time=0.0,
        color_a=(0, 255, 0),
        color_b=(255, 0, 0),
        rotation_mult=0.8,
        translation_mult=1.2,
        length_mult=1.0,
    )


def make_playing_state(config: GameConfig = SMALL_CONFIG,
                       qix_center: Point = Point(175, 100),
                       sparx: Sequence[Sparx] = (),
                       qixes: Optional[Sequence[Qix]] = None) -> GameState:
    """Fresh level in PLAYING with a stationary Qix and no Sparx by default."""
    state = create_initial_state(config, rng=random.Random(7))
    return replace(
        state,
        phase=GamePhase.PLAYING,
        qixes=tuple(qixes) if qixes is not None else (stationary_qix(qix_center),),
        sparx=tuple(sparx),
    )


def run_ticks(state: GameState, ticks: int, inputs: InputState = NO_INPUT,
              config: GameConfig = SMALL_CONFIG) -> GameState:
    for _ in range(ticks):
        state = update_game(state, inputs, config, 1.0)
    return state


@pytest.fixture
def config() -> GameConfig:
    return SMALL_CONFIG


@pytest.fixture
def playing_state() -> GameState:
    return make_playing_state()
