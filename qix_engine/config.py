"""Game configuration and per-level difficulty ramp."""

from dataclasses import dataclass
from typing import NamedTuple


@dataclass
class GameConfig:
    """Configuration settings for playfield dimensions, speeds and timing."""

    # Playfield and display settings
    WIDTH: int = 800
    HEIGHT: int = 600
    MARGIN: int = 20
    FPS: int = 60
    SCALE: float = 1.0              # Size factor relative to an 800px field

    # Game mechanics
    TARGET_PERCENTAGE: float = 75.0  # Win condition (75% territory)
    LIVES_PER_GAME: int = 3

    # Entity speeds (pixels per nominal frame)
    PLAYER_SPEED: float = 4.0
    SLOW_DRAW_MULTIPLIER: float = 0.5
    FUSE_SPEED: float = 2.0
    SPARX_SPEED_FACTOR: float = 1.2  # Relative to PLAYER_SPEED
    QIX_BASE_SPEED: float = 2.0

    # Timing
    MAX_FRAME_STEP: float = 2.0     # dt clamp, in nominal frames
    DEATH_ANIMATION_STEP: float = 0.03
    DEATH_PAUSE_FRAMES: int = 120

    @property
    def playfield_area(self) -> float:
        """Area inside the margins, i.e. the whole claimable field."""
        return float((self.WIDTH - 2 * self.MARGIN) * (self.HEIGHT - 2 * self.MARGIN))

    @property
    def frame_interval_ms(self) -> float:
        """Nominal duration of one frame."""
        return 1000.0 / self.FPS

    def frame_delta(self, elapsed_ms: float) -> float:
        """
        Convert wall-clock time since the previous frame into a step size.

        Returns:
            Elapsed time in nominal frames, clamped to MAX_FRAME_STEP so a
            frame hitch never produces one huge simulation step.
        """
        if elapsed_ms <= 0:
            return 1.0
        return min(elapsed_ms / self.frame_interval_ms, self.MAX_FRAME_STEP)


DEFAULT_CONFIG = GameConfig()


class LevelSettings(NamedTuple):
    sparx_count: int
    qix_count: int


def level_settings(level: int) -> LevelSettings:
    """Number of hostiles for a level; grows slowly and caps at 4 Sparx, 3 Qix."""
    if level <= 1:
        return LevelSettings(sparx_count=1, qix_count=1)
    if level == 2:
        return LevelSettings(sparx_count=2, qix_count=1)
    return LevelSettings(
        sparx_count=min(2 + (level - 3) // 2, 4),
        qix_count=min(2 + (level - 3) // 3, 3),
    )
