"""
Qix-like Territory Capture Game - pygame front end

Draws lines through the open field to claim territory while the Qix roams
the unclaimed region and Sparx patrol its border. All game rules live in
the qix_engine package; this module only turns keys into input snapshots,
steps the engine once per frame and renders the resulting state.

Controls:
- Arrow keys / WASD to move, walk into the field to start drawing
- Hold Shift for a slow draw (2x points)
- Space / Enter to start or continue, Escape to pause
"""

import argparse
import logging
import math
from typing import Optional, Sequence

import pygame

from qix_engine import (
    DEFAULT_CONFIG,
    GameConfig,
    GamePhase,
    GameState,
    InputState,
    Point,
    TestCommand,
    create_initial_state,
    parse_script,
    queue_test_commands,
    update_game,
)
from qix_engine.models import DrawSpeed

logger = logging.getLogger(__name__)


# ============================================================================
# COLOURS AND LAYOUT
# ============================================================================

HUD_HEIGHT = 24
GRID_SIZE = 40

BACKGROUND = (10, 10, 10)
GRID_LINE = (12, 22, 22)
CLAIMED = (0, 40, 60)
INNER_BORDER = (0, 160, 204)
OUTER_BORDER = (0, 255, 255)
DRAWN_LINE = (0, 221, 255)
PLAYER = (0, 255, 136)
PATH = (255, 255, 0)
SPARX = (255, 68, 68)
SUPER_SPARX = (255, 0, 0)
FUSE = (255, 136, 0)
HUD_TEXT = (220, 220, 220)

KEY_DIRECTIONS = {
    pygame.K_UP: Point(0, -1),
    pygame.K_DOWN: Point(0, 1),
    pygame.K_LEFT: Point(-1, 0),
    pygame.K_RIGHT: Point(1, 0),
    pygame.K_w: Point(0, -1),
    pygame.K_s: Point(0, 1),
    pygame.K_a: Point(-1, 0),
    pygame.K_d: Point(1, 0),
}


# ============================================================================
# KEYBOARD DECODING
# ============================================================================

class KeyboardState:
    """
    Turns held keys into a single movement direction.

    The most recently pressed direction key wins while it stays held; when
    it is released the first other held direction key takes over.
    """

    __slots__ = ['last_key']

    def __init__(self):
        self.last_key = None            # Last pressed direction key

    def direction(self, pressed) -> Optional[Point]:
        """
        Get the movement direction for this frame.

        Args:
            pressed: Key state indexable by pygame key constant, as returned
                by pygame.key.get_pressed()

        Returns:
            Unit direction vector, or None when no direction key is held.
        """
        if self.last_key is not None and not pressed[self.last_key]:
            self.last_key = None

        if self.last_key is None:
            for key in KEY_DIRECTIONS:
                if pressed[key]:
                    self.last_key = key
                    break

        if self.last_key is None:
            return None
        return KEY_DIRECTIONS[self.last_key]

    def key_down(self, key: int):
        """Register a freshly pressed key so it takes priority."""
        if key in KEY_DIRECTIONS:
            self.last_key = key


def slow_draw_held(pressed) -> bool:
    return bool(pressed[pygame.K_LSHIFT] or pressed[pygame.K_RSHIFT])


# ============================================================================
# MAIN GAME CLASS
# ============================================================================

class QixGame:
    """
    Main game controller: window, input, frame loop and rendering.

    Game state is an immutable GameState replaced once per frame by
    update_game.
    """

    def __init__(self, config: GameConfig = DEFAULT_CONFIG, level: int = 1,
                 commands: Sequence[TestCommand] = ()):
        """
        Initialize the window and the first level.

        Args:
            config: Game configuration
            level: Level to start on
            commands: Scripted input played before live keys
        """
        self.config = config

        pygame.init()
        self.screen = pygame.display.set_mode(
            (self.config.WIDTH, self.config.HEIGHT + HUD_HEIGHT)
        )
        pygame.display.set_caption("The Qix Game")
        self.clock = pygame.time.Clock()
        self._update_fonts()

        self.keyboard = KeyboardState()
        self.state = create_initial_state(config, level)
        if commands:
            self.state = queue_test_commands(self.state, commands)

        self.running = True

    def _update_fonts(self):
        """Initialize fonts with proper scaling."""
        scale = self.config.SCALE
        self.font = pygame.font.SysFont("consolas", max(10, int(16 * scale)), bold=True)
        self.small_font = pygame.font.SysFont("consolas", max(8, int(10 * scale)), bold=True)
        self.title_font = pygame.font.SysFont("consolas", max(16, int(42 * scale)), bold=True)
        self.menu_font = pygame.font.SysFont("consolas", max(12, int(22 * scale)), bold=True)

    def handle_input(self) -> InputState:
        """
        Process window events and held keys.

        Returns:
            InputState for this frame; start and pause are set only on the
            frame their key went down.
        """
        start = pause = False
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    pause = True
                elif event.key in (pygame.K_RETURN, pygame.K_SPACE):
                    start = True
                else:
                    self.keyboard.key_down(event.key)

        keys = pygame.key.get_pressed()
        return InputState(
            direction=self.keyboard.direction(keys),
            slow_draw=slow_draw_held(keys),
            start=start,
            pause=pause,
        )

    # ------------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------------

    def render(self):
        """Render the playfield, entities, HUD and phase overlay."""
        state = self.state
        cfg = self.config
        m = cfg.MARGIN
        field = pygame.Rect(m, m, cfg.WIDTH - 2 * m, cfg.HEIGHT - 2 * m)
        line_width = max(1, int(2 * cfg.SCALE))

        self.screen.fill(BACKGROUND)

        # Grid
        step = max(4, int(GRID_SIZE * cfg.SCALE))
        for x in range(field.left, field.right + 1, step):
            pygame.draw.line(self.screen, GRID_LINE, (x, field.top), (x, field.bottom))
        for y in range(field.top, field.bottom + 1, step):
            pygame.draw.line(self.screen, GRID_LINE, (field.left, y), (field.right, y))

        # Claimed area: everything in the field outside the boundary
        if len(state.boundary) >= 3:
            pygame.draw.rect(self.screen, CLAIMED, field)
            pygame.draw.polygon(self.screen, BACKGROUND, state.boundary)
            pygame.draw.polygon(self.screen, INNER_BORDER, state.boundary, line_width)

        pygame.draw.rect(self.screen, OUTER_BORDER, field, line_width)

        for seg in state.drawn_segments:
            pygame.draw.line(self.screen, DRAWN_LINE, seg.start, seg.end, line_width)

        player = state.player
        if player.is_drawing and len(player.current_path) > 1:
            pygame.draw.lines(self.screen, PATH, False, player.current_path, line_width)

        if state.fuse.active:
            pygame.draw.circle(self.screen, FUSE, _pixel(state.fuse.pos),
                               max(2, int(5 * cfg.SCALE)))

        self._render_qixes(state)

        for sparx in state.sparx:
            radius = (6 if sparx.is_super else 4) * cfg.SCALE
            pygame.draw.circle(self.screen, SUPER_SPARX if sparx.is_super else SPARX,
                               _pixel(sparx.pos), max(2, int(radius)))

        self._render_player(state)
        self._render_hud(state)
        self._render_overlay(state)

        pygame.display.flip()

    def _render_qixes(self, state: GameState):
        """Draw each Qix trail oldest first, fading with age."""
        width = max(1, int(3 * self.config.SCALE))
        for qix in state.qixes:
            count = len(qix.lines)
            for i in range(count - 1, -1, -1):
                line = qix.lines[i]
                color = qix.color_a if i % 2 == 0 else qix.color_b
                fade = 1 - (line.age / count) * 0.3
                pygame.draw.line(self.screen, _dim(color, fade), line.start, line.end, width)

    def _render_player(self, state: GameState):
        """Draw the player marker, or the expanding rings while dying."""
        player = state.player
        scale = self.config.SCALE
        p = player.pos

        if state.phase == GamePhase.DYING:
            t = min(player.death_animation, 1.0)
            for i in range(4):
                fade = max(0.0, 1 - t - i * 0.15)
                if fade <= 0:
                    continue
                radius = int((15 + t * 80 + i * 20) * scale)
                pygame.draw.circle(self.screen, _dim((255, 0, 0), fade), _pixel(p), radius,
                                   max(1, int((3 - i * 0.5) * scale)))
            color = (255, 0, 0) if math.floor(t * 15) % 2 == 0 else (255, 255, 255)
            size = (1 + t * 0.5) * scale
        else:
            color = PLAYER
            size = scale

        pygame.draw.polygon(self.screen, color, [
            (p.x, p.y - 8 * size),
            (p.x + 6 * size, p.y + 6 * size),
            (p.x - 6 * size, p.y + 6 * size),
        ])

        if (state.phase == GamePhase.PLAYING and player.is_drawing and
                player.draw_speed == DrawSpeed.SLOW):
            label = self.small_font.render("2X", True, PATH)
            label_pos = _pixel(Point(p.x, p.y - 15 * scale))
            self.screen.blit(label, label.get_rect(center=label_pos))

    def _render_hud(self, state: GameState):
        """Level, score, claim progress and lives under the playfield."""
        hud_y = self.config.HEIGHT
        pygame.draw.rect(self.screen, (20, 20, 20),
                         pygame.Rect(0, hud_y, self.config.WIDTH, HUD_HEIGHT))
        text = (f"Level: {state.level}  Score: {state.score:,}  "
                f"Claimed: {state.claim_percentage:.0f}%/{state.target_percentage:.0f}%  "
                f"Lives: {state.player.lives}")
        hud_text = self.font.render(text, True, HUD_TEXT)
        self.screen.blit(hud_text, (4, hud_y + 3))

    def _render_overlay(self, state: GameState):
        """Centered text for every phase that waits for the player."""
        phase = state.phase
        if phase == GamePhase.START:
            lines = [("THE QIX GAME", (255, 255, 100)),
                     ("Claim %d%% of the field" % state.target_percentage, (200, 200, 200)),
                     ("Press ENTER to Start", (200, 200, 200))]
        elif phase == GamePhase.PAUSED:
            lines = [("PAUSED", (255, 255, 100)),
                     ("Press ENTER to Resume", (200, 200, 200))]
        elif phase == GamePhase.GAMEOVER:
            lines = [("GAME OVER", (255, 100, 100)),
                     (f"Score: {state.score:,}  Level: {state.level}", (255, 255, 255)),
                     ("Press ENTER to Play Again", (200, 200, 200))]
        elif phase == GamePhase.LEVELCOMPLETE:
            lines = [("LEVEL COMPLETE!", (100, 255, 100)),
                     (f"Area Captured: {state.claim_percentage:.0f}%", (255, 255, 255)),
                     ("Press ENTER to Continue", (200, 200, 200))]
        elif phase == GamePhase.DYING and state.player.death_animation >= 1:
            lines = [(f"Lives: {state.player.lives - 1}", (255, 255, 255))]
        else:
            return

        center_x = self.config.WIDTH // 2
        y = self.config.HEIGHT // 2 - int(40 * self.config.SCALE)
        for i, (text, color) in enumerate(lines):
            font = self.title_font if i == 0 and len(lines) > 1 else self.menu_font
            surface = font.render(text, True, color)
            self.screen.blit(surface, surface.get_rect(center=(center_x, y)))
            y += surface.get_height() + int(12 * self.config.SCALE)

    # ------------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------------

    def run(self):
        """
        Main game loop.

        Processes input, steps the engine by the clamped elapsed time and
        renders the new state.
        """
        while self.running:
            elapsed = self.clock.tick(self.config.FPS)
            inputs = self.handle_input()

            previous = self.state.phase
            self.state = update_game(self.state, inputs, self.config,
                                     self.config.frame_delta(elapsed))
            if self.state.phase != previous:
                logger.debug("Phase %s -> %s", previous.name, self.state.phase.name)

            self.render()

        pygame.quit()


def _pixel(p: Point):
    return int(round(p.x)), int(round(p.y))


def _dim(color, factor: float):
    return tuple(int(c * factor) for c in color)


# ============================================================================
# ENTRY POINT
# ============================================================================

def main(argv: Optional[Sequence[str]] = None):
    ap = argparse.ArgumentParser(description="Qix-like territory capture game")
    ap.add_argument("--width", type=int, default=DEFAULT_CONFIG.WIDTH)
    ap.add_argument("--height", type=int, default=DEFAULT_CONFIG.HEIGHT)
    ap.add_argument("--level", type=int, default=1)
    ap.add_argument("--script", default="", help='scripted moves, e.g. "l:5,u:20"')
    ap.add_argument("--log-level", default="WARNING")
    args = ap.parse_args(argv)
    try:
        commands = parse_script(args.script)
    except ValueError as e:
        ap.error(str(e))

    logging.basicConfig(level=args.log_level.upper(),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = GameConfig(WIDTH=args.width, HEIGHT=args.height,
                        SCALE=min(args.width / 800, args.height / 600))
    QixGame(config, args.level, commands).run()


if __name__ == "__main__":
    main()
