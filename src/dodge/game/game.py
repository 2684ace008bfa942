# src/dodge/game/game.py
import sys, argparse, logging
from typing import Optional
import pygame
from pygame import K_SPACE, K_ESCAPE, K_r, K_n, K_LEFT, K_RIGHT, K_a, K_d
from .config import (
    WIDTH, HEIGHT, FPS, MAX_DT, HIGH_SCORE_FILE,
    COLOR_BG, COLOR_FG, COLOR_PLAYER, COLOR_OBSTACLE, COLOR_HIGH, COLOR_OVERLAY
)
from .events import Event, EventType
from .geometry import Rect
from .highscore import JsonFileStorage
from .simulation import Simulation, SimulationSnapshot

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Dodge the falling blocks.")
    p.add_argument("--seed", type=int, default=None,
                   help="Obstacle seed. Omit for a random one.")
    p.add_argument("--width", type=int, default=WIDTH)
    p.add_argument("--height", type=int, default=HEIGHT)
    p.add_argument("--highscore-file", default=HIGH_SCORE_FILE,
                   help="JSON file the high score is kept in.")
    p.add_argument("--log-level", default="WARNING",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p.parse_args(argv)


def to_pygame_rect(r: Rect) -> pygame.Rect:
    return pygame.Rect(int(round(r.x)), int(round(r.y)), int(round(r.width)), int(round(r.height)))


def draw_snapshot(surf: pygame.Surface, snap: SimulationSnapshot,
                  font: Optional[pygame.font.Font] = None):
    """Draw one frame of the simulation. HUD text only when a font is given."""
    surf.fill(COLOR_BG)
    pygame.draw.rect(surf, COLOR_PLAYER, to_pygame_rect(snap.player), border_radius=6)
    for ob in snap.obstacles:
        pygame.draw.rect(surf, COLOR_OBSTACLE, to_pygame_rect(ob), border_radius=4)

    if snap.game_over:
        overlay = pygame.Surface((snap.width, snap.height), pygame.SRCALPHA)
        overlay.fill(COLOR_OVERLAY)
        surf.blit(overlay, (0, 0))

    if font is None:
        return

    hud = f"Score: {int(snap.score)}   Level: {snap.level}"
    surf.blit(font.render(hud, True, COLOR_FG), (12, 10))
    if snap.new_high_score:
        high = font.render(f"★High: {snap.high_score}★", True, COLOR_HIGH)
    else:
        high = font.render(f"High: {snap.high_score}", True, COLOR_FG)
    surf.blit(high, (snap.width - high.get_width() - 12, 10))

    if snap.game_over:
        msg = font.render("Game over - R / SPACE / click to restart", True, COLOR_FG)
        surf.blit(msg, (snap.width // 2 - msg.get_width() // 2, snap.height // 2 - msg.get_height() // 2))


def _log_event(event: Event):
    if event.type == EventType.LEVEL_CHANGED:
        logger.info("level %d", event.data["level"])
    elif event.type == EventType.NEW_HIGH_SCORE:
        logger.info("new high score %d", event.data["value"])
    elif event.type == EventType.CLEARED:
        logger.debug("cleared at x=%.0f", event.data["x"])


def run(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    sim = Simulation(width=args.width, height=args.height,
                     storage=JsonFileStorage(args.highscore_file), seed=args.seed)
    sim.events.subscribe_all(_log_event)

    pygame.init()
    pygame.display.set_caption("Dodge")
    screen = pygame.display.set_mode((args.width, args.height))
    clock = pygame.time.Clock()
    font = pygame.font.SysFont("jetbrainsmono", 18)

    while True:
        dt = clock.tick(FPS) / 1000.0
        if dt > MAX_DT:  # clamp stalls
            dt = MAX_DT

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                pygame.quit(); sys.exit()
            if event.type == pygame.KEYDOWN:
                if event.key == K_ESCAPE:
                    pygame.quit(); sys.exit()
                if event.key in (K_r, K_SPACE) and sim.game_over:
                    sim.reset()
                if event.key == K_n and sim.game_over:
                    # Restart with a NEW RANDOM seed
                    sim.reset(seed=sim.rng.randrange(0, 2**32 - 1))
            if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1 and sim.game_over:
                sim.reset()

        keys = pygame.key.get_pressed()
        sim.set_input(left=keys[K_LEFT] or keys[K_a], right=keys[K_RIGHT] or keys[K_d])
        sim.update(dt)

        draw_snapshot(screen, sim.snapshot(), font)
        pygame.display.flip()


if __name__ == "__main__":
    run()
