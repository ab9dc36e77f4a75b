# ===============================
# File: flappy_renderer.py
# ===============================
from __future__ import annotations
import pygame
from typing import Iterable, List, Tuple

from .flappy_agent import Action

JUMP_KEYS = (pygame.K_SPACE, pygame.K_UP)


class InputAdapter:
    """키 입력을 정책과 같은 Action 타입으로 변환 (keydown 1회당 점프 1회)."""

    def __init__(self):
        self.pending = False

    def feed(self, event):
        if event.type == pygame.KEYDOWN and event.key in JUMP_KEYS:
            self.pending = True

    def take(self) -> Action:
        action = Action.JUMP if self.pending else Action.NOOP
        self.pending = False
        return action


class Renderer:
    def __init__(self, w: int, h: int, fps: int = 60):
        pygame.init()
        self.w, self.h = w, h
        self.fps = fps
        self.screen = pygame.display.set_mode((w, h + 60))
        pygame.display.set_caption("Flappy — Human vs AI (Q-learning)")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("consolas", 18, bold=True)
        self.big = pygame.font.SysFont("consolas", 32, bold=True)

    def draw(self, bird_pos: Tuple[float, float], radius: float,
             pipes: Iterable[Tuple[float, float, float, float]],
             hud_text: str, score: int):
        self.screen.fill((135, 206, 235))
        # pipes
        for px, py, pw, ph in pipes:
            pygame.draw.rect(self.screen, (40, 160, 40), pygame.Rect(px, py, pw, ph))
        # bird
        bx, by = bird_pos
        pygame.draw.circle(self.screen, (250, 220, 0), (int(bx), int(by)), int(radius))
        # score
        s_text = self.big.render(f"Score: {score}", True, (0, 0, 0))
        self.screen.blit(s_text, (10, 10))
        # HUD
        bar_y = self.h
        pygame.draw.rect(self.screen, (250, 250, 250), (0, bar_y, self.w, 60))
        y = bar_y + 8
        for line in hud_text.split("\n"):
            surf = self.font.render(line, True, (20, 20, 20))
            self.screen.blit(surf, (10, y))
            y += surf.get_height() + 2
        pygame.display.flip()
        self.clock.tick(self.fps)

    def pump_events(self) -> List[pygame.event.Event]:
        return pygame.event.get()
