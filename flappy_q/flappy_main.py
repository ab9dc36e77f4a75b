# ===============================
# File: flappy_main.py
# ===============================
from __future__ import annotations
import argparse
import logging
import random
import time
from typing import Optional

import numpy as np

from .flappy_agent import AgentConfig, QAgent
from .flappy_discretizer import DiscretizerConfig, StateDiscretizer
from .flappy_env import FlappyConfig, FlappyWorld
from .flappy_episode import (EpisodeConfig, EpisodeController,
                             MODE_DEMO, MODE_HUMAN, MODE_TRAIN, MODES)

logger = logging.getLogger(__name__)

# ---------- App Config ----------
FPS = 60
SEED = 7
TRAIN_STEPS_PER_FRAME = 8  # AI 학습 속도
DEMO_DELAY = 0.0


def set_seed(seed: Optional[int]):
    if seed is None:
        return
    random.seed(seed)
    np.random.seed(seed)


def build(seed: Optional[int] = SEED, training: bool = True) -> EpisodeController:
    """환경/이산화기/에이전트/컨트롤러를 구성. 학습 모드가 아니면 ε=0에서 시작."""
    env_cfg = FlappyConfig(seed=seed)
    world = FlappyWorld(env_cfg)
    discretizer = StateDiscretizer(env_cfg.screen_w, env_cfg.screen_h, DiscretizerConfig())
    agent_cfg = AgentConfig(epsilon_start=1.0 if training else 0.0)
    agent = QAgent(discretizer.n_states, agent_cfg, rng=random.Random(seed))
    return EpisodeController(world, agent, discretizer, EpisodeConfig())


def train_headless(controller: EpisodeController, episodes: int) -> EpisodeController:
    """화면 없이 지정한 에피소드 수만큼 학습."""
    target = controller.episode + episodes
    while controller.episode < target:
        controller.step(MODE_TRAIN)
    logger.info("Training finished: episodes=%d best=%d epsilon=%.4f visited=%d/%d",
                controller.episode, controller.best_score, controller.agent.epsilon,
                controller.agent.visited_states(), controller.discretizer.n_states)
    return controller


def run_interactive(controller: EpisodeController, mode: str):
    import pygame
    from .flappy_renderer import InputAdapter, Renderer

    global TRAIN_STEPS_PER_FRAME
    world = controller.world
    renderer = Renderer(world.cfg.screen_w, world.cfg.screen_h, fps=FPS)
    keys = InputAdapter()

    running = True
    while running:
        # --- events ---
        for event in renderer.pump_events():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_F1:
                    mode = MODE_HUMAN
                elif event.key == pygame.K_F2:
                    mode = MODE_TRAIN
                elif event.key == pygame.K_F3:
                    mode = MODE_DEMO
                elif event.key in (pygame.K_MINUS, pygame.K_KP_MINUS):
                    TRAIN_STEPS_PER_FRAME = max(1, TRAIN_STEPS_PER_FRAME - 1)
                elif event.key in (pygame.K_EQUALS, pygame.K_PLUS, pygame.K_KP_PLUS):
                    TRAIN_STEPS_PER_FRAME += 1
            if mode == MODE_HUMAN:
                keys.feed(event)

        if mode == MODE_HUMAN:
            controller.step(MODE_HUMAN, keys.take())
        elif mode == MODE_TRAIN:
            for _ in range(TRAIN_STEPS_PER_FRAME):
                if controller.step(MODE_TRAIN).done:
                    break
        else:
            controller.step(MODE_DEMO)
            if DEMO_DELAY:
                time.sleep(DEMO_DELAY)

        # --- HUD & render ---
        hud = (f"Mode:{mode} | Ep:{controller.episode} Step:{controller.step_in_ep}  "
               f"ε:{controller.agent.epsilon:.3f}\n"
               f"Last:{controller.last_score} Best:{controller.best_score}  x{TRAIN_STEPS_PER_FRAME}")
        renderer.draw((world.bird.x, world.bird.y), world.bird.radius,
                      world.pipe_rects(), hud_text=hud, score=world.score)

    pygame.quit()


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Flappy bird with a tabular Q-learning agent")
    p.add_argument("--mode", choices=MODES, default=MODE_TRAIN)
    p.add_argument("--headless", action="store_true", help="train without opening a window")
    p.add_argument("--episodes", type=int, default=1000, help="episodes to train in headless mode")
    p.add_argument("--seed", type=int, default=SEED)
    p.add_argument("--log-level", default="INFO")
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    set_seed(args.seed)

    controller = build(seed=args.seed, training=args.mode == MODE_TRAIN or args.headless)
    if args.headless:
        train_headless(controller, args.episodes)
        return
    run_interactive(controller, args.mode)


if __name__ == "__main__":
    main()
