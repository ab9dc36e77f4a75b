# ===============================
# File: flappy_episode.py
# ===============================
from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Optional
import logging

from .flappy_agent import Action, QAgent
from .flappy_discretizer import StateDiscretizer
from .flappy_env import FlappyWorld

logger = logging.getLogger(__name__)

# Modes
MODE_HUMAN = "HUMAN"
MODE_TRAIN = "AI_TRAIN"
MODE_DEMO = "AI_DEMO"
MODES = (MODE_HUMAN, MODE_TRAIN, MODE_DEMO)

ProgressSink = Callable[[int, int], None]


@dataclass
class EpisodeConfig:
    alive_reward: float = 1.0          # 충돌 없이 지난 스텝마다 +1
    crash_penalty: float = -1000.0     # 파이프 충돌 스텝
    boundary_penalty: Optional[float] = None  # 화면 밖 이탈 스텝. None이면 crash_penalty와 동일
    log_every: int = 100               # 이 에피소드 수마다 진행 상황 기록


@dataclass
class StepResult:
    state: int
    action: Optional[Action]           # 종료 스텝에서는 행동을 고르지 않음
    reward: Optional[float]            # 에피소드 첫 스텝에서는 보상 없음
    done: bool
    score: int


def log_progress(episode: int, score: int):
    logger.info("Episode: %d Score: %d", episode, score)


class EpisodeController:
    """한 프레임(스텝) 단위로 환경/정책을 묶어 돌리는 컨트롤러.

    스텝 처리 순서:
      1) 환경 진행 (파이프 이동/생성/제거, 중력 적분)
      2) 관측 → 이산 상태 인덱스
      3) 충돌/화면 이탈 판정 → 보상 결정
      4) 학습 모드면 (이전 상태, 이전 행동, 현재 상태, 보상)으로 Q 갱신
      5) 종료면 리셋 후 반환
      6) 모드에 따라 행동 선택(정책 또는 사람 입력) 후 적용
      7) 점수 갱신

    Q-table과 ε는 agent가 소유하며 리셋 시에도 유지됩니다(ε만 감쇠).
    """

    def __init__(self, world: FlappyWorld, agent: QAgent, discretizer: StateDiscretizer,
                 cfg: Optional[EpisodeConfig] = None, progress_sink: Optional[ProgressSink] = None):
        self.world = world
        self.agent = agent
        self.discretizer = discretizer
        self.cfg = cfg if cfg is not None else EpisodeConfig()
        self.progress_sink = progress_sink if progress_sink is not None else log_progress

        self.episode = 0
        self.step_in_ep = 0
        self.best_score = 0
        self.last_score = 0
        self.prev_state: Optional[int] = None
        self.prev_action: Optional[Action] = None

    def terminal_reward(self, collided: bool, out: bool) -> Optional[float]:
        if collided:
            return self.cfg.crash_penalty
        if out:
            if self.cfg.boundary_penalty is None:
                return self.cfg.crash_penalty
            return self.cfg.boundary_penalty
        return None

    def step(self, mode: str = MODE_TRAIN, human_action: Action = Action.NOOP) -> StepResult:
        assert mode in MODES, f"unknown mode {mode!r}"
        world = self.world

        world.advance()
        state = self.discretizer.state_index(world.observe())

        collided = world.any_collision()
        out = world.out_of_bounds()
        done = collided or out
        penalty = self.terminal_reward(collided, out)
        reward = penalty if penalty is not None else self.cfg.alive_reward

        if self.prev_state is None:
            reward = None
        elif mode == MODE_TRAIN:
            self.agent.update(self.prev_state, int(self.prev_action), state, reward)

        if done:
            score = world.score
            self.end_episode()
            return StepResult(state=state, action=None, reward=reward, done=True, score=score)

        if mode == MODE_HUMAN:
            action = Action(human_action)
        elif mode == MODE_DEMO:
            action = self.agent.greedy(state)
        else:
            action = self.agent.choose_action(state)
        world.apply_action(action)

        self.prev_state = state
        self.prev_action = action
        self.step_in_ep += 1
        world.update_score()
        self.best_score = max(self.best_score, world.score)
        return StepResult(state=state, action=action, reward=reward, done=False, score=world.score)

    def end_episode(self):
        """종료 전이: 월드 리셋, 이전 상태 메모 초기화, 에피소드 카운트 증가, ε 감쇠."""
        score = self.world.score
        self.last_score = score
        self.world.reset()
        self.prev_state = None
        self.prev_action = None
        self.step_in_ep = 0
        self.episode += 1
        epsilon = self.agent.decay_epsilon()
        logger.debug("episode %d ended: score=%d epsilon=%.4f", self.episode, score, epsilon)
        if self.cfg.log_every > 0 and self.episode % self.cfg.log_every == 0:
            self.progress_sink(self.episode, score)
