# ===============================
# File: flappy_agent.py
# ===============================
from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Protocol
import random

import numpy as np


class Action(IntEnum):
    JUMP = 0
    NOOP = 1


ACTION_NAMES = ["jump", "noop"]


class RandomSource(Protocol):
    def random(self) -> float:
        """[0, 1) 균등분포 실수."""
        ...


@dataclass
class AgentConfig:
    # Q-learning 하이퍼파라미터
    alpha: float = 0.1             # 학습률 α
    gamma: float = 0.99            # 할인율 γ
    epsilon_start: float = 1.0     # 탐색 확률 시작값 ε0 (학습 모드)
    epsilon_min: float = 0.01      # 탐색 확률 하한
    epsilon_decay: float = 0.995   # 에피소드마다 ε에 곱하는 값


class QAgent:
    """Q-table agent for Flappy (state=flat index, action∈{0=jump, 1=noop})."""

    def __init__(self, n_states: int, cfg: AgentConfig, rng: Optional[RandomSource] = None):
        self.cfg = cfg
        self.rng = rng if rng is not None else random.Random()
        # Q[s, a]: 상태 s에서 행동 a의 예상 누적 보상. 에피소드가 바뀌어도 초기화하지 않음.
        self.Q = np.zeros((n_states, 2), dtype=np.float32)
        self.epsilon = cfg.epsilon_start

    def decay_epsilon(self) -> float:
        """에피소드 종료마다 곱셈 감쇠. ε_min 아래로는 내려가지 않음."""
        self.epsilon = max(self.cfg.epsilon_min, self.epsilon * self.cfg.epsilon_decay)
        return self.epsilon

    def choose_action(self, s: int) -> Action:
        """ε-greedy 행동 선택."""
        if self.rng.random() < self.epsilon:
            return Action.JUMP if self.rng.random() < 0.5 else Action.NOOP
        return self.greedy(s)

    def greedy(self, s: int) -> Action:
        # 동률이면 jump(0)가 이김
        q = self.Q[s]
        return Action.NOOP if q[1] > q[0] else Action.JUMP

    def update(self, s: int, a: int, s_next: int, r: float):
        """Q(s,a) ← Q(s,a) + α [ r + γ max_a' Q(s',a') − Q(s,a) ]"""
        assert a in (0, 1)
        q_sa = self.Q[s, a]
        td_target = r + self.cfg.gamma * np.max(self.Q[s_next])
        self.Q[s, a] = q_sa + self.cfg.alpha * (td_target - q_sa)

    def visited_states(self) -> int:
        return int(np.count_nonzero(np.any(self.Q != 0, axis=1)))
