# ===============================
# File: flappy_discretizer.py
# ===============================
from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple
import math


@dataclass
class DiscretizerConfig:
    y_bins: int = 10     # 새 y 버킷 수
    v_bins: int = 10     # gap 중심까지 세로 오프셋 버킷 수
    h_bins: int = 10     # 다음 파이프까지 가로 거리 버킷 수


def discretize(value: float, min_value: float, max_value: float, num_bins: int) -> int:
    """연속값을 등간격 버킷 인덱스로 변환. 범위 밖 값은 양 끝 버킷으로 포화."""
    interval = (max_value - min_value) / num_bins
    idx = math.floor((value - min_value) / interval)
    return max(0, min(idx, num_bins - 1))


class StateDiscretizer:
    """(y, v_dist, h_dist) 관측을 [0, Y*V*H) 범위의 단일 정수 상태 인덱스로 매핑.

    각 차원의 범위:
      - y:      [0, screen_h]
      - v_dist: [-screen_h/2, +screen_h/2]
      - h_dist: [0, screen_w]
    인덱스 = y_idx * (V*H) + v_idx * H + h_idx  (row-major)
    """

    def __init__(self, screen_w: float, screen_h: float, cfg: DiscretizerConfig):
        self.cfg = cfg
        self.screen_w = screen_w
        self.screen_h = screen_h

    @property
    def n_states(self) -> int:
        return self.cfg.y_bins * self.cfg.v_bins * self.cfg.h_bins

    def bins(self, obs: Tuple[float, float, float]) -> Tuple[int, int, int]:
        y, v_dist, h_dist = obs
        y_idx = discretize(y, 0, self.screen_h, self.cfg.y_bins)
        v_idx = discretize(v_dist, -self.screen_h / 2, self.screen_h / 2, self.cfg.v_bins)
        h_idx = discretize(h_dist, 0, self.screen_w, self.cfg.h_bins)
        return y_idx, v_idx, h_idx

    def state_index(self, obs: Tuple[float, float, float]) -> int:
        y_idx, v_idx, h_idx = self.bins(obs)
        v, h = self.cfg.v_bins, self.cfg.h_bins
        return y_idx * v * h + v_idx * h + h_idx
