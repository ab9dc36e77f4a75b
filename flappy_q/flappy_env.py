# ===============================
# File: flappy_env.py
# ===============================
from __future__ import annotations
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterator, List, Optional, Tuple
import logging
import random

logger = logging.getLogger(__name__)

# 파이프의 역할: 한 쌍(gap pair)의 위/아래 장애물
ROLE_UPPER = "upper"
ROLE_LOWER = "lower"


@dataclass
class FlappyConfig:
    """Flappy 환경 설정값.
    - 화면, 물리, 파이프(장애물) 파라미터를 한 곳에서 관리합니다.
    """
    # World/physics (세계/물리)
    screen_w: int = 600
    screen_h: int = 800
    bird_radius: float = 15.0
    gravity: float = 0.5             # 매 프레임 중력 가속도(아래 방향, +)
    jump_velocity: float = -8.0      # 점프 시 설정되는 속도(위 방향, -)

    # Pipes (장애물)
    pipe_width: int = 100
    pipe_gap: int = 200              # 위/아래 파이프 사이 간격(px)
    pipe_velocity: float = 2.0       # 매 프레임 파이프가 왼쪽으로 이동하는 거리(px)
    spawn_spacing_widths: int = 3    # 파이프 쌍 사이 간격 = pipe_width * 이 값

    seed: Optional[int] = 7          # 파이프 높이 RNG 시드


@dataclass
class Bird:
    x: float
    y: float
    radius: float
    velocity: float = 0.0


@dataclass
class Pipe:
    """축 정렬 사각형 장애물 (x, y, w, h)."""
    x: float
    y: float
    width: float
    height: float
    role: str
    passed: bool = False

    def rect(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)


class PipeQueue:
    """오래된 것부터 정렬된 파이프 큐.

    항상 (upper, lower) 쌍 단위로만 추가/제거하므로 길이는 항상 짝수입니다.
    """

    def __init__(self):
        self._pipes: Deque[Pipe] = deque()

    def push_pair(self, upper: Pipe, lower: Pipe):
        assert upper.role == ROLE_UPPER and lower.role == ROLE_LOWER
        self._pipes.append(upper)
        self._pipes.append(lower)

    def pop_pair(self) -> Tuple[Pipe, Pipe]:
        return self._pipes.popleft(), self._pipes.popleft()

    def clear(self):
        self._pipes.clear()

    def first(self) -> Optional[Pipe]:
        return self._pipes[0] if self._pipes else None

    def last(self) -> Optional[Pipe]:
        return self._pipes[-1] if self._pipes else None

    def pairs(self) -> Iterator[Tuple[Pipe, Pipe]]:
        it = iter(self._pipes)
        return zip(it, it)

    def __iter__(self) -> Iterator[Pipe]:
        return iter(self._pipes)

    def __len__(self) -> int:
        return len(self._pipes)


class FlappyWorld:
    """Flappy 환경 (물리/충돌/장애물 생성).

    - 새(bird)는 x 고정, y만 중력/점프로 변합니다.
    - 배경 스크롤 대신 파이프가 왼쪽으로 이동합니다.
    - 충돌 판정은 새의 외접 정사각형과 파이프 사각형의 AABB 교차로 처리합니다
      (모서리 근처의 오탐은 허용).
    """

    def __init__(self, cfg: FlappyConfig, rng: Optional[random.Random] = None):
        assert cfg.screen_w > 0 and cfg.screen_h > 0
        assert cfg.pipe_gap > 0 and cfg.pipe_width > 0
        self.cfg = cfg
        self.rng = rng if rng is not None else random.Random(cfg.seed)
        self.pipes = PipeQueue()
        self.bird = Bird(x=cfg.screen_w / 4, y=cfg.screen_h / 2, radius=cfg.bird_radius)
        self.score = 0

    # -------------- Public API --------------
    def reset(self):
        """새를 화면 세로 중앙으로, 속도 0, 파이프 전부 제거, 점수 0."""
        self.bird.y = self.cfg.screen_h / 2
        self.bird.velocity = 0.0
        self.pipes.clear()
        self.score = 0

    def advance_pipes(self):
        """파이프 이동 → 화면 밖 쌍 제거 → 필요 시 새 쌍 생성."""
        for pipe in self.pipes:
            pipe.x -= self.cfg.pipe_velocity

        first = self.pipes.first()
        if first is not None and first.x + first.width < 0:
            self.pipes.pop_pair()

        last = self.pipes.last()
        spawn_line = self.cfg.screen_w - self.cfg.pipe_width * self.cfg.spawn_spacing_widths
        if last is None or last.x < spawn_line:
            self.pipes.push_pair(*self.generate_pair())

    def advance_bird(self):
        """반암시적 오일러: 속도에 중력을 더한 뒤 그 속도로 위치를 갱신."""
        self.bird.velocity += self.cfg.gravity
        self.bird.y += self.bird.velocity

    def advance(self):
        self.advance_pipes()
        self.advance_bird()

    def apply_action(self, action: int):
        """0 = jump, 1 = no-op."""
        assert action in (0, 1), "action은 {0=점프, 1=대기}만 허용"
        if action == 0:
            self.bird.velocity = self.cfg.jump_velocity

    def generate_pair(self) -> Tuple[Pipe, Pipe]:
        """오른쪽 화면 끝에 새 파이프 쌍을 생성.
        - 아래 파이프의 윗면: 화면 높이의 가운데 절반 [h/4, 3h/4) 에서 균등 랜덤
        - 위 파이프의 아랫면: 아래 파이프 윗면보다 정확히 pipe_gap 위
        - 두 파이프 모두 화면 높이만큼 길어서 화면 밖까지 이어짐
        """
        h = self.cfg.screen_h
        lower_top = self.rng.randrange(h // 4, h // 4 + h // 2)
        upper_bottom = lower_top - self.cfg.pipe_gap
        x = float(self.cfg.screen_w)
        w = float(self.cfg.pipe_width)
        upper = Pipe(x=x, y=float(upper_bottom - h), width=w, height=float(h), role=ROLE_UPPER)
        lower = Pipe(x=x, y=float(lower_top), width=w, height=float(h), role=ROLE_LOWER)
        logger.debug("spawned pipe pair: gap=[%d, %d)", upper_bottom, lower_top)
        return upper, lower

    def collides(self, pipe: Pipe) -> bool:
        """새의 외접 정사각형과 파이프 사각형의 AABB 교차 판정."""
        b = self.bird
        return (b.x + b.radius > pipe.x and
                b.x - b.radius < pipe.x + pipe.width and
                b.y + b.radius > pipe.y and
                b.y - b.radius < pipe.y + pipe.height)

    def any_collision(self) -> bool:
        return any(self.collides(p) for p in self.pipes)

    def out_of_bounds(self) -> bool:
        b = self.bird
        return b.y + b.radius > self.cfg.screen_h or b.y - b.radius < 0

    def update_score(self) -> bool:
        """선두 쌍을 완전히 지나면 1점. 쌍마다 passed 플래그로 한 번만 집계."""
        lead = self.pipes.first()
        b = self.bird
        if lead is not None and not lead.passed and lead.x + lead.width < b.x - b.radius:
            lead.passed = True
            self.score += 1
            return True
        return False

    # -------------- Observation --------------
    def next_pair(self) -> Optional[Tuple[Pipe, Pipe]]:
        """새의 x보다 오른쪽 끝이 앞에 있는 첫 번째 쌍."""
        for upper, lower in self.pipes.pairs():
            if upper.x + upper.width > self.bird.x:
                return upper, lower
        return None

    def gap_center(self, pair: Tuple[Pipe, Pipe]) -> float:
        upper, lower = pair
        return (upper.y + upper.height + lower.y) / 2

    def observe(self) -> Tuple[float, float, float]:
        """연속 관측값 (새 y, 다음 gap 중심까지의 세로 오프셋, 다음 파이프까지의 가로 거리).
        앞에 파이프가 없으면 세로/가로 값은 0.
        """
        pair = self.next_pair()
        y = self.bird.y
        if pair is None:
            return (y, 0.0, 0.0)
        v_dist = self.gap_center(pair) - y
        h_dist = pair[0].x - self.bird.x
        return (y, v_dist, h_dist)

    def pipe_rects(self) -> List[Tuple[float, float, float, float]]:
        return [p.rect() for p in self.pipes]
