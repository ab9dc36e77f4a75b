import pytest

from flappy_q.flappy_discretizer import DiscretizerConfig, StateDiscretizer
from flappy_q.flappy_env import FlappyConfig, FlappyWorld, Pipe, ROLE_LOWER, ROLE_UPPER


class FakeRandom:
    """Replays a fixed list of uniform draws."""

    def __init__(self, values):
        self.values = list(values)

    def random(self):
        return self.values.pop(0)


@pytest.fixture
def cfg():
    return FlappyConfig(seed=3)


@pytest.fixture
def world(cfg):
    return FlappyWorld(cfg)


@pytest.fixture
def discretizer(cfg):
    return StateDiscretizer(cfg.screen_w, cfg.screen_h, DiscretizerConfig())


def make_pair(x, gap_top, gap_bottom, h=800, w=100):
    upper = Pipe(x=x, y=gap_top - h, width=w, height=h, role=ROLE_UPPER)
    lower = Pipe(x=x, y=gap_bottom, width=w, height=h, role=ROLE_LOWER)
    return upper, lower
