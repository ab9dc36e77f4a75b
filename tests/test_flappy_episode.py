import random

import pytest

from flappy_q.flappy_agent import Action, AgentConfig, QAgent
from flappy_q.flappy_episode import (EpisodeConfig, EpisodeController,
                                     MODE_DEMO, MODE_HUMAN, MODE_TRAIN)

from conftest import FakeRandom, make_pair


class SpyAgent(QAgent):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls = []

    def update(self, s, a, s_next, r):
        self.calls.append((s, a, s_next, r))
        super().update(s, a, s_next, r)


@pytest.fixture
def spy(discretizer):
    return SpyAgent(discretizer.n_states, AgentConfig(epsilon_start=0.0), rng=FakeRandom([0.5] * 10000))


@pytest.fixture
def ctrl(world, spy, discretizer):
    return EpisodeController(world, spy, discretizer)


def test_first_step_jumps_without_reward(ctrl, spy, world):
    r = ctrl.step(MODE_TRAIN)
    assert r.action == Action.JUMP
    assert r.reward is None
    assert not r.done
    assert spy.calls == []
    assert world.bird.velocity == -8.0
    assert ctrl.prev_state == r.state


def test_alive_step_rewards_plus_one(ctrl, spy):
    first = ctrl.step(MODE_TRAIN)
    second = ctrl.step(MODE_TRAIN)
    assert second.reward == 1.0
    assert spy.calls == [(first.state, 0, second.state, 1.0)]


def test_collision_step_penalized_then_reset(ctrl, spy, world):
    first = ctrl.step(MODE_TRAIN)
    world.pipes.clear()
    # 새(y≈393 다음 스텝)의 아래쪽에 걸치는 파이프
    world.pipes.push_pair(*make_pair(150.0, 100, 380))
    r = ctrl.step(MODE_TRAIN)
    assert r.done
    assert r.reward == -1000.0
    assert r.action is None
    s, a, s_next, reward = spy.calls[-1]
    assert (s, a, s_next, reward) == (first.state, 0, r.state, -1000.0)

    assert ctrl.episode == 1
    assert ctrl.prev_state is None
    assert len(world.pipes) == 0
    assert world.bird.y == world.cfg.screen_h / 2
    assert world.bird.velocity == 0.0

    # 리셋 경계를 넘어서는 학습 튜플을 만들지 않음
    n = len(spy.calls)
    after = ctrl.step(MODE_TRAIN)
    assert after.reward is None
    assert len(spy.calls) == n


def test_boundary_exit_uses_crash_penalty_by_default(ctrl, world):
    ctrl.step(MODE_TRAIN)
    world.bird.y, world.bird.velocity = 790.0, 0.0
    r = ctrl.step(MODE_TRAIN)
    assert r.done
    assert r.reward == -1000.0


def test_boundary_penalty_configurable(world, spy, discretizer):
    ctrl = EpisodeController(world, spy, discretizer, EpisodeConfig(boundary_penalty=-500.0))
    ctrl.step(MODE_TRAIN)
    world.bird.y, world.bird.velocity = 790.0, 0.0
    assert ctrl.step(MODE_TRAIN).reward == -500.0


def test_epsilon_decays_once_per_episode(world, discretizer):
    agent = QAgent(discretizer.n_states, AgentConfig(), rng=random.Random(0))
    ctrl = EpisodeController(world, agent, discretizer)
    ctrl.end_episode()
    assert agent.epsilon == pytest.approx(0.995)
    ctrl.end_episode()
    assert agent.epsilon == pytest.approx(0.995 ** 2)


def test_q_table_survives_reset(ctrl, spy):
    spy.Q[12] = [3.0, 4.0]
    ctrl.end_episode()
    assert list(spy.Q[12]) == [3.0, 4.0]


def test_progress_every_hundred_episodes(world, spy, discretizer):
    seen = []
    ctrl = EpisodeController(world, spy, discretizer, progress_sink=lambda ep, score: seen.append((ep, score)))
    for i in range(250):
        if i == 99:
            world.score = 3
        ctrl.end_episode()
    assert seen == [(100, 3), (200, 0)]
    assert ctrl.last_score == 0


def test_demo_mode_does_not_learn(ctrl, spy):
    for _ in range(50):
        ctrl.step(MODE_DEMO)
    assert spy.calls == []


def test_human_mode_uses_input_action(ctrl, spy, world):
    r = ctrl.step(MODE_HUMAN, Action.NOOP)
    assert r.action == Action.NOOP
    assert world.bird.velocity == pytest.approx(0.5)
    r = ctrl.step(MODE_HUMAN, Action.JUMP)
    assert r.action == Action.JUMP
    assert world.bird.velocity == -8.0
    assert spy.calls == []


def test_long_training_run_keeps_pipes_paired(cfg, discretizer):
    from flappy_q.flappy_env import FlappyWorld
    world = FlappyWorld(cfg)
    agent = QAgent(discretizer.n_states, AgentConfig(), rng=random.Random(0))
    ctrl = EpisodeController(world, agent, discretizer)
    for _ in range(5000):
        r = ctrl.step(MODE_TRAIN)
        assert len(world.pipes) % 2 == 0
        assert 0 <= r.state < discretizer.n_states
    assert ctrl.episode > 0
    assert agent.epsilon < 1.0
