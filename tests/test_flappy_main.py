import pytest

from flappy_q.flappy_episode import MODE_DEMO, MODE_TRAIN
from flappy_q.flappy_main import build, parse_args, train_headless


def test_build_training_starts_exploring():
    ctrl = build(seed=1, training=True)
    assert ctrl.agent.epsilon == 1.0
    assert ctrl.agent.Q.shape == (1000, 2)


def test_build_demo_is_greedy():
    ctrl = build(seed=1, training=False)
    assert ctrl.agent.epsilon == 0.0
    assert ctrl.step(MODE_DEMO).action == 0


def test_train_headless_runs_requested_episodes():
    ctrl = train_headless(build(seed=1), 5)
    assert ctrl.episode == 5
    assert ctrl.agent.epsilon == pytest.approx(0.995 ** 5)
    assert ctrl.agent.visited_states() > 0


def test_parse_args_defaults():
    args = parse_args([])
    assert args.mode == MODE_TRAIN
    assert not args.headless
    args = parse_args(["--headless", "--episodes", "20", "--mode", "AI_DEMO"])
    assert args.headless and args.episodes == 20 and args.mode == MODE_DEMO
