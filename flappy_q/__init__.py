from .flappy_agent import Action, AgentConfig, QAgent
from .flappy_discretizer import DiscretizerConfig, StateDiscretizer, discretize
from .flappy_env import FlappyConfig, FlappyWorld, Pipe, PipeQueue
from .flappy_episode import EpisodeConfig, EpisodeController, StepResult
