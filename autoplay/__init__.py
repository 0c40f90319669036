"""Automated action sources and in-process self-play for the engine."""

from .bots import STRATEGIES, Strategy, baseline_strategy, get_strategy, passive_strategy, simple_strategy
from .selfplay import MatchReport, play_hand, play_match

__all__ = [
    "STRATEGIES",
    "Strategy",
    "baseline_strategy",
    "get_strategy",
    "passive_strategy",
    "simple_strategy",
    "MatchReport",
    "play_hand",
    "play_match",
]
