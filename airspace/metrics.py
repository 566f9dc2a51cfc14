"""
Episode metrics tracking for the approach-control learner.

This module provides classes for tracking what the controller did during
an episode (transitions, rewards, commands, terminal outcomes) and
rolling statistics across episodes.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional
import time

from .constants import Heading
from .rewards import ApproachOutcome


def _empty_heading_counts() -> Dict[str, int]:
    return {heading.name.lower(): 0 for heading in Heading}


@dataclass
class EpisodeMetrics:
    """
    Tracks metrics for a single episode.

    The AgentController records into an instance of this class on every
    tick; training scripts read it back with ``to_dict()``.
    """

    # Episode tracking
    episode_reward: float = 0.0
    episode_length: int = 0
    episode_start_time: Optional[float] = None

    # Learning tracking
    transitions: int = 0
    updates: int = 0

    # Command tracking
    headings_issued: int = 0
    headings_by_direction: Dict[str, int] = field(default_factory=_empty_heading_counts)
    approach_clearances: int = 0
    rejected_commands: int = 0

    # Agent tracking
    agents_added: int = 0
    agents_removed: int = 0
    max_agents: int = 0

    # Outcomes
    interceptions: int = 0
    airspace_exits: int = 0

    def start_episode(self) -> None:
        """Start tracking a new episode."""
        self.episode_reward = 0.0
        self.episode_length = 0
        self.episode_start_time = time.time()
        self.transitions = 0
        self.updates = 0
        self.headings_issued = 0
        self.headings_by_direction = _empty_heading_counts()
        self.approach_clearances = 0
        self.rejected_commands = 0
        self.agents_added = 0
        self.agents_removed = 0
        self.max_agents = 0
        self.interceptions = 0
        self.airspace_exits = 0

    def increment_step(self) -> None:
        """Increment episode tick counter."""
        self.episode_length += 1

    def record_transition(self, outcome: ApproachOutcome, reward: float, updated: bool) -> None:
        """Record one observed state transition."""
        self.transitions += 1
        self.episode_reward += reward
        if updated:
            self.updates += 1

        if outcome is ApproachOutcome.INTERCEPTED:
            self.interceptions += 1
        elif outcome is ApproachOutcome.EXITED_AIRSPACE:
            self.airspace_exits += 1

    def record_heading(self, heading: Heading, accepted: bool = True) -> None:
        """Record a heading instruction."""
        self.headings_issued += 1
        self.headings_by_direction[heading.name.lower()] += 1
        if not accepted:
            self.rejected_commands += 1

    def record_approach_clearance(self, accepted: bool = True) -> None:
        """Record an approach clearance."""
        self.approach_clearances += 1
        if not accepted:
            self.rejected_commands += 1

    def record_agent_added(self, agent_count: int) -> None:
        self.agents_added += 1
        self.max_agents = max(self.max_agents, agent_count)

    def record_agent_removed(self) -> None:
        self.agents_removed += 1

    def get_episode_duration(self) -> float:
        """Get episode duration in seconds."""
        if self.episode_start_time is None:
            return 0.0
        return time.time() - self.episode_start_time

    def get_interception_rate(self) -> float:
        """Share of terminal outcomes that were interceptions."""
        terminal = self.interceptions + self.airspace_exits
        if terminal == 0:
            return 0.0
        return self.interceptions / terminal

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to dictionary."""
        return {
            'episode_reward': self.episode_reward,
            'episode_length': self.episode_length,
            'episode_duration': self.get_episode_duration(),
            'transitions': self.transitions,
            'updates': self.updates,
            'headings_issued': self.headings_issued,
            'headings_by_direction': self.headings_by_direction.copy(),
            'approach_clearances': self.approach_clearances,
            'rejected_commands': self.rejected_commands,
            'agents_added': self.agents_added,
            'agents_removed': self.agents_removed,
            'max_agents': self.max_agents,
            'interceptions': self.interceptions,
            'airspace_exits': self.airspace_exits,
            'interception_rate': self.get_interception_rate(),
        }


class MetricsTracker:
    """
    Tracks metrics across multiple episodes.

    Keeps a bounded history and provides rolling averages over it.
    """

    def __init__(self, window_size: int = 100):
        """
        Initialize metrics tracker.

        Args:
            window_size: Size of rolling window for averages
        """
        self.window_size = window_size
        self.episodes: List[EpisodeMetrics] = []
        self.current_episode: Optional[EpisodeMetrics] = None

    def start_episode(self) -> EpisodeMetrics:
        """Start tracking a new episode."""
        self.current_episode = EpisodeMetrics()
        self.current_episode.start_episode()
        return self.current_episode

    def end_episode(self) -> Optional[EpisodeMetrics]:
        """End current episode and add to history."""
        if self.current_episode is None:
            return None

        episode = self.current_episode
        self.episodes.append(episode)

        # Keep only recent episodes in memory
        if len(self.episodes) > self.window_size * 2:
            self.episodes = self.episodes[-self.window_size:]

        self.current_episode = None
        return episode

    def get_rolling_averages(self) -> Dict[str, float]:
        """Average reward, length and interception rate over the window."""
        recent = self.episodes[-self.window_size:]
        if not recent:
            return {'mean_reward': 0.0, 'mean_length': 0.0, 'mean_interception_rate': 0.0}

        count = len(recent)
        return {
            'mean_reward': sum(e.episode_reward for e in recent) / count,
            'mean_length': sum(e.episode_length for e in recent) / count,
            'mean_interception_rate': sum(e.get_interception_rate() for e in recent) / count,
        }
