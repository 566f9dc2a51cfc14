"""
Configuration module for the approach-control learning core.

This module defines dataclasses for all configuration options,
providing type safety and validation for controller parameters.
"""

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, Optional
from enum import Enum

from .constants import (
    DISTANCE_STEP,
    HEADING_STEP,
    LEARNING_RATE,
    EXPLORATION_RATE,
    DISCOUNT_RATE,
    MIN_INTERCEPT_DISTANCE,
    MAX_INTERCEPT_DISTANCE,
    INTERCEPT_CONE_HALF_ANGLE,
    MIN_HEADING_DIVERGENCE,
    MAX_HEADING_CONVERGENCE,
    TERMINAL_DISTANCE,
    TERMINAL_BEARING_TOLERANCE,
    INTERCEPT_REWARD,
    EXIT_AIRSPACE_REWARD,
    ONGOING_REWARD,
    DEFAULT_AIRPORT,
)


class InterceptHeadingPolicy(Enum):
    """
    How the aircraft's own heading must relate to the runway heading
    before an approach clearance is granted.

    DIVERGING: the aircraft is still turning onto final, i.e. its heading
        differs from the runway heading by at least ``min_heading_divergence``.
    CONVERGING: the aircraft is already close to alignment, i.e. the
        difference is at most ``max_heading_convergence``.
    """
    DIVERGING = "diverging"
    CONVERGING = "converging"


@dataclass
class StateSpaceConfig:
    """Resolution of the polar state grid."""

    distance_step: float = DISTANCE_STEP  # nm per ring
    heading_step: float = HEADING_STEP  # degrees per wedge

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.distance_step <= 0:
            raise ValueError("distance_step must be positive")

        if self.heading_step <= 0 or self.heading_step > 360:
            raise ValueError("heading_step must be in (0, 360]")

        wedges = 360.0 / self.heading_step
        if abs(wedges - round(wedges)) > 1e-9:
            raise ValueError(f"heading_step ({self.heading_step}) must divide 360 evenly")


@dataclass
class LearningConfig:
    """Configuration for the tabular Q-learner."""

    learning_rate: float = LEARNING_RATE  # alpha
    exploration_rate: float = EXPLORATION_RATE  # epsilon
    discount_rate: float = DISCOUNT_RATE  # gamma

    # Per-episode epsilon schedule; the defaults keep epsilon constant
    epsilon_decay: float = 1.0
    min_epsilon: float = 0.0

    seed: Optional[int] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not 0.0 < self.learning_rate <= 1.0:
            raise ValueError("learning_rate must be in (0, 1]")

        if not 0.0 <= self.exploration_rate <= 1.0:
            raise ValueError("exploration_rate must be in [0, 1]")

        if not 0.0 <= self.discount_rate < 1.0:
            raise ValueError("discount_rate must be in [0, 1)")

        if not 0.0 < self.epsilon_decay <= 1.0:
            raise ValueError("epsilon_decay must be in (0, 1]")

        if not 0.0 <= self.min_epsilon <= 1.0:
            raise ValueError("min_epsilon must be in [0, 1]")


@dataclass
class ApproachConfig:
    """Geometry of approach interception and of the terminal states."""

    min_intercept_distance: float = MIN_INTERCEPT_DISTANCE
    max_intercept_distance: float = MAX_INTERCEPT_DISTANCE
    intercept_cone_half_angle: float = INTERCEPT_CONE_HALF_ANGLE

    heading_policy: InterceptHeadingPolicy = InterceptHeadingPolicy.DIVERGING
    min_heading_divergence: float = MIN_HEADING_DIVERGENCE
    max_heading_convergence: float = MAX_HEADING_CONVERGENCE

    # States closer than this and lined up with the runway have no legal actions
    terminal_distance: float = TERMINAL_DISTANCE
    terminal_bearing_tolerance: float = TERMINAL_BEARING_TOLERANCE

    def __post_init__(self):
        """Validate configuration after initialization."""
        if isinstance(self.heading_policy, str):
            self.heading_policy = InterceptHeadingPolicy(self.heading_policy)

        if self.min_intercept_distance < 0:
            raise ValueError("min_intercept_distance must be non-negative")

        if self.max_intercept_distance < self.min_intercept_distance:
            raise ValueError(f"max_intercept_distance ({self.max_intercept_distance}) "
                             f"must not be below min_intercept_distance ({self.min_intercept_distance})")

        for name in ("intercept_cone_half_angle", "min_heading_divergence",
                     "max_heading_convergence", "terminal_bearing_tolerance"):
            value = getattr(self, name)
            if not 0.0 <= value <= 180.0:
                raise ValueError(f"{name} must be in [0, 180]")

        if self.terminal_distance < 0:
            raise ValueError("terminal_distance must be non-negative")


@dataclass
class RewardConfig:
    """Rewards for each approach outcome."""

    intercept_reward: float = INTERCEPT_REWARD
    exit_airspace_reward: float = EXIT_AIRSPACE_REWARD
    ongoing_reward: float = ONGOING_REWARD


@dataclass
class ControllerConfig:
    """Main configuration for the agent controller."""

    airport: str = DEFAULT_AIRPORT

    # Component configurations
    state_space: StateSpaceConfig = field(default_factory=StateSpaceConfig)
    learning: LearningConfig = field(default_factory=LearningConfig)
    approach: ApproachConfig = field(default_factory=ApproachConfig)
    reward: RewardConfig = field(default_factory=RewardConfig)

    # Custom configuration
    custom_config: Dict[str, Any] = field(default_factory=dict)


_SECTIONS = {
    "state_space": StateSpaceConfig,
    "learning": LearningConfig,
    "approach": ApproachConfig,
    "reward": RewardConfig,
}


def create_default_config(**overrides) -> ControllerConfig:
    """
    Create a default configuration with optional overrides.

    Overrides are matched against the top-level config first and then
    against each component config; unknown keys land in ``custom_config``.
    Component configs are rebuilt so that their validation runs again.

    Args:
        **overrides: Configuration values to override

    Returns:
        ControllerConfig: Configured controller settings

    Example:
        >>> config = create_default_config(
        ...     airport="KSFO",
        ...     exploration_rate=0.1,
        ...     heading_step=10,
        ... )
    """
    config = ControllerConfig()
    section_overrides: Dict[str, Dict[str, Any]] = {name: {} for name in _SECTIONS}

    for key, value in overrides.items():
        if key in _SECTIONS:
            if isinstance(value, _SECTIONS[key]):
                setattr(config, key, value)
            else:
                section_overrides[key].update(value or {})
            continue

        if hasattr(config, key):
            setattr(config, key, value)
            continue

        for name, section_cls in _SECTIONS.items():
            if key in {f.name for f in fields(section_cls)}:
                section_overrides[name][key] = value
                break
        else:
            config.custom_config[key] = value

    for name, section_cls in _SECTIONS.items():
        if section_overrides[name]:
            current = getattr(config, name)
            values = {f.name: getattr(current, f.name) for f in fields(section_cls)}
            values.update(section_overrides[name])
            setattr(config, name, section_cls(**values))

    return config


def config_from_dict(config_dict: Optional[Dict[str, Any]]) -> ControllerConfig:
    """
    Build a ControllerConfig from a nested dictionary (e.g. a YAML section).

    Args:
        config_dict: Mapping with optional ``airport`` and one sub-mapping per
            component (``state_space``, ``learning``, ``approach``, ``reward``)

    Returns:
        ControllerConfig
    """
    return create_default_config(**(config_dict or {}))


def validate_config(config: ControllerConfig) -> bool:
    """
    Validate configuration for consistency and correctness.

    Args:
        config: Configuration to validate

    Returns:
        bool: True if configuration is valid

    Raises:
        ValueError: If configuration is invalid
    """
    if not config.airport:
        raise ValueError("airport must be set")

    if len(config.airport) != 4:
        raise ValueError("airport must be a 4-character ICAO code")

    # Re-run component validation in case fields were mutated after construction
    for name, section_cls in _SECTIONS.items():
        current = getattr(config, name)
        section_cls(**{f.name: getattr(current, f.name) for f in fields(section_cls)})

    if config.approach.max_intercept_distance <= config.state_space.distance_step:
        raise ValueError("max_intercept_distance must span more than one distance ring")

    return True


def config_to_dict(config: ControllerConfig) -> Dict[str, Any]:
    """
    Flatten a ControllerConfig into plain Python types.

    The result is YAML/JSON friendly and round-trips through
    ``config_from_dict``.
    """
    config_dict = asdict(config)
    config_dict["approach"]["heading_policy"] = config.approach.heading_policy.value
    custom = config_dict.pop("custom_config")
    if custom:
        config_dict["custom_config"] = custom
    return config_dict
