"""
Tests for controller configuration.
"""

import pytest
import yaml

from airspace.config import (
    ApproachConfig,
    ControllerConfig,
    InterceptHeadingPolicy,
    LearningConfig,
    StateSpaceConfig,
    config_from_dict,
    config_to_dict,
    create_default_config,
    validate_config,
)


class TestDefaults:
    """Tests for default values."""

    def test_defaults(self):
        """Test the default hyperparameters and geometry."""
        config = ControllerConfig()

        assert config.airport == "KLAS"
        assert config.state_space.distance_step == 5.0
        assert config.state_space.heading_step == 5.0
        assert config.learning.learning_rate == 0.2
        assert config.learning.exploration_rate == 0.8
        assert config.learning.discount_rate == 0.99
        assert config.approach.heading_policy is InterceptHeadingPolicy.DIVERGING
        assert config.reward.intercept_reward == 1000
        assert config.reward.exit_airspace_reward == -1000
        assert validate_config(config)


class TestValidation:
    """Tests for __post_init__ and validate_config."""

    @pytest.mark.parametrize("kwargs", [
        dict(distance_step=0),
        dict(heading_step=-5),
        dict(heading_step=7),
    ])
    def test_state_space_config(self, kwargs):
        """Test invalid grid resolution is rejected."""
        with pytest.raises(ValueError):
            StateSpaceConfig(**kwargs)

    @pytest.mark.parametrize("kwargs", [
        dict(learning_rate=0.0),
        dict(learning_rate=1.5),
        dict(exploration_rate=-0.1),
        dict(discount_rate=1.0),
        dict(epsilon_decay=0.0),
    ])
    def test_learning_config(self, kwargs):
        """Test hyperparameters outside their ranges are rejected."""
        with pytest.raises(ValueError):
            LearningConfig(**kwargs)

    def test_approach_config(self):
        """Test an inverted distance band is rejected."""
        with pytest.raises(ValueError):
            ApproachConfig(min_intercept_distance=30, max_intercept_distance=15)

    def test_unknown_policy(self):
        """Test unknown heading policies are rejected."""
        with pytest.raises(ValueError):
            ApproachConfig(heading_policy="sideways")

    def test_validate_airport_code(self):
        """Test the airport must be a 4-letter ICAO code."""
        with pytest.raises(ValueError):
            validate_config(create_default_config(airport="LAS"))

    def test_validate_catches_mutation(self):
        """Test validation re-runs after fields are mutated."""
        config = create_default_config()
        config.learning.learning_rate = 2.0
        with pytest.raises(ValueError):
            validate_config(config)

    def test_intercept_band_must_span_a_ring(self):
        """Test the interception band cannot be narrower than a ring."""
        config = create_default_config(distance_step=40.0)
        with pytest.raises(ValueError):
            validate_config(config)


class TestOverrides:
    """Tests for create_default_config and dict round trips."""

    def test_flat_overrides_are_routed(self):
        """Test flat keys land in the section that owns them."""
        config = create_default_config(
            airport="KSFO",
            exploration_rate=0.1,
            heading_step=10,
            heading_policy="converging",
            intercept_reward=500,
            unknown_key="kept",
        )

        assert config.airport == "KSFO"
        assert config.learning.exploration_rate == 0.1
        assert config.state_space.heading_step == 10
        assert config.approach.heading_policy is InterceptHeadingPolicy.CONVERGING
        assert config.reward.intercept_reward == 500
        assert config.custom_config == {"unknown_key": "kept"}

    def test_section_overrides(self):
        """Test nested dicts and section instances are accepted."""
        config = create_default_config(
            learning={"learning_rate": 0.5},
            state_space=StateSpaceConfig(distance_step=10.0),
        )

        assert config.learning.learning_rate == 0.5
        assert config.learning.discount_rate == 0.99
        assert config.state_space.distance_step == 10.0

    def test_overrides_are_validated(self):
        """Test overridden sections are rebuilt and validated."""
        with pytest.raises(ValueError):
            create_default_config(learning_rate=3.0)

    def test_yaml_round_trip(self):
        """Test a config survives YAML dump and reload."""
        config = create_default_config(heading_policy="converging", min_epsilon=0.05)
        dumped = yaml.safe_dump(config_to_dict(config))

        reloaded = config_from_dict(yaml.safe_load(dumped))

        assert reloaded == config

    def test_from_empty_dict(self):
        """Test None and {} give the defaults."""
        assert config_from_dict(None) == ControllerConfig()
        assert config_from_dict({}) == ControllerConfig()
