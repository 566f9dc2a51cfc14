"""
Tests for value table persistence, metrics logging and run config logging.
"""

import json

import pytest
import numpy as np

from airspace.constants import HEADINGS, Heading
from airspace.exceptions import ValueTableError
from algorithms.q_learning import QLearner
from training.config_logger import load_run_config, save_run_config
from utils.logger import Logger, load_metrics
from utils.value_table_io import load_value_table, save_value_table


class TestValueTableIO:
    """Tests for JSON value table files."""

    def test_saved_table_loads_into_learner(self, tmp_path, state_space):
        """Test a learner can resume from a saved table."""
        cell = state_space.by_id("state-35-0")
        learner = QLearner(lambda state: HEADINGS, learning_rate=0.5, discount_rate=0.0)
        learner.update(cell, Heading.WEST, None, 10.0)

        path = save_value_table(tmp_path / "tables" / "table.json", learner.dump_value_table())
        resumed = QLearner(lambda state: HEADINGS)
        resumed.load_value_table(load_value_table(path))

        assert resumed.value(cell, Heading.WEST) == pytest.approx(5.0)

    def test_file_uses_string_degree_keys(self, tmp_path):
        """Test the on-disk shape is {state id: {degrees: value}}."""
        path = save_value_table(tmp_path / "table.json", {"state-0-0": {Heading.NORTH: 1, 90: 2, "180": 3, 270: 4}})

        with open(path) as f:
            assert json.load(f) == {"state-0-0": {"360": 1.0, "90": 2.0, "180": 3.0, "270": 4.0}}

    def test_missing_file(self, tmp_path):
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_value_table(tmp_path / "missing.json")

    @pytest.mark.parametrize("content", ["not json", "[1, 2]", '{"state-0-0": 5}'])
    def test_malformed_file(self, tmp_path, content):
        """Test malformed files raise ValueTableError."""
        path = tmp_path / "table.json"
        path.write_text(content)

        with pytest.raises(ValueTableError):
            load_value_table(path)


class TestLogger:
    """Tests for the JSONL metrics logger."""

    def test_log_converts_numpy(self, tmp_path):
        """Test numpy values, arrays and nested dicts are written as JSON."""
        logger = Logger(tmp_path)
        logger.log({
            'episode': np.int64(1),
            'episode_reward': np.float32(2.5),
            'rewards': np.array([1.0, 2.0]),
            'headings_by_direction': {'north': np.int64(3)},
        })

        (record,) = load_metrics(logger.log_file)
        assert record['episode'] == 1
        assert record['episode_reward'] == 2.5
        assert record['rewards'] == [1.0, 2.0]
        assert record['headings_by_direction'] == {'north': 3}
        assert 'timestamp' in record

    def test_summary(self, tmp_path):
        """Test the summary aggregates outcomes over all episodes."""
        logger = Logger(tmp_path)
        logger.log({'episode': 1, 'episode_length': 10, 'interceptions': 1, 'airspace_exits': 1,
                    'mean_interception_rate': 0.5, 'epsilon': 0.8, 'states_visited': 4})
        logger.log({'episode': 2, 'episode_length': 20, 'interceptions': 2, 'airspace_exits': 0,
                    'mean_interception_rate': 0.75, 'epsilon': 0.7, 'states_visited': 9})

        summary = logger.save_summary()

        assert summary['total_episodes'] == 2
        assert summary['total_steps'] == 30
        assert summary['total_interceptions'] == 3
        assert summary['final_interception_rate'] == 0.75
        assert (tmp_path / 'training_summary.json').exists()

    def test_empty_summary(self, tmp_path):
        """Test no summary is written without metrics."""
        assert Logger(tmp_path).save_summary() == {}
        assert not (tmp_path / 'training_summary.json').exists()


class TestConfigLogger:
    """Tests for run configuration files."""

    def test_save_and_load(self, tmp_path):
        """Test the saved run config round-trips through YAML."""
        path = save_run_config(
            str(tmp_path),
            controller_config={'airport': 'KLAS', 'learning': {'learning_rate': 0.2}},
            simulation_config={'ctr_radius': 40.0, 'runway_threshold': [0.0, 0.0]},
            training_config={'episodes': 10},
            additional_info={'note': 'test'},
        )

        loaded = load_run_config(path)

        assert loaded['controller_config']['learning']['learning_rate'] == 0.2
        assert loaded['simulation_config']['runway_threshold'] == [0.0, 0.0]
        assert loaded['training_config'] == {'episodes': 10}
        assert loaded['additional_info'] == {'note': 'test'}
        assert 'numpy' in loaded['dependencies']

    def test_load_missing(self, tmp_path):
        """Test loading a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_run_config(str(tmp_path / 'missing.yml'))
