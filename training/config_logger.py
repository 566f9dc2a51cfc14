"""
Run configuration logging.

This module saves and loads the configuration of a training run to YAML
for reproducibility, including git hash, timestamp and dependency versions.
"""

import logging
import subprocess
import sys
from datetime import datetime, timezone
from importlib import metadata
from pathlib import Path
from typing import Dict, Any, Optional

import yaml

logger = logging.getLogger(__name__)

# Distributions whose versions are recorded with every run
TRACKED_PACKAGES = ['numpy', 'PyYAML', 'tqdm', 'matplotlib', 'wandb']


def _git(*args: str) -> Optional[str]:
    try:
        result = subprocess.run(
            ['git', *args],
            capture_output=True,
            text=True,
            check=True,
            cwd=Path(__file__).parent.parent,
        )
        return result.stdout.strip()
    except (subprocess.CalledProcessError, FileNotFoundError):
        return None


def get_git_hash() -> Optional[str]:
    """Current git commit hash, or None outside a git checkout."""
    return _git('rev-parse', 'HEAD')


def get_git_branch() -> Optional[str]:
    """Current git branch name, or None outside a git checkout."""
    return _git('rev-parse', '--abbrev-ref', 'HEAD')


def get_python_version() -> str:
    """Get Python version."""
    return f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"


def get_dependencies() -> Dict[str, Optional[str]]:
    """
    Get installed package versions.

    Returns:
        Dictionary mapping package names to versions (None if not installed)
    """
    dependencies = {}
    for package in TRACKED_PACKAGES:
        try:
            dependencies[package] = metadata.version(package)
        except metadata.PackageNotFoundError:
            dependencies[package] = None
    return dependencies


def save_run_config(
    save_dir: str,
    controller_config: Dict[str, Any],
    simulation_config: Dict[str, Any],
    training_config: Dict[str, Any],
    additional_info: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Save the configuration of a training run to a YAML file.

    Args:
        save_dir: Directory to save config file
        controller_config: Controller settings (see ``airspace.config_to_dict``)
        simulation_config: Simulator settings
        training_config: Episode/loop settings
        additional_info: Additional information to include

    Returns:
        Path to saved config file
    """
    save_path = Path(save_dir)
    save_path.mkdir(parents=True, exist_ok=True)

    config_dict = {
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'git': {
            'commit_hash': get_git_hash(),
            'branch': get_git_branch(),
        },
        'python_version': get_python_version(),
        'dependencies': get_dependencies(),
        'controller_config': controller_config,
        'simulation_config': simulation_config,
        'training_config': training_config,
    }

    if additional_info:
        config_dict['additional_info'] = additional_info

    config_file = save_path / 'run_config.yml'

    with open(config_file, 'w') as f:
        yaml.safe_dump(config_dict, f, default_flow_style=False, sort_keys=False)

    logger.info(f"Run config saved to: {config_file}")

    return str(config_file)


def load_run_config(config_path: str) -> Dict[str, Any]:
    """
    Load a run configuration from YAML file.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r') as f:
        config_dict = yaml.safe_load(f)

    logger.info(f"Run config loaded from: {config_path}")

    return config_dict


def print_config_summary(config: Dict[str, Any]) -> None:
    """
    Print a human-readable summary of configuration.

    Args:
        config: Configuration dictionary
    """
    print("=" * 80)
    print("RUN CONFIGURATION SUMMARY")
    print("=" * 80)

    if 'timestamp' in config:
        print(f"Timestamp: {config['timestamp']}")

    git_info = config.get('git') or {}
    if git_info.get('commit_hash'):
        print(f"Git Commit: {git_info['commit_hash']}")
    if git_info.get('branch'):
        print(f"Git Branch: {git_info['branch']}")

    if 'python_version' in config:
        print(f"Python Version: {config['python_version']}")

    for title, key in (("Controller", 'controller_config'),
                       ("Simulation", 'simulation_config'),
                       ("Training", 'training_config')):
        print(f"\n{title} Configuration:")
        _print_section(config.get(key) or {}, indent=2)

    print("=" * 80)


def _print_section(section: Dict[str, Any], indent: int) -> None:
    pad = " " * indent
    for key, value in section.items():
        if isinstance(value, dict):
            print(f"{pad}{key}:")
            _print_section(value, indent + 2)
        else:
            print(f"{pad}{key}: {value}")
