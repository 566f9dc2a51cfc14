"""
Visualize training progress from logs, and learned values from a value table
"""

import argparse
from pathlib import Path
from typing import Dict, List, Optional

import matplotlib.pyplot as plt
import numpy as np
import yaml

from airspace import Position, StateSpace, config_from_dict
from utils import load_metrics, load_value_table


def _smoothed(values: List[float]) -> Optional[tuple]:
    if len(values) <= 10:
        return None
    window = min(50, len(values) // 5)
    return window, np.convolve(values, np.ones(window) / window, mode='valid')


def _plot_series(ax, episodes: List[int], values: List[float], ylabel: str, title: str):
    if values:
        ax.plot(episodes, values, linewidth=1, alpha=0.6)
        smoothed = _smoothed(values)
        if smoothed is not None:
            window, series = smoothed
            ax.plot(episodes[window - 1:], series, linewidth=2, color='red',
                    label=f'Smoothed (window={window})')
            ax.legend()
    ax.set_xlabel('Episode')
    ax.set_ylabel(ylabel)
    ax.set_title(title)
    ax.grid(True, alpha=0.3)


def plot_training_progress(logs: List[Dict], output_dir: Path):
    """Create training progress plots"""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    logs = [log for log in logs if 'episode' in log]
    episodes = [log['episode'] for log in logs]

    fig = plt.figure(figsize=(16, 10))
    gs = fig.add_gridspec(3, 2, hspace=0.3, wspace=0.3)

    # 1. Episode reward
    _plot_series(fig.add_subplot(gs[0, :]), episodes,
                 [log.get('episode_reward', 0) for log in logs],
                 'Episode Reward', 'Training Reward Progress')

    # 2. Interception rate
    _plot_series(fig.add_subplot(gs[1, 0]), episodes,
                 [log.get('interception_rate', 0) for log in logs],
                 'Interception Rate', 'Interceptions / Terminal Outcomes')

    # 3. Exploration rate
    _plot_series(fig.add_subplot(gs[1, 1]), episodes,
                 [log.get('epsilon', 0) for log in logs],
                 'Epsilon', 'Exploration Rate')

    # 4. Table coverage
    _plot_series(fig.add_subplot(gs[2, 0]), episodes,
                 [log.get('states_visited', 0) for log in logs],
                 'States', 'States in Value Table')

    # 5. Heading instructions
    _plot_series(fig.add_subplot(gs[2, 1]), episodes,
                 [log.get('headings_issued', 0) for log in logs],
                 'Instructions', 'Headings Issued per Episode')

    plt.savefig(output_dir / 'training_progress.png', dpi=150, bbox_inches='tight')
    print(f"Saved: {output_dir / 'training_progress.png'}")
    plt.close()


def best_value_grid(space: StateSpace, table: Dict[str, Dict[str, float]]) -> np.ndarray:
    """Best action value per cell as a (rings, wedges) array; NaN where unvisited."""
    rings = space.rings
    wedges = int(round(360.0 / space.heading_step))
    grid = np.full((len(rings), wedges), np.nan)

    for ring_index, min_distance in enumerate(rings):
        for wedge_index, cell in enumerate(space.ring_cells(min_distance)):
            row = table.get(cell.id)
            if row:
                grid[ring_index, wedge_index] = max(float(v) for v in row.values())

    return grid


def plot_value_table(table: Dict[str, Dict[str, float]], config: dict, output_dir: Path):
    """Polar heat map of the best learned value in each cell"""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    sim_config = config.get('simulation') or {}
    controller_config = config_from_dict(config.get('controller'))
    space = StateSpace(
        Position(0.0, 0.0),
        ctr_radius=sim_config.get('ctr_radius', 40.0),
        distance_step=controller_config.state_space.distance_step,
        heading_step=controller_config.state_space.heading_step,
    )

    grid = best_value_grid(space, table)
    theta_edges = np.radians(np.arange(grid.shape[1] + 1) * space.heading_step)
    r_edges = np.append(space.rings, space.outermost_distance + space.distance_step)

    fig, ax = plt.subplots(figsize=(9, 9), subplot_kw={'projection': 'polar'})
    ax.set_theta_zero_location('N')
    ax.set_theta_direction(-1)

    mesh = ax.pcolormesh(theta_edges, r_edges, np.ma.masked_invalid(grid), cmap='RdYlGn', shading='flat')
    fig.colorbar(mesh, ax=ax, label='max Q(s, a)', shrink=0.8)

    runway_heading = sim_config.get('runway_heading')
    if runway_heading is not None:
        # final approach course extends from the threshold opposite the runway heading
        approach_course = np.radians((runway_heading + 180.0) % 360.0)
        ax.plot([approach_course, approach_course], [0, r_edges[-1]], color='black',
                linestyle='--', linewidth=1.5, label='Final approach course')
        ax.legend(loc='lower left')

    visited = int(np.count_nonzero(~np.isnan(grid)))
    ax.set_title(f'Learned State Values ({visited}/{grid.size} cells visited)')

    plt.savefig(output_dir / 'value_table.png', dpi=150, bbox_inches='tight')
    print(f"Saved: {output_dir / 'value_table.png'}")
    plt.close()


def print_summary(logs: List[Dict]):
    """Print training summary"""
    logs = [log for log in logs if 'episode' in log]
    if not logs:
        print("No logs found")
        return

    print("\n" + "=" * 60)
    print("TRAINING SUMMARY")
    print("=" * 60)

    last_log = logs[-1]
    print(f"Total Episodes:  {last_log.get('episode', 0):,}")
    print(f"States Visited:  {last_log.get('states_visited', 0):,}")
    print(f"Final Epsilon:   {last_log.get('epsilon', 0):.3f}")

    rewards = [log.get('episode_reward', 0) for log in logs]
    print(f"\nReward Statistics:")
    print(f"  Final:         {rewards[-1]:.2f}")
    print(f"  Mean:          {np.mean(rewards):.2f}")
    print(f"  Std:           {np.std(rewards):.2f}")
    print(f"  Max:           {np.max(rewards):.2f}")
    print(f"  Min:           {np.min(rewards):.2f}")

    interceptions = sum(log.get('interceptions', 0) for log in logs)
    exits = sum(log.get('airspace_exits', 0) for log in logs)
    print(f"\nOutcomes:")
    print(f"  Intercepted:   {interceptions}")
    print(f"  Exited:        {exits}")
    if interceptions + exits:
        print(f"  Rate:          {interceptions / (interceptions + exits):.1%}")

    print("=" * 60)


def main():
    parser = argparse.ArgumentParser(description="Visualize training progress")
    parser.add_argument("--log-file", type=str, default=None,
                        help="Path to training log file (.jsonl)")
    parser.add_argument("--value-table", type=str, default=None,
                        help="Path to saved value table (.json)")
    parser.add_argument("--config", type=str, default="config/training_config.yaml",
                        help="Config used for training (airspace geometry)")
    parser.add_argument("--output-dir", type=str, default="training_plots",
                        help="Output directory for plots")
    args = parser.parse_args()

    if not args.log_file and not args.value_table:
        parser.error("at least one of --log-file or --value-table is required")

    if args.log_file:
        print(f"Loading logs from: {args.log_file}")
        logs = load_metrics(Path(args.log_file))
        print(f"Loaded {len(logs)} log entries")

        print_summary(logs)
        print(f"\nCreating plots...")
        plot_training_progress(logs, Path(args.output_dir))

    if args.value_table:
        with open(args.config, 'r') as f:
            config = yaml.safe_load(f) or {}
        plot_value_table(load_value_table(args.value_table), config, Path(args.output_dir))

    print("\nDone!")


if __name__ == "__main__":
    main()
