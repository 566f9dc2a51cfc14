"""
Evaluation script for trained approach-control value tables
"""

import argparse
import json
import logging
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import yaml
from tqdm import tqdm

from airspace import MetricsTracker
from airspace.constants import LOG_FORMAT
from train import create_controller, create_simulator, run_episode
from utils import load_value_table


logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description="Evaluate a trained approach-control value table")
    parser.add_argument("--value-table", type=str, required=True,
                        help="Path to saved value table (.json)")
    parser.add_argument("--config", type=str, default="config/training_config.yaml",
                        help="Path to config file")
    parser.add_argument("--n-episodes", type=int, default=None,
                        help="Number of evaluation episodes")
    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed for traffic generation")
    parser.add_argument("--output", type=str, default="evaluation_results.json",
                        help="Output file for results")
    return parser.parse_args()


def evaluate_value_table(config: dict, table: dict, n_episodes: int, seed: int = None) -> dict:
    """
    Run greedy episodes with a frozen value table.

    The learner is frozen: exploration is disabled and updates are
    skipped, so the table is left untouched.
    """
    sim = create_simulator(config, seed)
    controller = create_controller(config, sim, seed)
    controller.load_value_table(table)
    controller.learner.freeze()

    tracker = MetricsTracker(window_size=n_episodes)
    results = {'episodes': [], 'statistics': {}}

    try:
        for episode_idx in tqdm(range(n_episodes), desc="Evaluating"):
            episode_data = run_episode(sim, controller, tracker)
            episode_data['episode'] = episode_idx
            results['episodes'].append(episode_data)
    finally:
        controller.close()

    episodes = results['episodes']
    rewards = [ep['episode_reward'] for ep in episodes]
    interceptions = sum(ep['interceptions'] for ep in episodes)
    exits = sum(ep['airspace_exits'] for ep in episodes)

    results['statistics'] = {
        'mean_reward': float(np.mean(rewards)),
        'std_reward': float(np.std(rewards)),
        'min_reward': float(np.min(rewards)),
        'max_reward': float(np.max(rewards)),
        'mean_length': float(np.mean([ep['episode_length'] for ep in episodes])),
        'total_interceptions': int(interceptions),
        'total_airspace_exits': int(exits),
        'interception_rate': float(interceptions / (interceptions + exits)) if interceptions + exits else 0.0,
        'mean_headings_issued': float(np.mean([ep['headings_issued'] for ep in episodes])),
    }

    return results


def plot_results(results: dict, output_dir: Path):
    """Create visualization plots"""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    episodes = results['episodes']
    fig, axes = plt.subplots(2, 2, figsize=(12, 10))

    # 1. Reward over episodes
    rewards = [ep['episode_reward'] for ep in episodes]
    axes[0, 0].plot(rewards, marker='o')
    axes[0, 0].axhline(y=np.mean(rewards), color='r', linestyle='--', label='Mean')
    axes[0, 0].set_xlabel('Episode')
    axes[0, 0].set_ylabel('Total Reward')
    axes[0, 0].set_title('Reward per Episode')
    axes[0, 0].legend()
    axes[0, 0].grid(True, alpha=0.3)

    # 2. Outcomes per episode
    indices = np.arange(len(episodes))
    axes[0, 1].bar(indices, [ep['interceptions'] for ep in episodes], label='Intercepted', alpha=0.7)
    axes[0, 1].bar(indices, [ep['airspace_exits'] for ep in episodes],
                   bottom=[ep['interceptions'] for ep in episodes], label='Exited airspace', alpha=0.7)
    axes[0, 1].set_xlabel('Episode')
    axes[0, 1].set_ylabel('Aircraft')
    axes[0, 1].set_title('Terminal Outcomes')
    axes[0, 1].legend()
    axes[0, 1].grid(True, alpha=0.3)

    # 3. Heading instructions by direction
    directions = ['north', 'east', 'south', 'west']
    totals = [sum(ep['headings_by_direction'].get(d, 0) for ep in episodes) for d in directions]
    axes[1, 0].bar(directions, totals, alpha=0.7, edgecolor='black')
    axes[1, 0].set_ylabel('Instructions')
    axes[1, 0].set_title('Headings Issued')
    axes[1, 0].grid(True, alpha=0.3)

    # 4. Summary statistics
    stats = results['statistics']
    stats_text = (
        f"Mean Reward: {stats['mean_reward']:.1f} ± {stats['std_reward']:.1f}\n"
        f"Interception Rate: {stats['interception_rate']:.1%}\n"
        f"Intercepted / Exited: {stats['total_interceptions']} / {stats['total_airspace_exits']}\n"
        f"Mean Length: {stats['mean_length']:.1f} ticks\n"
        f"Min/Max Reward: {stats['min_reward']:.1f} / {stats['max_reward']:.1f}"
    )
    axes[1, 1].text(0.1, 0.5, stats_text, fontsize=12, verticalalignment='center',
                    family='monospace', bbox=dict(boxstyle='round', facecolor='wheat', alpha=0.5))
    axes[1, 1].axis('off')
    axes[1, 1].set_title('Summary Statistics')

    plt.tight_layout()
    plt.savefig(output_dir / 'evaluation_summary.png', dpi=150, bbox_inches='tight')
    print(f"Saved plot: {output_dir / 'evaluation_summary.png'}")
    plt.close()


def main():
    args = parse_args()
    logging.basicConfig(level=logging.WARNING, format=LOG_FORMAT)

    with open(args.config, 'r') as f:
        config = yaml.safe_load(f) or {}

    eval_config = config.get('evaluation') or {}
    n_episodes = args.n_episodes or eval_config.get('episodes', 20)
    seed = args.seed if args.seed is not None else eval_config.get('seed')

    print(f"Loading value table: {args.value_table}")
    table = load_value_table(args.value_table)

    print(f"\nEvaluating for {n_episodes} episodes...")
    results = evaluate_value_table(config, table, n_episodes, seed)

    print("\n" + "=" * 60)
    print("EVALUATION RESULTS")
    print("=" * 60)
    stats = results['statistics']
    print(f"Mean Reward:        {stats['mean_reward']:8.2f} ± {stats['std_reward']:.2f}")
    print(f"Min/Max:            {stats['min_reward']:8.2f} / {stats['max_reward']:.2f}")
    print(f"Mean Length:        {stats['mean_length']:8.1f} ticks")
    print(f"Interceptions:      {stats['total_interceptions']:8d}")
    print(f"Airspace Exits:     {stats['total_airspace_exits']:8d}")
    print(f"Interception Rate:  {stats['interception_rate']:8.1%}")
    print("=" * 60)

    output_path = Path(args.output)
    with open(output_path, 'w') as f:
        json.dump(results, f, indent=2)
    print(f"\nResults saved to: {output_path}")

    plot_results(results, output_path.parent / 'plots')


if __name__ == "__main__":
    main()
