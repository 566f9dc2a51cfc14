"""
Main training script for the approach-control Q-learning agents
"""

import argparse
import logging
from dataclasses import asdict
from datetime import datetime
from pathlib import Path

import numpy as np
import wandb
import yaml
from tqdm import tqdm

from airspace import MetricsTracker, config_from_dict, config_to_dict, validate_config
from airspace.constants import LOG_FORMAT
from simulation import ApproachSimulator, EventBus, SimulationConfig
from training import AgentController, save_run_config
from utils import Logger, load_value_table, save_value_table


logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description="Train approach-control Q-learning agents")
    parser.add_argument("--config", type=str, default="config/training_config.yaml",
                        help="Path to config file")
    parser.add_argument("--value-table", type=str, default=None,
                        help="Path to a saved value table to resume from")
    parser.add_argument("--episodes", type=int, default=None,
                        help="Override number of training episodes")
    parser.add_argument("--seed", type=int, default=None,
                        help="Override random seed")
    parser.add_argument("--output-dir", type=str, default=None,
                        help="Override output directory")
    parser.add_argument("--wandb", action="store_true",
                        help="Use Weights & Biases logging")
    return parser.parse_args()


def load_config(config_path: str) -> dict:
    """Load training configuration"""
    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)
    return config or {}


def create_simulator(config: dict, seed: int = None) -> ApproachSimulator:
    """Create the simulator with its own event bus"""
    sim_config = dict(config.get('simulation') or {})
    if seed is not None:
        sim_config['seed'] = seed
    return ApproachSimulator(SimulationConfig(**sim_config), event_bus=EventBus())


def create_controller(config: dict, sim: ApproachSimulator, seed: int = None) -> AgentController:
    """Create the agent controller attached to the simulator's airport and event bus"""
    controller_config = config_from_dict(config.get('controller'))
    validate_config(controller_config)

    return AgentController(
        sim.airport,
        sim,
        config=controller_config,
        aircraft=sim.list_aircraft(),
        event_bus=sim.event_bus,
        rng=np.random.default_rng(seed),
    )


def run_episode(sim: ApproachSimulator, controller: AgentController, tracker: MetricsTracker) -> dict:
    """Run one episode and return its metrics"""
    controller.metrics = tracker.start_episode()
    sim.reset()

    while not sim.done:
        sim.tick()
        controller.step()

    episode = tracker.end_episode()
    return {
        **episode.to_dict(),
        **{f'sim/{key}': value for key, value in sim.get_statistics().items()},
    }


def train(config: dict, args):
    """Main training loop"""
    training_config = config.get('training') or {}

    seed = args.seed if args.seed is not None else training_config.get('seed')
    n_episodes = args.episodes or training_config.get('episodes', 500)
    save_interval = training_config.get('save_interval', 50)
    use_wandb = args.wandb or training_config.get('use_wandb', False)

    run_name = f"approach_q_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
    output_dir = Path(args.output_dir or training_config.get('output_dir', 'runs')) / run_name
    output_dir.mkdir(parents=True, exist_ok=True)
    value_table_path = output_dir / training_config.get('value_table_file', 'value_table.json')

    sim = create_simulator(config, seed)
    controller = create_controller(config, sim, seed)

    if args.value_table:
        logger.info(f"Resuming from value table: {args.value_table}")
        controller.load_value_table(load_value_table(args.value_table))

    sim_config = asdict(sim.config)
    sim_config['runway_threshold'] = list(sim.config.runway_threshold)
    save_run_config(
        str(output_dir),
        controller_config=config_to_dict(controller.config),
        simulation_config=sim_config,
        training_config={**training_config, 'episodes': n_episodes, 'seed': seed},
        additional_info={'resumed_from': args.value_table} if args.value_table else None,
    )

    if use_wandb:
        wandb.init(
            project=training_config.get('wandb_project', 'openscope-approach-rl'),
            config=config,
            name=run_name,
        )

    tracker = MetricsTracker(window_size=training_config.get('window_size', 100))
    metrics_logger = Logger(output_dir)

    logger.info(f"Training for {n_episodes} episodes "
                f"({len(controller.state_space)} states, output in {output_dir})")

    episode_idx = 0
    pbar = tqdm(range(n_episodes), desc="Training")

    try:
        for episode_idx in pbar:
            episode_stats = run_episode(sim, controller, tracker)
            epsilon = controller.learner.decay_epsilon()

            log_data = {
                'episode': episode_idx + 1,
                **episode_stats,
                **tracker.get_rolling_averages(),
                'epsilon': epsilon,
                'states_visited': len(controller.learner),
            }
            metrics_logger.log(log_data)

            if use_wandb:
                wandb.log(log_data, step=episode_idx + 1)

            pbar.set_postfix({
                'reward': f"{log_data['mean_reward']:.1f}",
                'intercept': f"{log_data['mean_interception_rate']:.2f}",
                'eps': f"{epsilon:.3f}",
            })

            if save_interval and (episode_idx + 1) % save_interval == 0:
                snapshot = output_dir / f"value_table_ep{episode_idx + 1}.json"
                save_value_table(snapshot, controller.dump_value_table())

    except KeyboardInterrupt:
        logger.warning(f"Training interrupted by user after {episode_idx} episodes")

    finally:
        save_value_table(value_table_path, controller.dump_value_table())
        summary = metrics_logger.save_summary()
        controller.close()
        pbar.close()

        if use_wandb:
            wandb.finish()

    logger.info(f"Training complete: {summary}")
    print(f"\nValue table saved to: {value_table_path}")
    print(f"Metrics log: {metrics_logger.log_file}")


def main():
    args = parse_args()
    config = load_config(args.config)

    log_level = (config.get('training') or {}).get('log_level', 'INFO')
    logging.basicConfig(level=getattr(logging, str(log_level).upper(), logging.INFO), format=LOG_FORMAT)

    train(config, args)


if __name__ == "__main__":
    main()
