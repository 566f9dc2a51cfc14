"""
Logging utilities for training
"""

import json
from pathlib import Path
from typing import Dict, Any
import numpy as np
from datetime import datetime


def _to_python(value: Any) -> Any:
    """Convert numpy scalars/arrays (possibly nested) to JSON-serializable types."""
    if isinstance(value, (np.integer, np.floating)):
        return value.item()
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, (list, tuple)):
        return [_to_python(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _to_python(v) for k, v in value.items()}
    return value


class Logger:
    """Simple JSONL logger for per-episode training metrics"""

    def __init__(self, log_dir: Path, prefix: str = "training_log"):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.log_file = self.log_dir / f"{prefix}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.jsonl"
        self.metrics = []

    def log(self, metrics: Dict[str, Any]):
        """Log metrics"""
        clean_metrics = {key: _to_python(value) for key, value in metrics.items()}
        clean_metrics['timestamp'] = datetime.now().isoformat()

        with open(self.log_file, 'a') as f:
            f.write(json.dumps(clean_metrics) + '\n')

        self.metrics.append(clean_metrics)

    def get_metrics(self) -> list:
        """Get all logged metrics"""
        return self.metrics

    def save_summary(self) -> Dict[str, Any]:
        """Save summary statistics"""
        if not self.metrics:
            return {}

        last = self.metrics[-1]
        summary = {
            'total_episodes': len(self.metrics),
            'total_steps': sum(m.get('episode_length', 0) for m in self.metrics),
            'total_interceptions': sum(m.get('interceptions', 0) for m in self.metrics),
            'total_airspace_exits': sum(m.get('airspace_exits', 0) for m in self.metrics),
            'final_mean_reward': last.get('mean_reward', last.get('episode_reward', 0)),
            'final_interception_rate': last.get('mean_interception_rate',
                                                last.get('interception_rate', 0)),
            'final_epsilon': last.get('epsilon'),
            'states_visited': last.get('states_visited'),
        }

        summary_file = self.log_dir / 'training_summary.json'
        with open(summary_file, 'w') as f:
            json.dump(summary, f, indent=2)

        return summary


def load_metrics(log_file: Path) -> list:
    """Read every record of a JSONL metrics file."""
    records = []
    with open(log_file, 'r') as f:
        for line in f:
            line = line.strip()
            if line:
                records.append(json.loads(line))
    return records
