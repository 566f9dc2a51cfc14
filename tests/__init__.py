"""
Test suite for approach-control RL.

This package contains tests for:
- Airspace geometry, state space and interception feasibility
- The tabular Q-learner and the agent controller
- The kinematic simulator, persistence and logging utilities
"""
