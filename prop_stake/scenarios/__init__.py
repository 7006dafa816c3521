"""Scenarios for exercising the staking engine end to end."""

from prop_stake.scenarios.simulation import SimulationReport, StakingSimulationScenario

__all__ = ["SimulationReport", "StakingSimulationScenario"]
