#!/usr/bin/env python3
"""Run a randomised staking simulation.

Replays generated deposits, withdrawals, claims and administrative updates
against an in-memory engine and reconciles the pool after every step.

Events can be written to:
- stdout (--console)
- a JSON Lines audit log (--output-dir)
- Kafka topics (--kafka-bootstrap)
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from prop_stake.config import PropStakeConfig
from prop_stake.logging import get_logger, setup_logging
from prop_stake.scenarios import StakingSimulationScenario
from prop_stake.sinks import ConsoleSink, JsonFileSink, KafkaSink

logger = get_logger(__name__)


def main() -> int:
    """Main entry point."""
    config = PropStakeConfig.from_env()

    parser = argparse.ArgumentParser(description="Run a randomised staking simulation")
    parser.add_argument(
        "--users",
        type=int,
        default=config.simulation.num_users,
        help=f"Number of users (default: {config.simulation.num_users})",
    )
    parser.add_argument(
        "--properties",
        type=int,
        default=config.simulation.num_properties,
        help=f"Number of properties (default: {config.simulation.num_properties})",
    )
    parser.add_argument(
        "--steps",
        type=int,
        default=config.simulation.steps,
        help=f"Number of generated actions (default: {config.simulation.steps})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=config.simulation.seed if config.simulation.seed is not None else 42,
        help="Random seed for reproducibility (default: 42)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Write events.jsonl and a positions snapshot to this directory",
    )
    parser.add_argument(
        "--console",
        action="store_true",
        help="Print every event to stdout",
    )
    parser.add_argument(
        "--kafka-bootstrap",
        type=str,
        default=None,
        help="Publish events to Kafka at these bootstrap servers",
    )
    args = parser.parse_args()

    setup_logging(config.log_level, config.log_format)

    sinks = []
    if args.console:
        sinks.append(ConsoleSink(pretty=False))
    if args.output_dir is not None:
        sinks.append(JsonFileSink(args.output_dir, pretty=config.output.pretty_json))
    if args.kafka_bootstrap:
        config.kafka.bootstrap_servers = args.kafka_bootstrap
        sinks.append(KafkaSink(config.kafka))

    config.simulation.num_users = args.users
    config.simulation.num_properties = args.properties
    config.simulation.steps = args.steps
    config.simulation.seed = args.seed

    scenario = StakingSimulationScenario.from_config(
        config.simulation, staking=config.staking, sinks=sinks
    )
    report = scenario.run()

    positions = [
        {"user": user, "property_id": pid, **vars(stake)}
        for (user, pid), stake in scenario.engine.ledger.stakes.items()
    ]
    for sink in sinks:
        sink.write_batch("positions", positions)
        sink.close()

    logger.info("=" * 60)
    for key, value in report.summary.items():
        logger.info("  %s: %s", key, value)
    logger.info("Succeeded: %s", report.succeeded)
    logger.info("Rejected: %s", report.rejected)
    logger.info("Rewards paid: %d", report.rewards_paid)
    if report.ok:
        logger.info("Invariants: ALL OK")
        return 0
    for violation in report.violations:
        logger.error(violation)
    return 1


if __name__ == "__main__":
    sys.exit(main())
