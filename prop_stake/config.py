"""Configuration management for prop-stake."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from prop_stake.exceptions import ConfigurationError

SECONDS_PER_DAY = 86400


@dataclass
class StakingConfig:
    """Staking rules shared by every property."""

    staking_period: int = 30 * SECONDS_PER_DAY
    admin: str = "admin"
    max_withdraw_percent: int = 30
    bps_denominator: int = 10000

    def __post_init__(self) -> None:
        if self.staking_period <= 0:
            raise ConfigurationError(f"staking_period must be positive, got {self.staking_period}")
        if not self.admin:
            raise ConfigurationError("admin identity must not be empty")
        if not 0 < self.max_withdraw_percent <= 100:
            raise ConfigurationError(
                f"max_withdraw_percent must be in (0, 100], got {self.max_withdraw_percent}"
            )


@dataclass
class KafkaConfig:
    """Kafka producer configuration."""

    bootstrap_servers: str = "localhost:9092"
    acks: str = "all"
    batch_size: int = 16384
    linger_ms: int = 5
    compression: str = "snappy"
    retries: int = 3
    topic_prefix: str = "dev.staking"

    def to_dict(self) -> dict[str, Any]:
        """Convert to confluent-kafka config dict."""
        return {
            "bootstrap.servers": self.bootstrap_servers,
            "acks": self.acks,
            "batch.size": self.batch_size,
            "linger.ms": self.linger_ms,
            "compression.type": self.compression,
            "retries": self.retries,
        }


@dataclass
class OutputConfig:
    """Output configuration."""

    events_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False


@dataclass
class SimulationConfig:
    """Configuration for a randomised activity run."""

    num_users: int = 10
    num_properties: int = 3
    steps: int = 500
    step_seconds: int = SECONDS_PER_DAY
    initial_balance: int = 1_000_000
    reward_pool: int = 1_000_000
    seed: int | None = None


@dataclass
class PropStakeConfig:
    """Main configuration for prop-stake."""

    staking: StakingConfig = field(default_factory=StakingConfig)
    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    log_level: str = "INFO"
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> "PropStakeConfig":
        """Create config from environment variables."""
        import os

        try:
            staking = StakingConfig(
                staking_period=int(os.getenv("STAKING_PERIOD", str(30 * SECONDS_PER_DAY))),
                admin=os.getenv("STAKING_ADMIN", "admin"),
            )
            seed = int(os.getenv("SEED")) if os.getenv("SEED") else None
        except ValueError as exc:
            raise ConfigurationError(f"Invalid numeric environment value: {exc}") from exc

        kafka = KafkaConfig(
            bootstrap_servers=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
            acks=os.getenv("KAFKA_ACKS", "all"),
            topic_prefix=os.getenv("TOPIC_PREFIX", "dev.staking"),
        )

        output = OutputConfig(
            events_dir=Path(os.getenv("OUTPUT_DIR", "output")),
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
        )

        return cls(
            staking=staking,
            kafka=kafka,
            output=output,
            simulation=SimulationConfig(seed=seed),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )
