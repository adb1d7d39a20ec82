"""Configuration management for fd-engine."""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

from fd_engine.exceptions import ConfigurationError

DEFAULT_STATEMENT_TEMPLATE = (
    "Dear ${CUSTOMER_NAME}, Your monthly statement for ${PRODUCT_NAME} account ending in "
    "${LAST_4_DIGITS} is now available. Opening balance: ${OPENING_BALANCE}, "
    "Closing balance: ${CLOSING_BALANCE}. View full statement in the attachment."
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
class PostgresConfig:
    """PostgreSQL connection configuration."""

    host: str = "localhost"
    port: int = 5432
    database: str = "fdengine"
    user: str = "postgres"
    password: str = "postgres"

    @property
    def connection_string(self) -> str:
        """Get connection string."""
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


@dataclass
class EngineConfig:
    """Main configuration for fd-engine."""

    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    branch_code: str = "101"
    default_penalty_rate: Decimal = Decimal("1.00")
    default_currency: str = "INR"
    statement_template: str = DEFAULT_STATEMENT_TEMPLATE
    clock_mode: str = "system"  # system | logical
    event_sink: str = "console"  # console | kafka | memory
    log_level: str = "INFO"
    log_format: str = "standard"

    def __post_init__(self) -> None:
        if not (self.branch_code.isdigit() and len(self.branch_code) == 3):
            raise ConfigurationError(f"Branch code must be 3 digits, got {self.branch_code!r}")
        if self.default_penalty_rate < 0:
            raise ConfigurationError("Default penalty rate cannot be negative")
        if self.clock_mode not in ("system", "logical"):
            raise ConfigurationError(f"Unknown clock mode: {self.clock_mode}")
        if self.event_sink not in ("console", "kafka", "memory"):
            raise ConfigurationError(f"Unknown event sink: {self.event_sink}")

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Create config from environment variables."""
        import os

        kafka = KafkaConfig(
            bootstrap_servers=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
            acks=os.getenv("KAFKA_ACKS", "all"),
        )

        postgres = PostgresConfig(
            host=os.getenv("POSTGRES_HOST", "localhost"),
            port=int(os.getenv("POSTGRES_PORT", "5432")),
            database=os.getenv("POSTGRES_DB", "fdengine"),
            user=os.getenv("POSTGRES_USER", "postgres"),
            password=os.getenv("POSTGRES_PASSWORD", "postgres"),
        )

        penalty_str = os.getenv("FD_DEFAULT_PENALTY_RATE", "1.00")
        try:
            default_penalty_rate = Decimal(penalty_str)
        except InvalidOperation as e:
            raise ConfigurationError(f"Invalid FD_DEFAULT_PENALTY_RATE: {penalty_str!r}") from e

        return cls(
            kafka=kafka,
            postgres=postgres,
            branch_code=os.getenv("FD_BRANCH_CODE", "101"),
            default_penalty_rate=default_penalty_rate,
            default_currency=os.getenv("FD_DEFAULT_CURRENCY", "INR"),
            statement_template=os.getenv("FD_STATEMENT_TEMPLATE", DEFAULT_STATEMENT_TEMPLATE),
            clock_mode=os.getenv("FD_CLOCK_MODE", "system"),
            event_sink=os.getenv("FD_EVENT_SINK", "console"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )
