"""
Bot Configuration Schema
========================

Dataclass-based configuration for navbot.
"""

from typing import Optional, List, Dict, Any, Union
from dataclasses import dataclass, field


def parse_id_list(value: Union[None, str, int, List[Any]]) -> List[int]:
    """Parse ``"1, 2"``, ``[1, "2"]`` or ``3`` into a list of ints."""
    if value is None or value == "":
        return []
    if isinstance(value, int):
        return [value]
    if isinstance(value, str):
        value = value.split(",")
    return [int(str(item).strip()) for item in value if str(item).strip()]


@dataclass
class TelegramConfig:
    """Telegram connection settings."""
    token: Optional[str] = None
    admin_ids: List[int] = field(default_factory=list)
    drop_pending_updates: bool = True
    connect_timeout: float = 10.0
    read_timeout: float = 10.0
    write_timeout: float = 10.0


@dataclass
class DatabaseConfig:
    """Recipient database settings."""
    url: str = "sqlite+aiosqlite:///navbot.sqlite3"
    echo: bool = False


@dataclass
class BroadcastConfig:
    """Broadcast throttling."""
    delay_seconds: float = 0.05
    max_concurrency: int = 1


@dataclass
class StateConfig:
    """Conversation state storage."""
    backend: str = "memory"  # memory | sql


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class BotConfig:
    """
    Main bot configuration.

    Loaded from ~/.navbot/config.yaml or a custom path, then overridden by
    environment variables.
    """
    telegram: TelegramConfig = field(default_factory=TelegramConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    broadcast: BroadcastConfig = field(default_factory=BroadcastConfig)
    state: StateConfig = field(default_factory=StateConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    debug: bool = False

    @classmethod
    def default(cls) -> "BotConfig":
        """Create default configuration."""
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "telegram": {
                "token": self.telegram.token,
                "admin_ids": list(self.telegram.admin_ids),
                "drop_pending_updates": self.telegram.drop_pending_updates,
                "connect_timeout": self.telegram.connect_timeout,
                "read_timeout": self.telegram.read_timeout,
                "write_timeout": self.telegram.write_timeout,
            },
            "database": {
                "url": self.database.url,
                "echo": self.database.echo,
            },
            "broadcast": {
                "delay_seconds": self.broadcast.delay_seconds,
                "max_concurrency": self.broadcast.max_concurrency,
            },
            "state": {
                "backend": self.state.backend,
            },
            "logging": {
                "level": self.logging.level,
                "format": self.logging.format,
            },
            "debug": self.debug,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BotConfig":
        """Create from dictionary."""
        config = cls()

        if "telegram" in data:
            t = data["telegram"] or {}
            config.telegram = TelegramConfig(
                token=t.get("token"),
                admin_ids=parse_id_list(t.get("admin_ids")),
                drop_pending_updates=t.get("drop_pending_updates", True),
                connect_timeout=float(t.get("connect_timeout", 10.0)),
                read_timeout=float(t.get("read_timeout", 10.0)),
                write_timeout=float(t.get("write_timeout", 10.0)),
            )

        if "database" in data:
            d = data["database"] or {}
            config.database = DatabaseConfig(
                url=d.get("url", DatabaseConfig.url),
                echo=d.get("echo", False),
            )

        if "broadcast" in data:
            b = data["broadcast"] or {}
            config.broadcast = BroadcastConfig(
                delay_seconds=float(b.get("delay_seconds", 0.05)),
                max_concurrency=int(b.get("max_concurrency", 1)),
            )

        if "state" in data:
            s = data["state"] or {}
            config.state = StateConfig(backend=s.get("backend", "memory"))

        if "logging" in data:
            lg = data["logging"] or {}
            config.logging = LoggingConfig(
                level=lg.get("level", "INFO"),
                format=lg.get("format", LoggingConfig.format),
            )

        config.debug = data.get("debug", False)

        return config
