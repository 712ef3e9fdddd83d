"""Configuration for Shadow Chronicles."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from .engine.state import START_ROOM, GameConfig


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


@dataclass
class Config:
    """Application configuration."""

    database_url: str = "sqlite:///./chronicles.db"
    host: str = "localhost"
    port: int = 1965
    certfile: Path | None = None
    keyfile: Path | None = None
    log_level: str = "INFO"
    log_file: Path | None = None
    json_logs: bool = False
    hash_identities: bool = True
    # Room content; None means the data shipped with the package
    data_dir: Path | None = None
    game: GameConfig = field(default_factory=GameConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        certfile = os.getenv("CHRONICLES_CERTFILE")
        keyfile = os.getenv("CHRONICLES_KEYFILE")
        log_file = os.getenv("CHRONICLES_LOG_FILE")
        data_dir = os.getenv("CHRONICLES_DATA_DIR")

        defaults = GameConfig()
        game = GameConfig(
            max_inventory_weight=_env_int(
                "CHRONICLES_MAX_INVENTORY_WEIGHT", defaults.max_inventory_weight
            ),
            base_hp=_env_int("CHRONICLES_BASE_HP", defaults.base_hp),
            base_mp=_env_int("CHRONICLES_BASE_MP", defaults.base_mp),
            rest_hp_recovery=_env_int(
                "CHRONICLES_REST_HP_RECOVERY", defaults.rest_hp_recovery
            ),
            rest_mp_recovery=_env_int(
                "CHRONICLES_REST_MP_RECOVERY", defaults.rest_mp_recovery
            ),
            starting_room=os.getenv("CHRONICLES_STARTING_ROOM", START_ROOM),
        )

        return cls(
            database_url=os.getenv("CHRONICLES_DATABASE_URL", cls.database_url),
            host=os.getenv("CHRONICLES_HOST", cls.host),
            port=int(os.getenv("CHRONICLES_PORT", str(cls.port))),
            certfile=Path(certfile) if certfile else None,
            keyfile=Path(keyfile) if keyfile else None,
            log_level=os.getenv("CHRONICLES_LOG_LEVEL", cls.log_level),
            log_file=Path(log_file) if log_file else None,
            json_logs=os.getenv("CHRONICLES_JSON_LOGS", "").lower()
            in ("true", "1", "yes"),
            hash_identities=os.getenv("CHRONICLES_HASH_IDENTITIES", "true").lower()
            not in ("false", "0", "no"),
            data_dir=Path(data_dir) if data_dir else None,
            game=game,
        )
