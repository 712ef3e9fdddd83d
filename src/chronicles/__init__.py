"""Shadow Chronicles, an interactive-fiction engine served over Gemini."""

from .app import create_app
from .config import Config
from .logging import configure_logging, get_logger

__all__ = ["main", "create_app", "Config"]


def main() -> None:
    """Run the Gemini server with configuration from the environment."""
    config = Config.from_env()
    configure_logging(
        log_level=config.log_level,
        log_file=config.log_file,
        json_logs=config.json_logs,
        hash_identities=config.hash_identities,
    )

    logger = get_logger(__name__)
    logger.info(
        "server_starting",
        host=config.host,
        port=config.port,
        data_dir=str(config.data_dir) if config.data_dir else "packaged",
        starting_room=config.game.starting_room,
    )
    if config.certfile is None or config.keyfile is None:
        logger.warning("tls_files_not_configured")

    app = create_app(config)
    app.run(
        host=config.host,
        port=config.port,
        certfile=str(config.certfile) if config.certfile else None,
        keyfile=str(config.keyfile) if config.keyfile else None,
    )
