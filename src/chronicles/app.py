"""Xitzin application factory for Shadow Chronicles."""

from importlib import resources
from pathlib import Path

from sqlmodel import SQLModel, create_engine
from xitzin import Xitzin

from .config import Config
from .engine.loader import RoomDataError, load_world
from .engine.world import World
from .logging import get_logger

logger = get_logger(__name__)


def _get_data_path() -> Path:
    """Locate the packaged room content via importlib.resources."""
    return Path(str(resources.files("chronicles.data")))


def load_shared_world(config: Config) -> World:
    """Load the one World every session plays in.

    Raises RoomDataError when the configured starting room is not among the
    loaded rooms, since no new game could begin.
    """
    world = load_world(config.data_dir or _get_data_path())
    world.config = config.game
    if world.get_room(config.game.starting_room) is None:
        logger.error("starting_room_missing", starting_room=config.game.starting_room)
        raise RoomDataError(f"starting room {config.game.starting_room!r} is not loaded")
    return world


def create_app(config: Config | None = None) -> Xitzin:
    """Create and configure the Xitzin application."""
    config = config or Config.from_env()

    app = Xitzin(
        title="Shadow Chronicles",
        version="0.1.0",
        templates_dir=Path(__file__).parent / "templates",
    )
    engine = create_engine(config.database_url)
    app.state.engine = engine
    app.state.config = config

    @app.on_startup
    async def startup():
        """Create tables and load the shared world."""
        SQLModel.metadata.create_all(engine)
        app.state.world = load_shared_world(config)
        logger.info(
            "world_loaded",
            rooms=len(app.state.world.rooms),
            objects=len(app.state.world.object_index),
        )

    from .routes import home, play

    home.register_routes(app)
    play.register_routes(app)

    return app
