"""Bridge between a player's account, their saved game and the shared World."""

import datetime as dt
import pickle
import zlib

from sqlmodel import Session, select

from .engine.commands import (
    CommandResult,
    get_current_room,
    get_room_description,
    process_command,
    state_snapshot,
)
from .engine.state import GameSession, create_new_player
from .engine.world import World
from .logging import get_logger
from .models import Player, SavedGame

logger = get_logger(__name__)


def pack_game(game: GameSession) -> bytes:
    return zlib.compress(pickle.dumps(game))


def unpack_game(blob: bytes) -> GameSession:
    return pickle.loads(zlib.decompress(blob))


def _fresh_game(player: Player, world: World) -> GameSession:
    config = world.config
    return GameSession(
        id=f"player-{player.id}",
        player=create_new_player(player.name, config.starting_room, config),
    )


class ChronicleSession:
    """One request's view of a player: account row, save row and GameSession."""

    def __init__(
        self,
        db_session: Session,
        player: Player,
        saved_game: SavedGame | None,
        game: GameSession,
        world: World,
    ):
        self.db_session = db_session
        self.player = player
        self.saved_game = saved_game
        self.game = game
        self.world = world
        self.turns = saved_game.turns if saved_game else 0

    @classmethod
    def load_or_create(
        cls, db_session: Session, player: Player, world: World
    ) -> "ChronicleSession":
        """Resume the player's saved game, or start a new one.

        A save that no longer unpickles starts over. A save whose room has
        gone from the loaded content moves the player to the starting room.
        """
        statement = select(SavedGame).where(SavedGame.player_id == player.id)
        saved_game = db_session.exec(statement).first()
        if saved_game is None:
            logger.info("new_game_started", fingerprint=player.fingerprint)
            return cls(db_session, player, None, _fresh_game(player, world), world)

        try:
            game = unpack_game(saved_game.state_blob)
        except (zlib.error, pickle.UnpicklingError, AttributeError, EOFError) as e:
            logger.warning(
                "saved_game_unreadable", fingerprint=player.fingerprint, error=str(e),
            )
            game = _fresh_game(player, world)
            saved_game.turns = 0
        else:
            logger.debug(
                "game_loaded", fingerprint=player.fingerprint, turns=saved_game.turns,
            )

        if get_current_room(world, game) is None:
            logger.warning(
                "saved_location_missing",
                fingerprint=player.fingerprint,
                location=game.player.location,
            )
            game.player.location = world.config.starting_room

        return cls(db_session, player, saved_game, game, world)

    def process_command(self, raw_input: str) -> CommandResult:
        """Run one command against the shared world and count the turn."""
        self.turns += 1
        return process_command(self.world, self.game, raw_input)

    def save(self) -> None:
        """Write the GameSession and its summary columns."""
        if self.saved_game is None:
            self.saved_game = SavedGame(player_id=self.player.id, state_blob=b"")
            self.db_session.add(self.saved_game)

        saved = self.saved_game
        saved.state_blob = pack_game(self.game)
        saved.turns = self.turns
        saved.location = self.game.player.location
        saved.in_combat = self.game.in_combat
        saved.last_played = dt.datetime.now(dt.UTC)
        self.db_session.commit()
        logger.debug(
            "game_saved",
            fingerprint=self.player.fingerprint,
            turns=saved.turns,
            location=saved.location,
        )

    def get_room_description(self) -> str:
        room = get_current_room(self.world, self.game)
        if room is None:
            return "You are nowhere at all."
        return get_room_description(self.world, room, self.game.player)

    def snapshot(self) -> dict:
        return state_snapshot(self.world, self.game)

    def rename(self, name: str) -> None:
        self.game.player.name = name

    def reset(self) -> CommandResult:
        """Restart the game. This resets the shared world for everyone."""
        result = self.process_command("restart")
        self.turns = 0
        logger.info("game_reset", fingerprint=self.player.fingerprint)
        return result
