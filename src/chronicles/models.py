"""Database models for Shadow Chronicles."""

import datetime as dt

from sqlmodel import Field, SQLModel


def _now() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


class Player(SQLModel, table=True):
    """An account keyed by client certificate fingerprint."""

    id: int | None = Field(default=None, primary_key=True)
    fingerprint: str = Field(unique=True, index=True)
    # Name given to the player's character in new games
    name: str = "Traveler"
    created_at: dt.datetime = Field(default_factory=_now)
    last_seen: dt.datetime = Field(default_factory=_now)


class SavedGame(SQLModel, table=True):
    """One saved GameSession per player.

    The session is stored whole; the plain columns beside it are copies kept
    for querying without unpickling.
    """

    id: int | None = Field(default=None, primary_key=True)
    player_id: int = Field(foreign_key="player.id", unique=True, index=True)
    state_blob: bytes  # zlib-compressed pickle of GameSession
    turns: int = 0
    location: str = ""
    in_combat: bool = False
    started_at: dt.datetime = Field(default_factory=_now)
    last_played: dt.datetime = Field(default_factory=_now)
