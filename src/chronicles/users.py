"""User management utilities."""

import datetime as dt

from sqlmodel import Session, select

from .logging import get_logger
from .models import Player

logger = get_logger(__name__)


def get_or_create_player(session: Session, fingerprint: str) -> Player:
    """Get existing player or create new one from certificate fingerprint."""
    statement = select(Player).where(Player.fingerprint == fingerprint)
    player = session.exec(statement).first()

    if player:
        player.last_seen = dt.datetime.now(dt.UTC)
        logger.debug("player_accessed", fingerprint=fingerprint)
    else:
        player = Player(fingerprint=fingerprint)
        session.add(player)
        logger.info("player_created", fingerprint=fingerprint)

    session.commit()
    session.refresh(player)
    return player


def rename_player(session: Session, player: Player, name: str) -> Player:
    """Set the display name used for new games."""
    player.name = name.strip()[:40] or player.name
    session.add(player)
    session.commit()
    session.refresh(player)
    logger.info("player_renamed", fingerprint=player.fingerprint)
    return player
