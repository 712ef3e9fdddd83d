"""Exit requirement checks."""

from dataclasses import dataclass

from .state import PlayerState
from .world import RoomExit, World

DEFAULT_BLOCK_MESSAGES = {
    "item": "You can't go that way.",
    "state": "The way is blocked.",
    "skill": "You lack the required skill.",
    "stat": "You're not capable of that.",
}


@dataclass(frozen=True)
class ExitCheck:
    allowed: bool
    message: str | None = None


def _requirement_met(world: World, exit_: RoomExit, player: PlayerState) -> bool:
    req = exit_.requires
    if req.type == "item":
        return player.has_item(req.id)
    if req.type == "state":
        return world.get_world_state(req.id)
    if req.type == "skill":
        return req.id in player.skills
    if req.type == "stat":
        return player.stats.get(req.id, 0) >= (req.value or 0)
    return True


def can_use_exit(world: World, exit_: RoomExit, player: PlayerState) -> ExitCheck:
    """Decide whether the player may take an exit."""
    if exit_.requires is None:
        return ExitCheck(allowed=True)
    if _requirement_met(world, exit_, player):
        return ExitCheck(allowed=True)
    message = exit_.blocked_message or DEFAULT_BLOCK_MESSAGES.get(
        exit_.requires.type, "You can't go that way."
    )
    return ExitCheck(allowed=False, message=message)
