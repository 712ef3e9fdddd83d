"""Lighting and the named predicates built on it.

has_light() is the single source of "can the player see". NPC spawn
conditions and room hook conditions are predicate names evaluated here.
"""

from .state import PlayerState
from .world import LIGHT_SLOT, Room, World


def light_flag(item_id: str) -> str:
    """Player flag recording whether a light source is switched on."""
    return f"{item_id}_on"


def has_light(room: Room, player: PlayerState) -> bool:
    """True if the room is lit or the equipped light source is on."""
    if room.lighting.is_lit:
        return True
    light_id = player.equipped_items.get(LIGHT_SLOT)
    if light_id:
        return player.flags.get(light_flag(light_id), False)
    return False


def check_condition(
    condition: str, room: Room, player: PlayerState, world: World | None = None
) -> bool:
    """Evaluate one predicate name.

    ``darkness`` and ``light_present`` follow has_light(). ``room:<flag>``,
    ``world:<flag>`` and ``player:<flag>`` read the matching flag scope.
    Names nobody knows about hold.
    """
    if condition == "darkness":
        return not has_light(room, player)
    if condition == "light_present":
        return has_light(room, player)
    if condition == "first_visit":
        return room.id not in player.visited_rooms
    scope, _, flag = condition.partition(":")
    if not flag:
        return True
    if scope == "room":
        return room.state.get(flag, False)
    if scope == "player":
        return player.flags.get(flag, False)
    if scope == "world":
        return world is not None and world.get_world_state(flag)
    return True


def check_conditions(
    conditions: list[str], room: Room, player: PlayerState, world: World | None = None
) -> bool:
    """True when every predicate holds (an empty list always holds)."""
    return all(check_condition(c, room, player, world) for c in conditions)


def spawned_npcs(room: Room, player: PlayerState, world: World | None = None) -> list:
    """NPCs currently present, in declared order."""
    present = []
    for npc in room.npcs:
        if not check_conditions(npc.spawn_conditions, room, player, world):
            continue
        if npc.despawn_conditions and check_conditions(
            npc.despawn_conditions, room, player, world
        ):
            continue
        present.append(npc)
    return present
