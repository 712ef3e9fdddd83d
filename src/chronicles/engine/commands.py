"""Command dispatch and handler functions.

process_command(world, session, raw_input) -> CommandResult is the main
entry point. It parses the input, dispatches on the canonical verb and
returns the handler's result. Handlers mutate the player and the shared
world in place and report what changed through the result.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..logging import command_context, get_logger
from .equipment import equip, equipped_light, item_from_object, unequip
from .gates import can_use_exit
from .lighting import check_condition, has_light, light_flag, spawned_npcs
from .parser import ParsedCommand, parse_command
from .state import GameSession, PlayerState, create_new_player, serialize_player
from .world import (
    FLAG_HOOK_ACTIONS,
    LIGHT_SLOT,
    Room,
    RoomHook,
    RoomObject,
    World,
    WorldIntegrityError,
)

logger = get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "Something went wrong in the world around you. Nothing happens."

HELP_TEXT = """\
**Available Commands:**

**Movement:** go [direction], north, south, east, west, up, down
**Looking:** look, examine [object]
**Items:** take [item], drop [item], use [item], inventory
**Equipment:** equip [item], unequip [item]
**Light:** turn on [item], turn off [item], light [item], extinguish [item]
**Interaction:** open [object], close [object]
**Combat:** attack, cast [spell]
**Other:** rest, help, restart

**Tips:**
- Examine everything carefully
- Equip weapons, armor, accessories, and lights from your inventory
- Watch your HP and MP
- Some paths may require items or skills
- Light sources must be equipped before they can be switched on"""


@dataclass
class CommandResult:
    """What a command did, for the transport to relay."""

    success: bool
    message: str
    state_changes: dict[str, Any] | None = None
    room_changed: bool = False
    combat_triggered: bool = False
    modal_data: dict[str, str] | None = None


def _fail(message: str) -> CommandResult:
    return CommandResult(success=False, message=message)


def get_current_room(world: World, session: GameSession) -> Room | None:
    """The room the session's player stands in, if it is loaded."""
    return world.get_room(session.player.location)


def _is_listed(obj: RoomObject, lit: bool) -> bool:
    """Whether an object shows up in the "You can see" line."""
    if obj.taken:
        return False
    if obj.visibility == "always":
        return True
    return obj.visibility == "conditional" and (not obj.requires_light or lit)


def _base_description(room: Room, player: PlayerState, verbose: bool) -> str:
    """Pick the description variant for a lit room."""
    descriptions = room.descriptions
    for flag, text in descriptions.dynamic_variants.items():
        if room.state.get(flag):
            return text

    # Naturally dark room seen by the player's own light
    if not room.lighting.is_lit:
        return descriptions.long

    visited = room.id in player.visited_rooms
    if verbose or not visited:
        return descriptions.long if visited else descriptions.initial
    return descriptions.visited or descriptions.short or descriptions.long


def get_room_description(
    world: World, room: Room, player: PlayerState, verbose: bool = False
) -> str:
    """Assemble the full text for a room: description, objects, exits, NPCs."""
    if not has_light(room, player):
        return room.descriptions.dark

    desc = _base_description(room, player, verbose).strip()

    objects = [obj.name for obj in room.objects if _is_listed(obj, True)]
    if objects:
        desc += "\n\nYou can see: " + ", ".join(objects)

    exits = [direction for direction, exit_ in room.exits.items() if exit_.visible]
    if exits:
        desc += "\n\nExits: " + ", ".join(exits)

    for npc in spawned_npcs(room, player, world):
        desc += f"\n\n{npc.description}"
    return desc


def state_snapshot(world: World, session: GameSession) -> dict[str, Any]:
    """State update payload a transport sends after a state change."""
    room = get_current_room(world, session)
    snapshot: dict[str, Any] = {
        "player": serialize_player(session.player),
        "in_combat": session.in_combat,
        "room": None,
    }
    if room is not None:
        snapshot["room"] = {
            "id": room.id,
            "name": room.identity.canonical_name,
            "region": room.identity.region,
            "zone": room.identity.zone,
            "is_lit": has_light(room, session.player),
            "terrain": room.environment.terrain,
        }
    return snapshot


def end_combat(session: GameSession) -> None:
    """Hand the session back from the combat mode to normal play."""
    session.in_combat = False
    session.current_enemy = None


def _run_hooks(
    world: World, room: Room, player: PlayerState, hooks: list[RoomHook]
) -> list[str]:
    """Interpret declarative room hooks; returns any messages they produce."""
    for hook in hooks:
        if hook.action in FLAG_HOOK_ACTIONS and not hook.params.get("flag"):
            raise WorldIntegrityError(f"{hook.action} hook in {room.id} names no flag")

    messages = []
    for hook in hooks:
        if not check_condition(hook.condition, room, player, world):
            continue
        params = hook.params
        if hook.action == "message":
            messages.append(params.get("text", ""))
        elif hook.action == "set_room_state":
            room.state[params["flag"]] = params.get("value", True)
        elif hook.action == "set_world_state":
            world.set_world_state(params["flag"], params.get("value", True))
        elif hook.action == "set_player_flag":
            player.flags[params["flag"]] = params.get("value", True)
        else:
            logger.warning("hook_action_unknown", room=room.id, action=hook.action)
    return [m for m in messages if m]


def _cmd_look(world: World, session: GameSession, command: ParsedCommand) -> CommandResult:
    """Handle LOOK and EXAMINE."""
    player = session.player
    room = world.require_room(player.location)

    if not command.noun:
        if not has_light(room, player):
            return CommandResult(True, room.descriptions.dark)
        desc = get_room_description(world, room, player, verbose=True)
        extra = _run_hooks(world, room, player, room.hooks.on_look)
        return CommandResult(True, "\n\n".join([desc, *extra]))

    noun = command.noun
    obj = room.find_object(noun)
    if obj is not None:
        return _examine_object(room, player, obj)

    item = player.find_item(noun)
    if item is not None:
        return CommandResult(True, item.description or f"It's your {item.name}.")

    for npc in spawned_npcs(room, player, world):
        if npc.matches(noun):
            return CommandResult(True, npc.description)

    return _fail(f'You don\'t see any "{noun}" here.')


def _examine_object(room: Room, player: PlayerState, obj: RoomObject) -> CommandResult:
    """Examine text, learning a skill the first time if the object teaches one."""
    text = obj.examine_text or obj.description
    skill = obj.state_changes.get("ability_learned")
    if skill and not room.state.get(skill):
        room.state[skill] = True
        if skill not in player.skills:
            player.skills.append(skill)
            logger.info("skill_learned", skill=skill, room=room.id)
            return CommandResult(True, text, state_changes={"skills": player.skills})
    return CommandResult(True, text)


def _cmd_go(world: World, session: GameSession, command: ParsedCommand) -> CommandResult:
    """Handle movement commands."""
    player = session.player
    if not command.noun:
        return _fail("Go where?")
    if session.in_combat:
        return _fail("You can't get away while you are fighting!")

    room = world.require_room(player.location)
    exit_ = room.exits.get(command.noun.lower())
    if exit_ is None:
        return _fail("You can't go that way.")

    check = can_use_exit(world, exit_, player)
    if not check.allowed:
        return _fail(check.message)

    previous = player.location
    player.location = exit_.to
    try:
        destination = world.require_room(exit_.to)
        parts = [exit_.travel_text] if exit_.travel_text else []
        parts.extend(_run_hooks(world, room, player, room.hooks.on_exit))
        parts.extend(_run_hooks(world, destination, player, destination.hooks.on_enter))
        parts.append(get_room_description(world, destination, player))
    except WorldIntegrityError:
        player.location = previous
        raise

    player.mark_visited(destination.id)
    destination.state["visited"] = True

    result = CommandResult(
        success=True,
        message="",
        room_changed=True,
        state_changes={"location": destination.id, "visited_rooms": player.visited_rooms},
    )

    hostile = next(
        (n for n in spawned_npcs(destination, player, world) if n.hostile), None
    )
    if hostile is not None:
        parts.append(f"**{hostile.name} attacks!**")
        session.in_combat = True
        session.current_enemy = hostile.id
        result.combat_triggered = True
        logger.info("combat_triggered", enemy=hostile.id, room=destination.id)

    result.message = "\n\n".join(parts)
    return result


def _cmd_take(world: World, session: GameSession, command: ParsedCommand) -> CommandResult:
    """Handle TAKE/GET commands."""
    player = session.player
    if not command.noun:
        return _fail("Take what?")

    room = world.require_room(player.location)
    obj = next(
        (o for o in room.objects if o.takeable and not o.taken and o.matches(command.noun)),
        None,
    )
    if obj is None:
        return _fail(f'You can\'t take "{command.noun}".')

    item = item_from_object(obj)
    if player.carried_weight() + item.weight > world.config.max_inventory_weight:
        return _fail("You can't carry any more. Try dropping something first.")

    player.inventory.append(item)
    # Stays in room.objects, hidden from listings for good
    obj.taken = True
    return CommandResult(
        True, f"You take the {obj.name}.", state_changes={"inventory": player.inventory},
    )


def _cmd_drop(world: World, session: GameSession, command: ParsedCommand) -> CommandResult:
    """Handle DROP commands. The item leaves the game; the room does not get it back."""
    player = session.player
    if not command.noun:
        return _fail("Drop what?")
    item = player.find_item(command.noun)
    if item is None:
        return _fail(f'You don\'t have "{command.noun}".')
    player.inventory.remove(item)
    return CommandResult(
        True, f"You drop the {item.name}.", state_changes={"inventory": player.inventory},
    )


def _cmd_inventory(world: World, session: GameSession, command: ParsedCommand) -> CommandResult:
    """Handle INVENTORY command."""
    player = session.player
    lines = []
    for item in player.inventory:
        count = f" (x{item.quantity})" if item.quantity > 1 else ""
        lines.append(f"  - {item.name}{count}")

    equipped = []
    for slot, item_id in player.equipped_items.items():
        obj = world.find_object(item_id)
        equipped.append(f"  - {obj.name if obj else item_id} ({slot})")

    if not lines and not equipped:
        return CommandResult(True, "You are carrying nothing.")

    message = "You are carrying:\n" + "\n".join(lines) if lines else "You are carrying nothing."
    if equipped:
        message += "\n\nEquipped:\n" + "\n".join(equipped)
    return CommandResult(True, message)


def _cmd_use(world: World, session: GameSession, command: ParsedCommand) -> CommandResult:
    """Handle USE command."""
    if not command.noun:
        return _fail("Use what?")
    item = session.player.find_item(command.noun)
    if item is None:
        return _fail(f'You don\'t have "{command.noun}".')
    if not item.usable:
        return _fail(f"You can't use the {item.name}.")
    return CommandResult(True, f"You use the {item.name}.")


def _cmd_turn(world: World, session: GameSession, command: ParsedCommand) -> CommandResult:
    """Handle TURN ON/OFF by delegating to LIGHT or EXTINGUISH."""
    if not command.noun:
        return _fail("Turn what?")

    action = command.preposition
    noun = command.noun
    if not action:
        parts = noun.split()
        if len(parts) < 2:
            return _fail("Turn what on or off?")
        action, noun = parts[0], " ".join(parts[1:])

    redirected = ParsedCommand(verb=command.verb, raw=command.raw, noun=noun)
    if action == "on":
        return _cmd_light(world, session, redirected)
    if action == "off":
        return _cmd_extinguish(world, session, redirected)
    return _fail("You can only turn things on or off.")


def _cmd_light(world: World, session: GameSession, command: ParsedCommand) -> CommandResult:
    """Handle LIGHT: switch on the equipped light source."""
    player = session.player
    if not command.noun:
        return _fail("Light what?")
    if not player.equipped_items.get(LIGHT_SLOT):
        return _fail("You need to equip a light source first before you can turn it on.")

    obj = equipped_light(world, player, command.noun)
    if obj is None:
        return _fail(f'You don\'t have "{command.noun}" equipped as a light source.')

    flag = light_flag(obj.id)
    if player.flags.get(flag):
        return _fail("The light is already on.")

    room = world.require_room(player.location)
    was_dark = not has_light(room, player)
    player.flags[flag] = True

    message = f"You turn on the {obj.name}. A bright beam illuminates the area."
    if was_dark:
        message += "\n\n" + get_room_description(world, room, player, verbose=True)
    return CommandResult(True, message, state_changes={"flags": player.flags})


def _cmd_extinguish(world: World, session: GameSession, command: ParsedCommand) -> CommandResult:
    """Handle EXTINGUISH: switch off the equipped light source."""
    player = session.player
    if not command.noun:
        return _fail("Extinguish what?")
    if not player.equipped_items.get(LIGHT_SLOT):
        return _fail("You don't have a light source equipped.")

    obj = equipped_light(world, player, command.noun)
    if obj is None:
        return _fail(f'You don\'t have "{command.noun}" equipped as a light source.')

    flag = light_flag(obj.id)
    if not player.flags.get(flag):
        return _fail("The light is not on.")

    player.flags[flag] = False
    return CommandResult(
        True,
        f"You turn off the {obj.name}. The beam of light disappears.",
        state_changes={"flags": player.flags},
    )


def _cmd_open(world: World, session: GameSession, command: ParsedCommand) -> CommandResult:
    if not command.noun:
        return _fail("Open what?")
    return _fail(f"You can't open the {command.noun}.")


def _cmd_close(world: World, session: GameSession, command: ParsedCommand) -> CommandResult:
    if not command.noun:
        return _fail("Close what?")
    return _fail(f"You can't close the {command.noun}.")


def _cmd_attack(world: World, session: GameSession, command: ParsedCommand) -> CommandResult:
    """Handle ATTACK. Fighting itself belongs to the combat mode."""
    if not session.in_combat:
        return _fail("There's nothing to attack here.")
    return CommandResult(True, "You attack!", combat_triggered=True)


def _cmd_cast(world: World, session: GameSession, command: ParsedCommand) -> CommandResult:
    if not command.noun:
        return _fail("Cast what spell?")
    if session.player.mp <= 0:
        return _fail("You don't have enough mental energy to cast spells.")
    return _fail(f'You don\'t know a spell called "{command.noun}".')


def _cmd_rest(world: World, session: GameSession, command: ParsedCommand) -> CommandResult:
    """Handle REST: recover some HP and MP outside combat."""
    if session.in_combat:
        return _fail("You can't rest during combat!")
    player = session.player
    config = world.config
    hp_recovered = min(config.rest_hp_recovery, player.max_hp - player.hp)
    mp_recovered = min(config.rest_mp_recovery, player.max_mp - player.mp)
    player.hp += hp_recovered
    player.mp += mp_recovered
    return CommandResult(
        True,
        f"You rest for a while.\nHP recovered: {hp_recovered}\nMP recovered: {mp_recovered}",
        state_changes={"hp": player.hp, "mp": player.mp},
    )


def _cmd_help(world: World, session: GameSession, command: ParsedCommand) -> CommandResult:
    return CommandResult(True, HELP_TEXT)


def _cmd_restart(world: World, session: GameSession, command: ParsedCommand) -> CommandResult:
    """Handle RESTART: a fresh player and a reset of the shared world."""
    start = world.config.starting_room
    start_room = world.require_room(start)

    session.player = create_new_player(session.player.name, start, world.config)
    session.in_combat = False
    session.current_enemy = None
    # Every connected player sees this
    world.reset_rooms()
    logger.warning("world_restarted", rooms=len(world.rooms))

    description = get_room_description(world, start_room, session.player)
    return CommandResult(
        True,
        "Game restarted. You awaken once again...\n\n" + description,
        room_changed=True,
        state_changes={
            "inventory": session.player.inventory,
            "location": start,
            "visited_rooms": session.player.visited_rooms,
        },
    )


def _cmd_equip(world: World, session: GameSession, command: ParsedCommand) -> CommandResult:
    player = session.player
    if not command.noun:
        return _fail("Equip what?")
    outcome = equip(player, command.noun)
    if not outcome.success:
        return _fail(outcome.message)
    return CommandResult(
        True,
        outcome.message,
        state_changes={"inventory": player.inventory, "equipped_items": player.equipped_items},
    )


def _cmd_unequip(world: World, session: GameSession, command: ParsedCommand) -> CommandResult:
    player = session.player
    if not command.noun:
        return _fail("Unequip what?")
    outcome = unequip(world, player, command.noun)
    if not outcome.success:
        return _fail(outcome.message)
    return CommandResult(
        True,
        outcome.message,
        state_changes={"inventory": player.inventory, "equipped_items": player.equipped_items},
    )


_VERB_DISPATCH: dict[str, Callable[[World, GameSession, ParsedCommand], CommandResult]] = {
    **dict.fromkeys(("look", "examine"), _cmd_look),
    "go": _cmd_go,
    "take": _cmd_take,
    "drop": _cmd_drop,
    "inventory": _cmd_inventory,
    "use": _cmd_use,
    "turn": _cmd_turn,
    "light": _cmd_light,
    "extinguish": _cmd_extinguish,
    "open": _cmd_open,
    "close": _cmd_close,
    "attack": _cmd_attack,
    "cast": _cmd_cast,
    "rest": _cmd_rest,
    "help": _cmd_help,
    "restart": _cmd_restart,
    "equip": _cmd_equip,
    "unequip": _cmd_unequip,
}


def process_command(world: World, session: GameSession, raw_input: str) -> CommandResult:
    """Process one line of player input and return exactly one result."""
    command = parse_command(raw_input)
    if not command.valid:
        return _fail(command.error_message or "I don't understand that command.")

    handler = _VERB_DISPATCH.get(command.verb)
    if handler is None:
        return _fail(f'I don\'t know how to "{command.verb}".')

    with command_context(session.id, command.verb), world.lock:
        try:
            result = handler(world, session, command)
        except WorldIntegrityError as e:
            logger.error("internal_error", raw_input=raw_input, error=str(e))
            return _fail(INTERNAL_ERROR_MESSAGE)

        logger.debug(
            "command_processed", noun=command.noun, success=result.success,
        )
    return result
