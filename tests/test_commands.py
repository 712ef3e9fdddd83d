"""Tests for the command router and its handlers."""

from chronicles.engine.commands import (
    HELP_TEXT,
    INTERNAL_ERROR_MESSAGE,
    end_combat,
    get_room_description,
    process_command,
    state_snapshot,
)
from chronicles.engine.state import GameSession
from chronicles.engine.world import RoomHook, World


def _run(world: World, session: GameSession, *commands: str):
    """Run commands in order and return the last result."""
    result = None
    for command in commands:
        result = process_command(world, session, command)
    return result


def test_invalid_input(test_world: World, session: GameSession):
    result = process_command(test_world, session, "   ")
    assert not result.success
    assert result.message == "Please enter a command."


def test_unknown_word(test_world: World, session: GameSession):
    result = process_command(test_world, session, "xyzzy")
    assert not result.success
    assert "xyzzy" in result.message


def test_known_verb_without_handler(test_world: World, session: GameSession):
    """Verbs the parser knows but no handler implements are refused by name."""
    result = process_command(test_world, session, "climb rope")
    assert not result.success
    assert result.message == 'I don\'t know how to "climb".'


# --- look / examine ---


def test_look_first_time_shows_initial_text(test_world: World, session: GameSession):
    result = process_command(test_world, session, "look")
    assert result.success
    assert result.message.startswith("ROOM_001 initial.")
    assert "You can see: rusty_key, flashlight, lantern, short sword" in result.message
    assert "gem" not in result.message
    assert "Exits: north, east, west" in result.message
    assert "secret" not in result.message


def test_look_in_the_dark(test_world: World, session: GameSession):
    session.player.location = "ROOM_002"
    result = process_command(test_world, session, "look")
    assert result.message == "ROOM_002 dark."


def test_examine_by_synonym(test_world: World, session: GameSession):
    result = process_command(test_world, session, "examine blade")
    assert result.success
    assert result.message == "A short sword."


def test_examine_teaches_skill_once(test_world: World, session: GameSession):
    first = process_command(test_world, session, "x mural")
    assert "climber" in first.message
    assert first.state_changes == {"skills": ["climbing"]}
    assert session.player.skills == ["climbing"]

    second = process_command(test_world, session, "x mural")
    assert second.success
    assert second.state_changes is None
    assert session.player.skills == ["climbing"]


def test_examine_inventory_item(test_world: World, session: GameSession):
    _run(test_world, session, "take rock")
    test_world.get_room("ROOM_001").objects.clear()
    result = process_command(test_world, session, "examine rock")
    assert result.message == "A plain rock."


def test_examine_missing(test_world: World, session: GameSession):
    result = process_command(test_world, session, "look at unicorn")
    assert not result.success
    assert result.message == 'You don\'t see any "unicorn" here.'


# --- movement ---


def test_go_requires_direction(test_world: World, session: GameSession):
    assert process_command(test_world, session, "go").message == "Go where?"


def test_go_unknown_exit(test_world: World, session: GameSession):
    result = process_command(test_world, session, "go south")
    assert not result.success
    assert result.message == "You can't go that way."
    assert session.player.location == "ROOM_001"


def test_go_blocked_by_gate(test_world: World, session: GameSession):
    result = process_command(test_world, session, "east")
    assert not result.success
    assert result.message == "You can't go that way."
    assert session.player.location == "ROOM_001"
    assert session.player.visited_rooms == []


def test_go_records_visits_once(test_world: World, session: GameSession):
    test_world.set_world_state("gate_open", True)

    first = process_command(test_world, session, "go secret")
    assert first.success
    assert first.room_changed
    assert first.message.startswith("ROOM_003 initial.")

    _run(test_world, session, "north", "go secret")
    again = process_command(test_world, session, "look")
    assert session.player.location == "ROOM_003"
    assert session.player.visited_rooms == ["ROOM_003", "ROOM_001"]
    assert test_world.get_room("ROOM_003").state["visited"]
    assert again.message.startswith("ROOM_003 long.")


def test_revisit_shows_visited_text(test_world: World, session: GameSession):
    test_world.set_world_state("gate_open", True)
    result = _run(test_world, session, "go secret", "north", "go secret")
    assert result.message.startswith("ROOM_003 visited.")


def test_dark_room_ambush(test_world: World, session: GameSession):
    result = process_command(test_world, session, "north")
    assert result.success
    assert result.combat_triggered
    assert result.message == "ROOM_002 dark.\n\n**Crawler attacks!**"
    assert session.in_combat
    assert session.current_enemy == "crawler"


def test_no_escape_while_fighting(test_world: World, session: GameSession):
    _run(test_world, session, "north")
    result = process_command(test_world, session, "south")
    assert not result.success
    assert session.player.location == "ROOM_002"

    end_combat(session)
    assert process_command(test_world, session, "south").success
    assert session.player.location == "ROOM_001"


def test_light_keeps_crawler_away(test_world: World, session: GameSession):
    _run(test_world, session, "take flashlight", "equip flashlight", "turn on flashlight")
    result = process_command(test_world, session, "north")
    assert result.success
    assert not result.combat_triggered
    assert not session.in_combat
    assert result.message.startswith("ROOM_002 long.")
    assert "You can see: coin" in result.message
    assert "A moth circles the light." in result.message
    assert "crawler" not in result.message.lower()


def test_dangling_exit_rolls_back(test_world: World, session: GameSession):
    result = process_command(test_world, session, "west")
    assert not result.success
    assert result.message == INTERNAL_ERROR_MESSAGE
    assert session.player.location == "ROOM_001"
    assert "ROOM_404" not in session.player.visited_rooms


def test_missing_current_room(test_world: World, session: GameSession):
    session.player.location = "ROOM_999"
    result = process_command(test_world, session, "look")
    assert result.message == INTERNAL_ERROR_MESSAGE


# --- items ---


def test_take_key_opens_gate(test_world: World, session: GameSession):
    result = process_command(test_world, session, "take the key")
    assert result.success
    assert result.message == "You take the rusty_key."
    assert test_world.find_object("rusty_key").taken
    assert "rusty_key" not in process_command(test_world, session, "look").message

    again = process_command(test_world, session, "take key")
    assert not again.success
    assert again.message == 'You can\'t take "key".'

    assert process_command(test_world, session, "east").success
    assert session.player.location == "ROOM_003"


def test_take_fixed_object(test_world: World, session: GameSession):
    result = process_command(test_world, session, "take statue")
    assert not result.success
    assert session.player.inventory == []


def test_take_over_weight_limit(test_world: World, session: GameSession):
    test_world.config.max_inventory_weight = 1
    assert process_command(test_world, session, "take key").success
    result = process_command(test_world, session, "take rock")
    assert not result.success
    assert "carry" in result.message
    assert not test_world.find_object("rock").taken


def test_drop_does_not_return_item_to_room(test_world: World, session: GameSession):
    _run(test_world, session, "take rock")
    result = process_command(test_world, session, "drop rock")
    assert result.success
    assert session.player.inventory == []
    assert test_world.find_object("rock").taken


def test_inventory_lists_equipment(test_world: World, session: GameSession):
    assert process_command(test_world, session, "i").message == "You are carrying nothing."
    result = _run(test_world, session, "take rock", "take sword", "wield sword", "inventory")
    assert "  - rock" in result.message
    assert "Equipped:\n  - short sword (weapon)" in result.message


def test_use_item(test_world: World, session: GameSession):
    assert not process_command(test_world, session, "use rock").success
    result = _run(test_world, session, "take rock", "use rock")
    assert result.message == "You use the rock."


# --- equipment and light ---


def test_equip_and_unequip(test_world: World, session: GameSession):
    _run(test_world, session, "take flashlight")
    result = process_command(test_world, session, "equip flashlight")
    assert result.success
    assert result.state_changes["equipped_items"] == {"light_source": "flashlight"}

    result = process_command(test_world, session, "unequip torch")
    assert result.success
    assert session.player.equipped_items == {}
    assert [i.id for i in session.player.inventory] == ["flashlight"]


def test_unequip_without_definition(test_world: World, session: GameSession):
    session.player.equipped_items["weapon"] = "ghost_blade"
    result = process_command(test_world, session, "unequip ghost_blade")
    assert not result.success
    assert result.message == INTERNAL_ERROR_MESSAGE


def test_light_needs_equipped_source(test_world: World, session: GameSession):
    _run(test_world, session, "take flashlight")
    result = process_command(test_world, session, "turn on flashlight")
    assert not result.success
    assert result.message.startswith("You need to equip a light source first")


def test_light_twice(test_world: World, session: GameSession):
    _run(test_world, session, "take flashlight", "equip flashlight")
    first = process_command(test_world, session, "turn on flashlight")
    assert first.success
    assert session.player.flags["flashlight_on"]
    # Room 1 is lit, so no description follows
    assert first.message == "You turn on the flashlight. A bright beam illuminates the area."

    second = process_command(test_world, session, "light flashlight")
    assert not second.success
    assert second.message == "The light is already on."


def test_lighting_a_dark_room_describes_it(test_world: World, session: GameSession):
    _run(test_world, session, "take flashlight", "equip flashlight", "north")
    result = process_command(test_world, session, "turn flashlight on")
    assert result.success
    assert "ROOM_002 long." in result.message
    assert "You can see: coin" in result.message


def test_extinguish(test_world: World, session: GameSession):
    _run(test_world, session, "take flashlight", "equip flashlight")
    assert process_command(test_world, session, "turn off flashlight").message == (
        "The light is not on."
    )
    _run(test_world, session, "turn on flashlight")
    result = process_command(test_world, session, "extinguish torch")
    assert result.success
    assert not session.player.flags["flashlight_on"]


def test_turn_needs_direction(test_world: World, session: GameSession):
    assert process_command(test_world, session, "turn flashlight").message == (
        "Turn what on or off?"
    )


# --- combat, rest, help ---


def test_attack_outside_combat(test_world: World, session: GameSession):
    result = process_command(test_world, session, "attack")
    assert not result.success
    assert result.message == "There's nothing to attack here."


def test_attack_in_combat(test_world: World, session: GameSession):
    _run(test_world, session, "north")
    result = process_command(test_world, session, "hit crawler")
    assert result.success
    assert result.combat_triggered


def test_rest_recovers(test_world: World, session: GameSession):
    session.player.hp = 50
    session.player.mp = 45
    result = process_command(test_world, session, "rest")
    assert result.success
    assert session.player.hp == 75
    assert session.player.mp == 50
    assert "HP recovered: 25" in result.message
    assert "MP recovered: 5" in result.message


def test_rest_refused_in_combat(test_world: World, session: GameSession):
    _run(test_world, session, "north")
    session.player.hp = 10
    result = process_command(test_world, session, "rest")
    assert not result.success
    assert session.player.hp == 10


def test_help(test_world: World, session: GameSession):
    assert process_command(test_world, session, "help").message == HELP_TEXT


def test_cast_unknown_spell(test_world: World, session: GameSession):
    result = process_command(test_world, session, "cast fireball")
    assert not result.success
    assert "fireball" in result.message


# --- restart ---


def test_restart_resets_player_and_rooms(test_world: World, session: GameSession):
    test_world.set_world_state("gate_open", True)
    _run(test_world, session, "take key", "x mural", "east")
    session.player.hp = 3

    result = process_command(test_world, session, "restart")
    assert result.success
    assert result.room_changed
    assert result.message.startswith("Game restarted.")
    assert "ROOM_001 initial." in result.message

    player = session.player
    assert player.name == "Tester"
    assert player.location == "ROOM_001"
    assert player.hp == player.max_hp
    assert player.inventory == []
    assert player.skills == []
    assert player.visited_rooms == []
    assert not test_world.find_object("rusty_key").taken
    assert not test_world.get_room("ROOM_003").state["visited"]
    # Flags other than visited survive a restart
    assert test_world.get_room("ROOM_001").state["climbing"]
    assert test_world.get_world_state("gate_open")


def test_restart_ends_combat(test_world: World, session: GameSession):
    _run(test_world, session, "north")
    _run(test_world, session, "restart")
    assert not session.in_combat
    assert session.current_enemy is None


# --- hooks ---


def test_enter_and_exit_hooks(test_world: World, session: GameSession):
    start = test_world.get_room("ROOM_001")
    vault = test_world.get_room("ROOM_003")
    test_world.set_world_state("gate_open", True)
    start.hooks.on_exit.append(
        RoomHook(action="message", params={"text": "You leave the start."})
    )
    vault.hooks.on_enter.extend([
        RoomHook(condition="first_visit", action="message", params={"text": "Dust swirls."}),
        RoomHook(action="set_room_state", params={"flag": "disturbed"}),
        RoomHook(action="set_player_flag", params={"flag": "found_vault"}),
        RoomHook(action="set_world_state", params={"flag": "vault_seen"}),
        RoomHook(action="explode"),
    ])

    result = process_command(test_world, session, "go secret")
    assert result.message.startswith("You leave the start.\n\nDust swirls.\n\nROOM_003 initial.")
    assert vault.state["disturbed"]
    assert session.player.flags["found_vault"]
    assert test_world.get_world_state("vault_seen")

    result = _run(test_world, session, "north", "go secret")
    assert "Dust swirls." not in result.message


def test_hook_conditions_use_flag_scopes(test_world: World, session: GameSession):
    start = test_world.get_room("ROOM_001")
    start.hooks.on_look.append(
        RoomHook(condition="world:alarm", action="message", params={"text": "Sirens!"})
    )
    assert "Sirens!" not in process_command(test_world, session, "look").message
    test_world.set_world_state("alarm", True)
    assert process_command(test_world, session, "look").message.endswith("Sirens!")


# --- read-only helpers ---


def test_room_description_with_own_light(test_world: World, session: GameSession):
    room = test_world.get_room("ROOM_002")
    player = session.player
    assert get_room_description(test_world, room, player) == "ROOM_002 dark."

    player.equipped_items["light_source"] = "lantern"
    player.flags["lantern_on"] = True
    desc = get_room_description(test_world, room, player)
    assert desc.startswith("ROOM_002 long.")
    assert "Exits: south, up, down" in desc


def test_dynamic_variant_wins(test_world: World, session: GameSession):
    room = test_world.get_room("ROOM_001")
    room.descriptions.dynamic_variants["flooded"] = "Water fills the room."
    room.state["flooded"] = True
    desc = get_room_description(test_world, room, session.player, verbose=True)
    assert desc.startswith("Water fills the room.")


def test_state_snapshot(test_world: World, session: GameSession):
    snapshot = state_snapshot(test_world, session)
    assert snapshot["in_combat"] is False
    assert snapshot["player"]["name"] == "Tester"
    assert snapshot["room"]["id"] == "ROOM_001"
    assert snapshot["room"]["is_lit"] is True


def test_hook_without_flag_rolls_back_move(test_world: World, session: GameSession):
    vault = test_world.get_room("ROOM_003")
    vault.hooks.on_enter.extend([
        RoomHook(action="message", params={"text": "Dust swirls."}),
        RoomHook(action="set_room_state", params={"value": True}),
    ])

    result = process_command(test_world, session, "go secret")
    assert not result.success
    assert result.message == INTERNAL_ERROR_MESSAGE
    assert session.player.location == "ROOM_001"
    assert session.player.visited_rooms == []
    assert not vault.state["visited"]


def test_look_hooks_stay_silent_in_the_dark(test_world: World, session: GameSession):
    dark = test_world.get_room("ROOM_002")
    dark.hooks.on_look.append(
        RoomHook(action="message", params={"text": "A draught stirs."})
    )
    session.player.location = "ROOM_002"
    assert process_command(test_world, session, "look").message == "ROOM_002 dark."

    session.player.equipped_items["light_source"] = "lantern"
    session.player.flags["lantern_on"] = True
    assert process_command(test_world, session, "look").message.endswith("A draught stirs.")
