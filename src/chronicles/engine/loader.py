"""Build Room objects from JSON room records.

A data directory holds one or more ``*.json`` files under ``rooms/``. Each
file contains either a list of room records, a ``{"room": {...}}`` wrapper, a
``{"rooms": [...]}`` wrapper, or a single bare record. Records use the
camelCase keys of the content files; everything but ``identity.id`` is
optional.
"""

import json
from pathlib import Path
from typing import Any

from ..logging import get_logger
from .world import (
    FLAG_HOOK_ACTIONS,
    DarknessBehavior,
    ExitRequirement,
    Room,
    RoomDescriptions,
    RoomEnvironment,
    RoomExit,
    RoomHook,
    RoomHooks,
    RoomIdentity,
    RoomLighting,
    RoomNPC,
    RoomObject,
    RoomProgression,
    World,
)

logger = get_logger(__name__)

Record = dict[str, Any]


class RoomDataError(ValueError):
    """Raised when a room record cannot be turned into a Room."""


def _parse_identity(record: Record) -> RoomIdentity:
    identity = record.get("identity") or {}
    room_id = identity.get("id") or record.get("id")
    if not room_id:
        raise RoomDataError("room record has no identity.id")
    return RoomIdentity(
        id=room_id,
        canonical_name=identity.get("canonicalName", ""),
        aliases=list(identity.get("aliases", [])),
        region=identity.get("region", ""),
        zone=identity.get("zone", ""),
    )


def _parse_descriptions(data: Record) -> RoomDescriptions:
    descriptions = RoomDescriptions(
        initial=data.get("initial", ""),
        long=data.get("long", ""),
        short=data.get("short", ""),
        visited=data.get("visited", ""),
        dynamic_variants=dict(data.get("dynamicVariants", {})),
    )
    if data.get("dark"):
        descriptions.dark = data["dark"]
    # Rooms often only author one or two variants
    descriptions.long = descriptions.long or descriptions.initial
    descriptions.initial = descriptions.initial or descriptions.long
    return descriptions


def _parse_lighting(data: Record) -> RoomLighting:
    darkness = data.get("darknessBehavior", {})
    return RoomLighting(
        is_lit=data.get("isLit", True),
        light_sources_allowed=data.get("lightSourcesAllowed", True),
        darkness_behavior=DarknessBehavior(
            grue_enabled=darkness.get("grueEnabled", False),
            suppress_exits=darkness.get("suppressExits", True),
            suppress_objects=darkness.get("suppressObjects", True),
        ),
    )


def _parse_environment(data: Record) -> RoomEnvironment:
    return RoomEnvironment(
        terrain=data.get("terrain", ""),
        features=list(data.get("features", [])),
        hazards=list(data.get("hazards", [])),
        ambient_sounds=list(data.get("ambientSounds", [])),
        ambient_smells=list(data.get("ambientSmells", [])),
    )


def _parse_exit(data: Record) -> RoomExit:
    requires = data.get("requires")
    requirement = None
    if requires:
        requirement = ExitRequirement(
            type=requires["type"], id=requires["id"], value=requires.get("value"),
        )
    return RoomExit(
        to=data["to"],
        visible=data.get("visible", True),
        one_way=data.get("oneWay", False),
        requires=requirement,
        blocked_message=data.get("blockedMessage"),
        travel_text=data.get("travelText") or "",
    )


def _parse_object(data: Record) -> RoomObject:
    return RoomObject(
        id=data["id"],
        name=data.get("name", data["id"]),
        description=data.get("description", ""),
        examine_text=data.get("examineText", ""),
        synonyms=list(data.get("synonyms", [])),
        initial_location=data.get("initialLocation", "room"),
        visibility=data.get("visibility", "always"),
        requires_light=data.get("requiresLight", False),
        takeable=data.get("takeable", False),
        taken=data.get("taken", False),
        interactable=data.get("interactable", False),
        equipment_slot=data.get("equipmentSlot"),
        state_changes=dict(data.get("stateChanges", {})),
    )


def _parse_npc(data: Record) -> RoomNPC:
    return RoomNPC(
        id=data["id"],
        name=data.get("name", data["id"]),
        description=data.get("description", ""),
        hostile=data.get("hostile", False),
        spawn_conditions=list(data.get("spawnConditions", [])),
        despawn_conditions=list(data.get("despawnConditions", [])),
        behavior=data.get("behavior", ""),
        dialogue=dict(data.get("dialogue", {})),
    )


def _parse_hook(data: Record) -> RoomHook:
    hook = RoomHook(
        condition=data.get("condition", "always"),
        action=data["action"],
        params=dict(data.get("params", {})),
    )
    if hook.action in FLAG_HOOK_ACTIONS and not hook.params.get("flag"):
        raise KeyError(f"{hook.action}.params.flag")
    return hook


def _parse_hooks(data: Record) -> RoomHooks:
    def hooks(key: str) -> list[RoomHook]:
        return [_parse_hook(h) for h in data.get(key, [])]

    return RoomHooks(
        on_enter=hooks("onEnter"), on_exit=hooks("onExit"), on_look=hooks("onLook"),
    )


def _parse_progression(data: Record) -> RoomProgression:
    return RoomProgression(
        required_for_completion=data.get("requiredForCompletion", False),
        unlocks_regions=list(data.get("unlocksRegions", [])),
        shortcut_created=data.get("shortcutCreated"),
    )


def room_from_record(record: Record) -> Room:
    """Turn one content record into a Room."""
    identity = _parse_identity(record)
    try:
        state = {k: bool(v) for k, v in record.get("state", {}).items()}
        return Room(
            identity=identity,
            descriptions=_parse_descriptions(record.get("descriptions", {})),
            lighting=_parse_lighting(record.get("lighting", {})),
            environment=_parse_environment(record.get("environment", {})),
            exits={
                direction.lower(): _parse_exit(exit_data)
                for direction, exit_data in record.get("exits", {}).items()
            },
            objects=[_parse_object(o) for o in record.get("objects", [])],
            npcs=[_parse_npc(n) for n in record.get("npcs", [])],
            state=state,
            hooks=_parse_hooks(record.get("hooks", {})),
            progression=_parse_progression(record.get("progression", {})),
        )
    except KeyError as e:
        raise RoomDataError(f"room {identity.id}: missing field {e}") from e


def _unwrap(data: Any) -> list[Record]:
    if isinstance(data, list):
        return data
    if "rooms" in data:
        return list(data["rooms"])
    if "room" in data:
        return [data["room"]]
    return [data]


def read_room_records(data_dir: Path) -> list[Record]:
    """Read every room record under data_dir/rooms, in file name order."""
    rooms_dir = Path(data_dir) / "rooms"
    records: list[Record] = []
    for path in sorted(rooms_dir.glob("*.json")):
        with path.open(encoding="utf-8") as f:
            records.extend(_unwrap(json.load(f)))
        logger.debug("room_file_read", file=path.name, total=len(records))
    return records


def load_room_records(world: World, records: list[Record]) -> None:
    """Convert records and bulk-load them into the world."""
    world.load_rooms([room_from_record(r) for r in records])
    logger.info(
        "rooms_loaded", rooms=len(world.rooms), objects=len(world.object_index),
    )


def load_world(data_dir: Path) -> World:
    """Create a World from a content directory."""
    world = World()
    load_room_records(world, read_room_records(data_dir))
    return world
