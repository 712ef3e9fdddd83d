"""Data structures for the shared game world.

Rooms are loaded once at startup and shared across all players. Unlike the
player state they are mutated in place (object ``taken`` flags, room state
flags) and only an explicit restart puts them back.
"""

import threading
from dataclasses import dataclass, field

from .state import GameConfig

# Equipment slots a player can fill
EQUIPMENT_SLOTS = ("weapon", "armor", "accessory", "light_source")
LIGHT_SLOT = "light_source"

# Hook actions that write params["flag"] into one of the flag scopes
FLAG_HOOK_ACTIONS = ("set_room_state", "set_world_state", "set_player_flag")


class WorldIntegrityError(Exception):
    """Raised when the world refers to a room or object that was never loaded."""


@dataclass(frozen=True)
class ExitRequirement:
    """A single gate on an exit: item, state, skill or stat."""

    type: str
    id: str
    value: int | None = None


@dataclass
class RoomExit:
    """A directed, optionally gated connection to another room."""

    to: str
    visible: bool = True
    one_way: bool = False
    requires: ExitRequirement | None = None
    blocked_message: str | None = None
    travel_text: str = ""


@dataclass
class RoomObject:
    """An object placed in a room. Ids are unique across the whole world."""

    id: str
    name: str
    description: str = ""
    examine_text: str = ""
    synonyms: list[str] = field(default_factory=list)
    initial_location: str = "room"  # room, container, hidden
    visibility: str = "always"  # always, conditional, hidden
    requires_light: bool = False
    takeable: bool = False
    taken: bool = False
    interactable: bool = False
    equipment_slot: str | None = None
    state_changes: dict[str, str] = field(default_factory=dict)

    def matches(self, noun: str) -> bool:
        """Match by exact id, or by name/synonym containing the noun."""
        noun = noun.lower()
        if self.id.lower() == noun:
            return True
        if noun in self.name.lower():
            return True
        return any(noun in synonym.lower() for synonym in self.synonyms)


@dataclass
class RoomNPC:
    """A non-player character whose presence is computed from predicates."""

    id: str
    name: str
    description: str = ""
    hostile: bool = False
    spawn_conditions: list[str] = field(default_factory=list)
    despawn_conditions: list[str] = field(default_factory=list)
    behavior: str = ""
    dialogue: dict[str, str] = field(default_factory=dict)

    def matches(self, noun: str) -> bool:
        noun = noun.lower()
        return self.id.lower() == noun or noun in self.name.lower()


@dataclass
class RoomHook:
    """A declarative enter/exit/look trigger interpreted by the engine."""

    condition: str = "always"
    action: str = ""
    params: dict = field(default_factory=dict)


@dataclass
class RoomIdentity:
    id: str
    canonical_name: str = ""
    aliases: list[str] = field(default_factory=list)
    region: str = ""
    zone: str = ""


@dataclass
class RoomDescriptions:
    initial: str = ""
    long: str = ""
    short: str = ""
    visited: str = ""
    dark: str = "It is pitch dark. You can't see a thing."
    # Insertion order is significant: the first set flag wins.
    dynamic_variants: dict[str, str] = field(default_factory=dict)


@dataclass
class DarknessBehavior:
    grue_enabled: bool = False
    suppress_exits: bool = True
    suppress_objects: bool = True


@dataclass
class RoomLighting:
    is_lit: bool = True
    light_sources_allowed: bool = True
    darkness_behavior: DarknessBehavior = field(default_factory=DarknessBehavior)


@dataclass
class RoomEnvironment:
    terrain: str = ""
    features: list[str] = field(default_factory=list)
    hazards: list[str] = field(default_factory=list)
    ambient_sounds: list[str] = field(default_factory=list)
    ambient_smells: list[str] = field(default_factory=list)


@dataclass
class RoomHooks:
    on_enter: list[RoomHook] = field(default_factory=list)
    on_exit: list[RoomHook] = field(default_factory=list)
    on_look: list[RoomHook] = field(default_factory=list)


@dataclass
class RoomProgression:
    required_for_completion: bool = False
    unlocks_regions: list[str] = field(default_factory=list)
    shortcut_created: str | None = None


@dataclass
class Room:
    """A node in the world graph."""

    identity: RoomIdentity
    descriptions: RoomDescriptions = field(default_factory=RoomDescriptions)
    lighting: RoomLighting = field(default_factory=RoomLighting)
    environment: RoomEnvironment = field(default_factory=RoomEnvironment)
    exits: dict[str, RoomExit] = field(default_factory=dict)
    objects: list[RoomObject] = field(default_factory=list)
    npcs: list[RoomNPC] = field(default_factory=list)
    state: dict[str, bool] = field(default_factory=lambda: {"visited": False})
    hooks: RoomHooks = field(default_factory=RoomHooks)
    progression: RoomProgression = field(default_factory=RoomProgression)

    def __post_init__(self) -> None:
        self.state.setdefault("visited", False)

    @property
    def id(self) -> str:
        return self.identity.id

    def find_object(self, noun: str) -> RoomObject | None:
        for obj in self.objects:
            if obj.matches(noun):
                return obj
        return None


@dataclass
class World:
    """The room store plus the global world-state flags.

    World-state flags live here, room state on each Room and player flags on
    the PlayerState: three separate maps, never merged.
    """

    rooms: dict[str, Room] = field(default_factory=dict)
    world_state: dict[str, bool] = field(default_factory=dict)
    # Flat object id → definition registry, rebuilt on every load
    object_index: dict[str, RoomObject] = field(default_factory=dict)
    config: GameConfig = field(default_factory=GameConfig)
    lock: threading.RLock = field(
        default_factory=threading.RLock, repr=False, compare=False
    )

    def load_rooms(self, rooms: list[Room]) -> None:
        """Bulk load rooms. Later entries with the same id replace earlier ones."""
        for room in rooms:
            self.rooms[room.id] = room
        self._reindex_objects()

    def _reindex_objects(self) -> None:
        self.object_index = {}
        for room in self.rooms.values():
            for obj in room.objects:
                self.object_index[obj.id] = obj

    def get_room(self, room_id: str) -> Room | None:
        return self.rooms.get(room_id)

    def require_room(self, room_id: str) -> Room:
        """Look up a room that must exist; a miss means dangling data."""
        room = self.rooms.get(room_id)
        if room is None:
            raise WorldIntegrityError(f"room {room_id!r} is not loaded")
        return room

    def find_object(self, object_id: str) -> RoomObject | None:
        """Static definition for an object id, from any loaded room."""
        return self.object_index.get(object_id)

    def get_world_state(self, key: str) -> bool:
        return self.world_state.get(key, False)

    def set_world_state(self, key: str, value: bool) -> None:
        self.world_state[key] = value

    def reset_rooms(self) -> None:
        """Clear every taken flag and visited flag across all loaded rooms."""
        for room in self.rooms.values():
            for obj in room.objects:
                obj.taken = False
            room.state["visited"] = False
