"""Mutable per-player game state.

Everything here is plain data (strings, numbers, lists, dicts) with no World
references, so it can be pickled for per-player persistence or turned into
JSON for a transport to hand back later.
"""

from dataclasses import asdict, dataclass, field
from typing import Any

# Starting room for new and restarted games
START_ROOM = "ROOM_001"

BASE_STAT = 10


@dataclass
class GameConfig:
    """Game balance numbers."""

    max_inventory_weight: int = 100
    base_hp: int = 100
    base_mp: int = 50
    xp_per_level: int = 1000
    death_hp_penalty: int = 20
    death_mp_penalty: int = 10
    rest_hp_recovery: int = 25
    rest_mp_recovery: int = 15
    starting_room: str = START_ROOM
    base_stat: int = BASE_STAT


@dataclass
class InventoryItem:
    id: str
    name: str
    description: str = ""
    quantity: int = 1
    equippable: bool = False
    equipment_slot: str | None = None
    usable: bool = True
    weight: int = 1


@dataclass
class StatusEffect:
    id: str
    name: str
    duration: int = 0
    effects: dict[str, int] = field(default_factory=dict)


@dataclass
class PlayerState:
    """All mutable per-player state."""

    name: str
    location: str = START_ROOM
    gold: int = 0
    hp: int = 100
    max_hp: int = 100
    mp: int = 50
    max_mp: int = 50
    xp: int = 0
    level: int = 1
    stats: dict[str, int] = field(default_factory=dict)
    inventory: list[InventoryItem] = field(default_factory=list)
    # slot → item id; a slot is either absent or holds exactly one id
    equipped_items: dict[str, str] = field(default_factory=dict)
    status_effects: list[StatusEffect] = field(default_factory=list)
    skills: list[str] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    visited_rooms: list[str] = field(default_factory=list)
    # Narrative gates and per-item switches such as "flashlight_on"
    flags: dict[str, bool] = field(default_factory=dict)

    def find_item(self, noun: str) -> InventoryItem | None:
        """Inventory entry by exact id or by a name containing noun."""
        noun = noun.lower()
        for item in self.inventory:
            if item.id.lower() == noun or noun in item.name.lower():
                return item
        return None

    def has_item(self, item_id: str) -> bool:
        return any(item.id == item_id for item in self.inventory)

    def carried_weight(self) -> int:
        return sum(item.weight * item.quantity for item in self.inventory)

    def mark_visited(self, room_id: str) -> None:
        if room_id not in self.visited_rooms:
            self.visited_rooms.append(room_id)


@dataclass
class GameSession:
    """One connected player: their state plus transient combat context."""

    id: str
    player: PlayerState
    in_combat: bool = False
    current_enemy: str | None = None


def create_new_player(
    name: str, starting_room: str = START_ROOM, config: GameConfig | None = None
) -> PlayerState:
    """Create a fresh player with the configured defaults."""
    config = config or GameConfig()
    return PlayerState(
        name=name,
        location=starting_room,
        hp=config.base_hp,
        max_hp=config.base_hp,
        mp=config.base_mp,
        max_mp=config.base_mp,
        stats={
            "Physical": config.base_stat,
            "Mental": config.base_stat,
            "Resilience": config.base_stat,
        },
    )


def serialize_player(player: PlayerState) -> dict[str, Any]:
    """Convert a player into JSON-safe primitives."""
    return asdict(player)


def restore_player(data: dict[str, Any]) -> PlayerState:
    """Rebuild a player from serialize_player output."""
    data = dict(data)
    data["inventory"] = [InventoryItem(**item) for item in data.get("inventory", [])]
    data["status_effects"] = [
        StatusEffect(**effect) for effect in data.get("status_effects", [])
    ]
    return PlayerState(**data)
