"""Moving items between the inventory and equipment slots.

Equipped items leave the inventory list, so getting one back means
rebuilding its inventory entry from the static object definition held by
the World.
"""

from dataclasses import dataclass

from .state import InventoryItem, PlayerState
from .world import LIGHT_SLOT, RoomObject, World, WorldIntegrityError


@dataclass(frozen=True)
class EquipOutcome:
    success: bool
    message: str
    item_id: str | None = None
    slot: str | None = None


def item_from_object(obj: RoomObject) -> InventoryItem:
    """Fresh inventory entry (quantity 1) for a room object."""
    return InventoryItem(
        id=obj.id,
        name=obj.name,
        description=obj.description,
        quantity=1,
        equippable=obj.equipment_slot is not None,
        equipment_slot=obj.equipment_slot,
        usable=True,
        weight=1,
    )


def equip(player: PlayerState, noun: str) -> EquipOutcome:
    """Move an inventory item into its slot. Never swaps."""
    item = player.find_item(noun)
    if item is None:
        return EquipOutcome(False, f'You don\'t have "{noun}".')
    if not item.equippable or not item.equipment_slot:
        return EquipOutcome(False, f"You can't equip the {item.name}.")

    slot = item.equipment_slot
    if player.equipped_items.get(slot):
        return EquipOutcome(
            False,
            f"You already have something equipped in the {slot} slot. "
            "Unequip it first.",
        )

    player.inventory.remove(item)
    player.equipped_items[slot] = item.id
    return EquipOutcome(True, f"You equip the {item.name}.", item.id, slot)


def find_equipped(world: World, player: PlayerState, noun: str) -> tuple[str, RoomObject] | None:
    """Slot and definition of the equipped item matching noun.

    Raises WorldIntegrityError if noun names an equipped id that has no
    definition in any loaded room.
    """
    for slot, item_id in player.equipped_items.items():
        obj = world.find_object(item_id)
        if obj is None:
            if item_id.lower() == noun.lower():
                raise WorldIntegrityError(f"no definition for equipped item {item_id!r}")
            continue
        if obj.matches(noun):
            return slot, obj
    return None


def unequip(world: World, player: PlayerState, noun: str) -> EquipOutcome:
    """Return an equipped item to the inventory and clear its slot."""
    found = find_equipped(world, player, noun)
    if found is None:
        return EquipOutcome(False, f'You don\'t have "{noun}" equipped.')
    slot, obj = found

    item = item_from_object(obj)
    item.equippable = True
    player.inventory.append(item)
    del player.equipped_items[slot]
    return EquipOutcome(True, f"You unequip the {obj.name}.", obj.id, slot)


def equipped_light(world: World, player: PlayerState, noun: str) -> RoomObject | None:
    """Definition of the light source in use if it matches noun."""
    light_id = player.equipped_items.get(LIGHT_SLOT)
    if not light_id:
        return None
    obj = world.find_object(light_id)
    if obj is not None and obj.matches(noun):
        return obj
    return None
