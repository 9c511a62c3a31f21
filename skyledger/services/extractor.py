"""
Snapshot extraction from raw profile documents.

The profile API returns every profile a player owns. The one flagged
"current" carries an items section with three containers:

    inventory / enderchest: slot -> {id, display_name?, Count?}
    storage:                unit -> {containsItems?: slot -> {...}}

Each container is flattened into item display name -> quantity.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from skyledger.models.failure import MalformedProfileError
from skyledger.models.inventory import ContainerItems, ItemSnapshot, MergePolicy

UNNAMED_ITEM = "unnamed"

FLAT_CONTAINERS = ("inventory", "enderchest")
STORAGE_CONTAINER = "storage"


def _values(container: Any) -> Iterable[Any]:
    """Iterate a container encoded either as an object or an array."""
    if isinstance(container, Mapping):
        return container.values()
    if isinstance(container, list):
        return container
    raise TypeError(f"expected object or array, got {type(container).__name__}")


def _accumulate(counts: ItemSnapshot, slots: Iterable[Any]) -> None:
    for slot in slots:
        if not isinstance(slot, Mapping) or not slot.get("id"):
            continue
        name = slot.get("display_name") or UNNAMED_ITEM
        count = int(slot.get("Count") or 1)
        counts[name] = counts.get(name, 0) + count


def process_container(container: Any) -> ItemSnapshot:
    """
    Flatten a flat container (inventory, ender chest).

    Empty slots (no item id) are skipped. A missing count means one item.
    Duplicate names within the container are summed.

    Raises:
        TypeError: If the container is neither an object nor an array
    """
    counts: ItemSnapshot = {}
    _accumulate(counts, _values(container))
    return counts


def process_storage(storage: Any) -> ItemSnapshot:
    """
    Flatten bulk storage.

    Each unit may hold a nested container under "containsItems". Units
    without contents are skipped, and counts are summed across units.

    Raises:
        TypeError: If storage or a unit's contents is neither an object nor an array
    """
    counts: ItemSnapshot = {}
    for unit in _values(storage):
        if not isinstance(unit, Mapping) or not unit.get("containsItems"):
            continue
        _accumulate(counts, _values(unit["containsItems"]))
    return counts


def find_current_profile(raw_profile: Any) -> Mapping[str, Any]:
    """
    Return the profile flagged as current.

    Raises:
        MalformedProfileError: If there is no profiles object or no current profile
    """
    if not isinstance(raw_profile, Mapping):
        raise MalformedProfileError("Invalid API response: expected a JSON object")

    profiles = raw_profile.get("profiles")
    if not isinstance(profiles, Mapping):
        raise MalformedProfileError("Invalid API response: missing profiles")

    for profile in profiles.values():
        if isinstance(profile, Mapping) and profile.get("current") is True:
            return profile

    raise MalformedProfileError("Profile data not found: no current profile")


def extract_inventory(raw_profile: Any) -> ContainerItems:
    """
    Extract per-container item counts from the current profile.

    Raises:
        MalformedProfileError: If the expected nested structure is absent
    """
    profile = find_current_profile(raw_profile)

    data = profile.get("data")
    items = data.get("items") if isinstance(data, Mapping) else None
    if not isinstance(items, Mapping) or not items:
        raise MalformedProfileError("Profile data not found: missing items section")

    extracted: dict[str, ItemSnapshot] = {}
    for section in (*FLAT_CONTAINERS, STORAGE_CONTAINER):
        container = items.get(section)
        if container is None:
            raise MalformedProfileError(f"Profile data not found: missing {section}")
        try:
            if section == STORAGE_CONTAINER:
                extracted[section] = process_storage(container)
            else:
                extracted[section] = process_container(container)
        except (TypeError, ValueError) as e:
            raise MalformedProfileError(f"Malformed {section} section: {e}") from e

    return ContainerItems(**extracted)


def extract_snapshot(
    raw_profile: Any,
    policy: MergePolicy = MergePolicy.OVERWRITE,
) -> ItemSnapshot:
    """
    Extract the flat item snapshot from a raw profile document.

    Raises:
        MalformedProfileError: If the expected nested structure is absent
    """
    return extract_inventory(raw_profile).merge(policy)
