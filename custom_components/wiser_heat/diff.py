"""Change detection between two full controller snapshots."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from .const import NOISY_FIELDS, VOLATILE_SYSTEM_FIELDS
from .models import ChangeRecord

if TYPE_CHECKING:
    from .models import Snapshot
    from .room_index import RoomIndex

_LOGGER = logging.getLogger(__name__)


def strip_volatile_fields(snapshot: Snapshot) -> Snapshot:
    """Return a copy of the snapshot without the System clock fields.

    The input snapshot is left untouched.
    """
    stripped = dict(snapshot)
    system = stripped.get("System")
    if isinstance(system, Mapping):
        stripped["System"] = {
            key: value
            for key, value in system.items()
            if key not in VOLATILE_SYSTEM_FIELDS
        }
    return stripped


def _as_records(value: Any) -> list[Any]:
    """Return entity records of one type as a list.

    Types holding a single object (System, Cloud, ...) become one record.
    """
    if isinstance(value, Mapping):
        return [value]
    if isinstance(value, Sequence) and not isinstance(value, str | bytes):
        return list(value)
    return []


def updated_fields(
    previous: Mapping[str, Any],
    current: Mapping[str, Any],
) -> dict[str, Any]:
    """Return the fields of current whose value differs from previous.

    Nested objects and lists compare by deep equality. Fields that are new in
    current count as updated; fields dropped from current are ignored.
    """
    return {
        name: value
        for name, value in current.items()
        if name not in previous or previous[name] != value
    }


def compute_changes(
    previous: Snapshot,
    current: Snapshot,
    room_index: RoomIndex | None = None,
    *,
    monitor_ref: str = "",
    detected_at: datetime | None = None,
) -> list[ChangeRecord]:
    """Compute one ChangeRecord per changed entity between two snapshots.

    Args:
        previous: Snapshot accepted on the prior poll, volatile fields stripped.
        current: Snapshot of this poll, volatile fields stripped.
        room_index: Index used to name the room of changed devices.
        monitor_ref: Reference of the monitor reporting the changes.
        detected_at: Detection time, defaults to now.

    Returns:
        Records in entity type order, then index order.

    """
    if detected_at is None:
        detected_at = datetime.now(UTC)

    records: list[ChangeRecord] = []

    for entity_type, entities in current.items():
        previous_entities = _as_records(previous.get(entity_type))

        for index, entity in enumerate(_as_records(entities)):
            if not isinstance(entity, Mapping):
                continue

            prior = None
            if index < len(previous_entities) and isinstance(
                previous_entities[index], Mapping
            ):
                prior = previous_entities[index]

            changed = updated_fields(prior or {}, entity)
            for name in NOISY_FIELDS:
                changed.pop(name, None)
            if not changed:
                continue

            previous_fields = {}
            if prior is not None:
                previous_fields = {
                    name: prior[name] for name in changed if name in prior
                }

            entity_id = entity.get("id")
            room_name = None
            if entity_type == "Room":
                room_name = entity.get("Name")
            elif room_index is not None:
                entry = room_index.lookup_device(entity_id)
                if entry is not None:
                    room_name = entry.room_name

            records.append(
                ChangeRecord(
                    monitor_ref=monitor_ref,
                    detected_at=detected_at,
                    entity_type=entity_type,
                    index=index,
                    id=entity_id,
                    changed_fields=changed,
                    previous_fields=previous_fields,
                    room_name=room_name,
                )
            )

    _LOGGER.debug("Detected %d changed entities", len(records))
    return records
