"""Tests for snapshot change detection."""

import copy
from datetime import UTC, datetime
from typing import Any

from custom_components.wiser_heat.diff import (
    compute_changes,
    strip_volatile_fields,
    updated_fields,
)
from custom_components.wiser_heat.room_index import RoomIndex

DETECTED_AT = datetime(2026, 1, 15, 7, 30, tzinfo=UTC)


def _changes(
    previous: dict[str, Any],
    current: dict[str, Any],
    room_index: RoomIndex | None = None,
) -> list:
    return compute_changes(
        strip_volatile_fields(previous),
        strip_volatile_fields(current),
        room_index,
        monitor_ref="test",
        detected_at=DETECTED_AT,
    )


class TestStripVolatileFields:
    """Tests for strip_volatile_fields."""

    def test_removes_clock_fields(self, full_snapshot: dict[str, Any]) -> None:
        """Test that the System clock fields are removed."""
        stripped = strip_volatile_fields(full_snapshot)
        assert "UnixTime" not in stripped["System"]
        assert "LocalDateAndTime" not in stripped["System"]
        assert stripped["System"]["BrandName"] == "WiserHeat"

    def test_does_not_modify_input(self, full_snapshot: dict[str, Any]) -> None:
        """Test that the captured snapshot is left untouched."""
        original = copy.deepcopy(full_snapshot)
        strip_volatile_fields(full_snapshot)
        assert full_snapshot == original

    def test_tolerates_snapshot_without_system(self) -> None:
        """Test that a snapshot without System is returned as is."""
        assert strip_volatile_fields({"Room": []}) == {"Room": []}


class TestUpdatedFields:
    """Tests for updated_fields."""

    def test_returns_only_changed_fields(self) -> None:
        """Test that unchanged fields are left out."""
        assert updated_fields({"a": 1, "b": 2}, {"a": 1, "b": 3}) == {"b": 3}

    def test_compares_nested_values_deeply(self) -> None:
        """Test that nested objects and lists compare by value."""
        previous = {"nested": {"x": [1, 2]}, "list": [1, 2, 3]}
        assert updated_fields(previous, copy.deepcopy(previous)) == {}
        assert updated_fields(previous, {"nested": {"x": [1, 3]}, "list": [1, 2, 3]}) == {
            "nested": {"x": [1, 3]}
        }

    def test_new_fields_count_as_updated(self) -> None:
        """Test that a field missing before is reported."""
        assert updated_fields({}, {"a": 1}) == {"a": 1}

    def test_dropped_fields_are_ignored(self) -> None:
        """Test that a field that disappeared is not reported."""
        assert updated_fields({"a": 1, "b": 2}, {"a": 1}) == {}


class TestComputeChanges:
    """Tests for compute_changes."""

    def test_identical_snapshots_produce_no_changes(
        self,
        full_snapshot: dict[str, Any],
    ) -> None:
        """Test that identical snapshots give an empty list."""
        assert _changes(full_snapshot, copy.deepcopy(full_snapshot)) == []

    def test_clock_only_changes_produce_no_changes(
        self,
        full_snapshot: dict[str, Any],
    ) -> None:
        """Test that System clock changes are not reported."""
        current = copy.deepcopy(full_snapshot)
        current["System"]["UnixTime"] += 60
        current["System"]["LocalDateAndTime"]["Time"] = 1231
        assert _changes(full_snapshot, current) == []

    def test_room_mode_change_is_reported(self) -> None:
        """Test the Office room switching from Auto to Manual."""
        previous = {"Room": [{"id": 8, "Name": "Office", "Mode": "Auto"}]}
        current = {"Room": [{"id": 8, "Name": "Office", "Mode": "Manual"}]}

        changes = _changes(previous, current)

        assert len(changes) == 1
        change = changes[0]
        assert change.entity_type == "Room"
        assert change.index == 0
        assert change.id == 8
        assert change.changed_fields == {"Mode": "Manual"}
        assert change.previous_fields == {"Mode": "Auto"}
        assert change.room_name == "Office"
        assert change.monitor_ref == "test"
        assert change.detected_at == DETECTED_AT

    def test_signal_strength_churn_is_suppressed(
        self,
        full_snapshot: dict[str, Any],
    ) -> None:
        """Test that radio reception changes alone are never reported."""
        current = copy.deepcopy(full_snapshot)
        device = current["Device"][0]
        device["ReceptionOfController"] = {"Rssi": -70, "Lqi": 90}
        device["ReceptionOfDevice"] = {"Rssi": -71, "Lqi": 88}
        device["PendingZigbeeMessageMask"] = 4
        current["Device"][1]["ReceptionOfController"] = {"Rssi": -45, "Lqi": 180}

        assert _changes(full_snapshot, current) == []

    def test_noisy_fields_are_removed_from_real_changes(
        self,
        full_snapshot: dict[str, Any],
        room_index: RoomIndex,
    ) -> None:
        """Test that only meaningful fields of a changed device are kept."""
        current = copy.deepcopy(full_snapshot)
        device = current["Device"][0]
        device["ReceptionOfController"] = {"Rssi": -70, "Lqi": 90}
        device["BatteryVoltage"] = 28

        changes = _changes(full_snapshot, current, room_index)

        assert len(changes) == 1
        assert changes[0].changed_fields == {"BatteryVoltage": 28}
        assert changes[0].previous_fields == {"BatteryVoltage": 30}
        assert all(change.changed_fields for change in changes)

    def test_device_change_is_named_after_its_room(
        self,
        full_snapshot: dict[str, Any],
        room_index: RoomIndex,
    ) -> None:
        """Test that a SmartValve change carries the room name."""
        current = copy.deepcopy(full_snapshot)
        current["SmartValve"][1]["MeasuredTemperature"] = 205

        changes = _changes(full_snapshot, current, room_index)

        assert len(changes) == 1
        assert changes[0].entity_type == "SmartValve"
        assert changes[0].index == 1
        assert changes[0].id == 21
        assert changes[0].room_name == "Office"

    def test_device_without_room_has_no_room_name(
        self,
        full_snapshot: dict[str, Any],
        room_index: RoomIndex,
    ) -> None:
        """Test that an unmapped device is reported without a room name."""
        current = copy.deepcopy(full_snapshot)
        current["Device"][1]["ProductType"] = "Controller2"

        changes = _changes(full_snapshot, current, room_index)

        assert len(changes) == 1
        assert changes[0].room_name is None
        assert "room_name" not in changes[0].as_event_data()

    def test_new_entity_omits_previous_values(
        self,
        full_snapshot: dict[str, Any],
    ) -> None:
        """Test that an entity without a prior entry has no previous fields."""
        current = copy.deepcopy(full_snapshot)
        current["SmartValve"].append({"id": 22, "SetPoint": 210})

        changes = _changes(full_snapshot, current)

        assert len(changes) == 1
        assert changes[0].index == 2
        assert changes[0].changed_fields == {"id": 22, "SetPoint": 210}
        assert changes[0].previous_fields == {}

    def test_new_field_omits_previous_value(
        self,
        full_snapshot: dict[str, Any],
    ) -> None:
        """Test that a field new to an entity has no previous value."""
        current = copy.deepcopy(full_snapshot)
        current["Room"][0]["OverrideType"] = "Manual"
        current["Room"][0]["Mode"] = "Manual"

        changes = _changes(full_snapshot, current)

        assert changes[0].changed_fields == {"OverrideType": "Manual", "Mode": "Manual"}
        assert changes[0].previous_fields == {"Mode": "Auto"}

    def test_nested_field_change_reports_whole_values(
        self,
        full_snapshot: dict[str, Any],
    ) -> None:
        """Test that list fields report the full old and new list."""
        current = copy.deepcopy(full_snapshot)
        current["Room"][1]["SmartValveIds"] = [22, 23]

        changes = _changes(full_snapshot, current)

        assert changes[0].changed_fields == {"SmartValveIds": [22, 23]}
        assert changes[0].previous_fields == {"SmartValveIds": [22]}
        assert changes[0].room_name == "Lounge"

    def test_single_object_types_are_reported_at_index_zero(
        self,
        full_snapshot: dict[str, Any],
    ) -> None:
        """Test that System changes are reported as one record."""
        current = copy.deepcopy(full_snapshot)
        current["System"]["OverrideType"] = "Away"

        changes = _changes(full_snapshot, current)

        assert len(changes) == 1
        assert changes[0].entity_type == "System"
        assert changes[0].index == 0
        assert changes[0].id is None
        assert changes[0].changed_fields == {"OverrideType": "Away"}

    def test_changes_are_ordered_by_type_then_index(
        self,
        full_snapshot: dict[str, Any],
    ) -> None:
        """Test the deterministic order of the records."""
        current = copy.deepcopy(full_snapshot)
        current["SmartValve"][1]["SetPoint"] = 200
        current["SmartValve"][0]["SetPoint"] = 200
        current["Room"][1]["Mode"] = "Manual"

        changes = _changes(full_snapshot, current)

        assert [(c.entity_type, c.index) for c in changes] == [
            ("Room", 1),
            ("SmartValve", 0),
            ("SmartValve", 1),
        ]

    def test_as_event_data_serializes_record(self) -> None:
        """Test the event payload of a change record."""
        previous = {"Room": [{"id": 8, "Name": "Office", "Mode": "Auto"}]}
        current = {"Room": [{"id": 8, "Name": "Office", "Mode": "Manual"}]}

        data = _changes(previous, current)[0].as_event_data()

        assert data == {
            "monitor_ref": "test",
            "timestamp": DETECTED_AT.isoformat(),
            "entity_type": "Room",
            "index": 0,
            "id": 8,
            "changed_fields": {"Mode": "Manual"},
            "previous_fields": {"Mode": "Auto"},
            "room_name": "Office",
        }
