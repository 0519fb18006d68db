"""Tests for the rack placement engine."""

import sys
import os
import random
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from models.device import Device
from engine.errors import PreconditionViolation
from engine.rack import (
    rack_devices,
    list_racks,
    occupant_at,
    validate_move,
    apply_move,
    unmount,
    unmounted_devices,
    rack_slots,
    valid_targets,
    free_blocks,
    largest_free_block,
    used_units,
    rack_utilization,
    power_load,
    thermal_output,
    rack_stats,
)


def make_device(device_id="A", rack="R1", top=10, height=1, device_type="Server", name=None):
    return Device(
        device_id=device_id,
        name=name or f"dev-{device_id}",
        device_type=device_type,
        rack_id=rack,
        u_position=top,
        u_height=height,
    )


def random_rack(seed, rack="R1"):
    """Non-overlapping devices of random heights, packed from the top down."""
    rng = random.Random(seed)
    devices = []
    u = 42
    i = 0
    while u >= 1:
        height = rng.randint(1, 4)
        gap = rng.randint(0, 3)
        top = u - gap
        if top - height + 1 < 1:
            break
        devices.append(make_device(f"D{i}", rack, top, height))
        u = top - height
        i += 1
    return devices


class TestOccupantAt:
    def test_multi_unit_device_covers_its_span(self):
        devices = [make_device(top=10, height=2)]
        assert occupant_at("R1", 10, devices).device_id == "A"
        assert occupant_at("R1", 9, devices).device_id == "A"
        assert occupant_at("R1", 8, devices) is None
        assert occupant_at("R1", 11, devices) is None

    def test_other_racks_ignored(self):
        devices = [make_device(rack="R2", top=10)]
        assert occupant_at("R1", 10, devices) is None

    def test_unmounted_devices_ignored(self):
        devices = [make_device(top=None)]
        assert occupant_at("R1", 1, devices) is None

    @pytest.mark.parametrize("u", [0, 43, -5])
    def test_unit_out_of_range_rejected(self, u):
        with pytest.raises(PreconditionViolation):
            occupant_at("R1", u, [])


class TestValidateMove:
    def test_collision_and_free_target(self):
        a = make_device("A", top=10, height=2)
        b = make_device("B", top=30, height=1)
        rack = [a, b]

        blocked = validate_move(b, 9, rack)
        assert blocked.status == "collision"
        assert blocked.blocking_device_id == "A"
        assert "U9" in blocked.reason

        assert validate_move(b, 11, rack).is_ok

    def test_self_move_is_ok(self):
        for seed in range(10):
            rack = random_rack(seed)
            for device in rack:
                assert validate_move(device, device.u_position, rack).is_ok

    def test_overlapping_own_footprint_is_ok(self):
        a = make_device("A", top=10, height=3)  # U8-U10
        assert validate_move(a, 11, [a]).is_ok
        assert validate_move(a, 9, [a]).is_ok

    def test_resize_in_place(self):
        a = make_device("A", top=10, height=2)
        b = make_device("B", top=7, height=1)
        taller = make_device("A", top=10, height=3)   # would cover U8-U10
        tallest = make_device("A", top=10, height=4)  # would reach U7
        assert validate_move(taller, 10, [a, b]).is_ok
        assert validate_move(tallest, 10, [a, b]).status == "collision"

    @pytest.mark.parametrize("height", [1, 2, 3, 4])
    def test_flush_to_bottom(self, height):
        device = make_device(top=None, height=height)
        assert validate_move(device, height, []).is_ok
        assert validate_move(device, height - 1, []).status == "out_of_bounds"

    def test_top_of_rack(self):
        device = make_device(top=None, height=2)
        assert validate_move(device, 42, []).is_ok
        result = validate_move(device, 43, [])
        assert result.status == "out_of_bounds"
        assert "42U" in result.reason

    def test_out_of_bounds_reason_mentions_height(self):
        result = validate_move(make_device(top=None, height=2), 1, [])
        assert result.reason == "Not enough space for a 2U device at U1"

    def test_ignores_unmounted_population(self):
        staged = make_device("S", top=None, height=4)
        assert validate_move(make_device("B", top=None), 5, [staged]).is_ok

    def test_invalid_height_rejected(self):
        with pytest.raises(PreconditionViolation):
            validate_move(make_device(top=None, height=0), 5, [])

    def test_invalid_current_position_rejected(self):
        with pytest.raises(PreconditionViolation):
            validate_move(make_device(top=0), 5, [])

    def test_non_integer_target_rejected(self):
        with pytest.raises(PreconditionViolation):
            validate_move(make_device(top=None), "5", [])

    def test_never_ok_when_overlapping_another_device(self):
        for seed in range(25):
            rack = random_rack(seed)
            for mover in rack:
                others = [d for d in rack if d.device_id != mover.device_id]
                occupied = {u for d in others for u in d.occupied_units}
                for target in range(-1, 45):
                    result = validate_move(mover, target, rack)
                    span = set(range(target - mover.u_height + 1, target + 1))
                    if result.is_ok:
                        assert not span & occupied
                        assert min(span) >= 1 and max(span) <= 42
                    elif result.status == "collision":
                        assert span & occupied


class TestApplyMove:
    def test_success_returns_updated_copy(self):
        a = make_device("A", top=10, height=2)
        b = make_device("B", top=30)
        outcome = apply_move(b, "R1", 20, [a, b])

        assert outcome.applied
        assert outcome.device.u_position == 20
        assert outcome.device.rack_id == "R1"
        assert outcome.intent.device_id == "B"
        assert outcome.intent.u_position == 20
        assert b.u_position == 30  # original untouched

    def test_failure_leaves_device_unchanged(self):
        a = make_device("A", top=10, height=2)
        b = make_device("B", top=30)
        outcome = apply_move(b, "R1", 10, [a, b])

        assert not outcome.applied
        assert outcome.validation.status == "collision"
        assert outcome.device is b
        assert outcome.intent is None

    def test_revalidates_against_current_population(self):
        a = make_device("A", top=10, height=2)
        b = make_device("B", top=None, rack=None)
        assert validate_move(b, 20, [a]).is_ok

        # someone else mounted a device at U20 in the meantime
        c = make_device("C", top=21, height=2)
        outcome = apply_move(b, "R1", 20, [a, b, c])
        assert outcome.validation.status == "collision"
        assert outcome.validation.blocking_device_id == "C"

    def test_move_to_another_rack(self):
        a = make_device("A", rack="R1", top=10)
        b = make_device("B", rack="R2", top=10)
        outcome = apply_move(b, "R1", 10, [a, b])
        assert outcome.validation.status == "collision"

        outcome = apply_move(a, "R2", 11, [a, b])
        assert outcome.applied
        assert outcome.device.rack_id == "R2"

    def test_uses_stored_height_over_callers_copy(self):
        a = make_device("A", top=10)
        stale = make_device("B", top=None, rack=None, height=1)
        stored = make_device("B", top=None, rack=None, height=3)  # resized since the view read it
        assert validate_move(stale, 11, [a]).is_ok

        outcome = apply_move(stale, "R1", 11, [a, stored])
        assert outcome.validation.status == "collision"
        assert outcome.validation.blocking_device_id == "A"
        assert outcome.device is stored

    def test_applied_copy_keeps_stored_height(self):
        stale = make_device("B", top=None, rack=None, height=1)
        stored = make_device("B", top=None, rack=None, height=3)
        outcome = apply_move(stale, "R1", 20, [stored])
        assert outcome.applied
        assert list(outcome.device.occupied_units) == [18, 19, 20]

    def test_mount_staged_device(self):
        staged = make_device("S", rack="R1", top=None, height=2)
        outcome = apply_move(staged, "R1", 2, [staged])
        assert outcome.applied
        assert outcome.device.is_mounted
        assert list(outcome.device.occupied_units) == [1, 2]

    def test_out_of_bounds_surfaced(self):
        outcome = apply_move(make_device(height=3), "R1", 2, [])
        assert outcome.validation.status == "out_of_bounds"

    def test_rack_required(self):
        with pytest.raises(PreconditionViolation):
            apply_move(make_device(), "", 5, [])


class TestUnmount:
    def test_keep_rack(self):
        a = make_device(top=10)
        staged, intent = unmount(a)
        assert staged.u_position is None
        assert staged.rack_id == "R1"
        assert not staged.is_mounted
        assert intent.device_id == "A"
        assert intent.keep_rack
        assert a.u_position == 10

    def test_remove_from_rack(self):
        staged, intent = unmount(make_device(top=10), keep_rack=False)
        assert staged.rack_id is None
        assert staged.u_position is None
        assert not intent.keep_rack

    def test_unmounted_devices(self):
        devices = [
            make_device("M", rack="R1", top=10),
            make_device("S1", rack="R1", top=None),
            make_device("S2", rack="R2", top=None),
            make_device("U", rack=None, top=None),
        ]
        assert [d.device_id for d in unmounted_devices(devices, "R1")] == ["S1", "U"]
        assert [d.device_id for d in unmounted_devices(devices)] == ["S1", "S2", "U"]

    def test_unmounted_device_frees_units(self):
        a = make_device(top=10, height=2)
        staged, _ = unmount(a)
        assert occupant_at("R1", 10, [staged]) is None


class TestRackQueries:
    def test_rack_devices_and_list(self):
        devices = [
            make_device("A", rack="R2", top=5),
            make_device("B", rack="R1", top=5),
            make_device("C", rack="R1", top=None),
            make_device("D", rack=None, top=None),
        ]
        assert [d.device_id for d in rack_devices("R1", devices)] == ["B"]
        assert list_racks(devices) == ["R1", "R2"]

    def test_rack_slots(self):
        devices = [make_device("A", top=10, height=2)]
        slots = rack_slots("R1", devices)

        assert len(slots) == 42
        assert slots[0]["u"] == 42
        assert slots[-1]["u"] == 1

        by_u = {s["u"]: s for s in slots}
        assert by_u[10]["is_top"] and by_u[10]["span"] == 2
        assert by_u[9]["device_id"] == "A" and not by_u[9]["is_top"]
        assert by_u[8]["device"] is None

    def test_valid_targets(self):
        assert valid_targets(make_device("B", top=None, height=2), []) == list(range(42, 1, -1))

        a = make_device("A", top=10, height=2)
        targets = valid_targets(make_device("B", top=None), [a])
        assert 9 not in targets and 10 not in targets
        assert len(targets) == 40

    def test_free_blocks(self):
        devices = [make_device("A", top=10, height=2)]
        assert free_blocks("R1", devices) == [(42, 32), (8, 8)]
        assert largest_free_block("R1", devices) == 32

    def test_free_blocks_full_and_empty(self):
        assert free_blocks("R1", []) == [(42, 42)]
        full = [make_device("F", top=42, height=42)]
        assert free_blocks("R1", full) == []
        assert largest_free_block("R1", full) == 0


class TestRackStats:
    def test_used_units_and_utilization(self):
        devices = [make_device("A", top=10, height=2), make_device("B", top=20, height=1)]
        assert used_units("R1", devices) == 3
        assert rack_utilization("R1", devices) == 7  # 3/42 = 7.14%

    def test_power_and_thermal(self):
        devices = [
            make_device("A", top=10, device_type="Router"),
            make_device("B", top=20, device_type="Switch"),
        ]
        assert power_load("R1", devices) == 330
        assert thermal_output("R1", devices) == 1125

    def test_unknown_type_uses_default_draw(self):
        devices = [make_device("A", top=10, device_type="Patch Panel")]
        assert power_load("R1", devices) == 50

    def test_unmounted_devices_draw_no_power(self):
        devices = [make_device("A", top=None, device_type="Router")]
        assert power_load("R1", devices) == 0
        assert used_units("R1", devices) == 0

    def test_rack_stats(self):
        devices = [
            make_device("A", top=42, height=2, device_type="Router"),
            make_device("B", top=1, device_type="Switch"),
        ]
        stats = rack_stats("R1", devices)
        assert stats["used_units"] == 3
        assert stats["free_units"] == 39
        assert stats["device_count"] == 2
        assert stats["largest_free_block"] == 39
        assert stats["power_load_w"] == 330
        assert stats["thermal_btu_hr"] == 1125


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
