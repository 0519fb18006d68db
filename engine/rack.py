"""Rack unit placement: occupancy, move validation and rack aggregates.

Devices are anchored at their top-most unit: a device with u_position=10 and
u_height=2 occupies U9-U10. Occupancy is recomputed from the device list on
every call; nothing here holds state between queries.
"""

import copy
from typing import Iterable, List, Optional, Tuple

from loguru import logger

from config.defaults import (
    TOTAL_UNITS, DEFAULT_U_HEIGHT,
    MOVE_OK, MOVE_COLLISION, MOVE_OUT_OF_BOUNDS,
    POWER_DRAW_WATTS, DEFAULT_POWER_DRAW_WATTS, BTU_PER_WATT,
)
from models.device import Device
from models.intents import PlacementIntent, UnmountIntent
from models.placement import MoveOutcome, MoveValidation
from engine.errors import PreconditionViolation
from engine.stats import percent, round_half_up


def _height(device: Device) -> int:
    return device.u_height if device.u_height is not None else DEFAULT_U_HEIGHT


def _check_device(device: Device) -> None:
    if _height(device) < 1:
        raise PreconditionViolation(f"{device.device_id}: u_height must be >= 1, got {device.u_height}")
    if device.u_position is not None and device.u_position < 1:
        raise PreconditionViolation(f"{device.device_id}: u_position must be >= 1, got {device.u_position}")


def _occupant(u: int, mounted: Iterable[Device], exclude_id: Optional[str] = None) -> Optional[Device]:
    for d in mounted:
        if d.device_id == exclude_id:
            continue
        if d.u_position - _height(d) + 1 <= u <= d.u_position:
            return d
    return None


def rack_devices(rack_id: str, devices: Iterable[Device]) -> List[Device]:
    """Devices mounted in the rack (rack assigned and a unit position set)."""
    return [d for d in devices if d.rack_id == rack_id and d.u_position is not None]


def list_racks(devices: Iterable[Device]) -> List[str]:
    return sorted({d.rack_id for d in devices if d.rack_id})


def occupant_at(rack_id: str, u: int, devices: Iterable[Device]) -> Optional[Device]:
    """The device whose span covers unit `u`, or None for an empty slot."""
    if not 1 <= u <= TOTAL_UNITS:
        raise PreconditionViolation(f"Unit must be in [1, {TOTAL_UNITS}], got {u}")
    return _occupant(u, rack_devices(rack_id, devices))


def validate_move(device: Device, target_top_u: int, rack_devices: Iterable[Device]) -> MoveValidation:
    """Check whether `device` can be anchored at `target_top_u`.

    The device itself is ignored when looking for collisions, so moving within
    its own footprint is allowed. Used both for live feedback while an operator
    picks a target and again when the move is committed.
    """
    _check_device(device)
    if isinstance(target_top_u, bool) or not isinstance(target_top_u, int):
        raise PreconditionViolation(f"Target unit must be an integer, got {target_top_u!r}")

    height = _height(device)
    if target_top_u > TOTAL_UNITS:
        return MoveValidation(
            MOVE_OUT_OF_BOUNDS,
            f"U{target_top_u} is above the top of a {TOTAL_UNITS}U rack",
        )

    bottom = target_top_u - height + 1
    if bottom < 1:
        return MoveValidation(
            MOVE_OUT_OF_BOUNDS,
            f"Not enough space for a {height}U device at U{target_top_u}",
        )

    mounted = [d for d in rack_devices if d.u_position is not None]
    for u in range(target_top_u, bottom - 1, -1):
        blocker = _occupant(u, mounted, exclude_id=device.device_id)
        if blocker is not None:
            return MoveValidation(
                MOVE_COLLISION,
                f"U{u} is occupied by {blocker.name}",
                blocker.device_id,
            )

    return MoveValidation(MOVE_OK)


def apply_move(device: Device, rack_id: str, target_top_u: int, devices: Iterable[Device]) -> MoveOutcome:
    """Commit a move after re-validating against the current rack population.

    The device is re-read from `devices` by id, so a resize made since the
    caller took its copy is honoured. On success the outcome carries an
    updated copy of the device and a PlacementIntent for the inventory store;
    otherwise the current device record is returned untouched along with
    the violation.
    """
    if not rack_id:
        raise PreconditionViolation("A rack id is required to mount a device")

    devices = list(devices)
    # The stored record may have changed since the caller read it
    device = next((d for d in devices if d.device_id == device.device_id), device)

    validation = validate_move(device, target_top_u, rack_devices(rack_id, devices))
    if not validation.is_ok:
        logger.debug("Move of {} to {} U{} rejected: {}", device.device_id, rack_id, target_top_u, validation.reason)
        return MoveOutcome(validation=validation, device=device)

    moved = copy.deepcopy(device)
    moved.rack_id = rack_id
    moved.u_position = target_top_u

    logger.info("Placed {} in {} at U{}", device.device_id, rack_id, target_top_u)
    return MoveOutcome(
        validation=validation,
        device=moved,
        intent=PlacementIntent(device_id=device.device_id, rack_id=rack_id, u_position=target_top_u),
    )


def unmount(device: Device, keep_rack: bool = True) -> Tuple[Device, UnmountIntent]:
    """Clear the unit position. With keep_rack the device stays staged for its rack."""
    staged = copy.deepcopy(device)
    staged.u_position = None
    if not keep_rack:
        staged.rack_id = None
    return staged, UnmountIntent(device_id=device.device_id, keep_rack=keep_rack)


def unmounted_devices(devices: Iterable[Device], rack_id: Optional[str] = None) -> List[Device]:
    """Devices eligible for mounting.

    Includes fully unassigned devices and, when `rack_id` is given, devices
    staged for that rack without a position. Both are treated alike.
    """
    result = []
    for d in devices:
        if d.is_mounted:
            continue
        if rack_id is None or not d.rack_id or d.rack_id == rack_id:
            result.append(d)
    return result


def rack_slots(rack_id: str, devices: Iterable[Device]) -> List[dict]:
    """Per-unit occupancy from U42 down to U1 for rendering."""
    mounted = rack_devices(rack_id, devices)
    slots = []
    for u in range(TOTAL_UNITS, 0, -1):
        occupant = _occupant(u, mounted)
        is_top = occupant is not None and occupant.u_position == u
        slots.append({
            "u": u,
            "device": occupant,
            "device_id": occupant.device_id if occupant else None,
            "is_top": is_top,
            "span": _height(occupant) if is_top else 0,
        })
    return slots


def valid_targets(device: Device, rack_devices: Iterable[Device]) -> List[int]:
    """Every top unit the device could be dropped on, highest first."""
    population = list(rack_devices)
    return [
        u for u in range(TOTAL_UNITS, 0, -1)
        if validate_move(device, u, population).is_ok
    ]


def free_blocks(rack_id: str, devices: Iterable[Device]) -> List[Tuple[int, int]]:
    """Contiguous empty runs as (top_u, height), highest first."""
    mounted = rack_devices(rack_id, devices)
    blocks = []
    run_top = None
    for u in range(TOTAL_UNITS, 0, -1):
        if _occupant(u, mounted) is None:
            if run_top is None:
                run_top = u
        elif run_top is not None:
            blocks.append((run_top, run_top - u))
            run_top = None
    if run_top is not None:
        blocks.append((run_top, run_top))
    return blocks


def largest_free_block(rack_id: str, devices: Iterable[Device]) -> int:
    return max((height for _, height in free_blocks(rack_id, devices)), default=0)


def power_draw(device_type: str) -> int:
    return POWER_DRAW_WATTS.get(device_type, DEFAULT_POWER_DRAW_WATTS)


def used_units(rack_id: str, devices: Iterable[Device]) -> int:
    return sum(_height(d) for d in rack_devices(rack_id, devices))


def rack_utilization(rack_id: str, devices: Iterable[Device]) -> int:
    return percent(used_units(rack_id, devices), TOTAL_UNITS)


def power_load(rack_id: str, devices: Iterable[Device]) -> int:
    """Nominal watts drawn by the mounted devices."""
    return sum(power_draw(d.device_type) for d in rack_devices(rack_id, devices))


def thermal_output(rack_id: str, devices: Iterable[Device]) -> int:
    """Heat load in BTU/hr."""
    return round_half_up(power_load(rack_id, devices) * BTU_PER_WATT)


def rack_stats(rack_id: str, devices: List[Device]) -> dict:
    used = used_units(rack_id, devices)
    load = power_load(rack_id, devices)
    return {
        "rack_id": rack_id,
        "total_units": TOTAL_UNITS,
        "used_units": used,
        "free_units": TOTAL_UNITS - used,
        "utilization_pct": percent(used, TOTAL_UNITS),
        "device_count": len(rack_devices(rack_id, devices)),
        "largest_free_block": largest_free_block(rack_id, devices),
        "power_load_w": load,
        "thermal_btu_hr": round_half_up(load * BTU_PER_WATT),
    }
