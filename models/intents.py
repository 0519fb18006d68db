"""Mutation requests handed to the inventory store for persistence."""

from dataclasses import dataclass


@dataclass
class AssignmentIntent:
    ip_address: str
    subnet_prefix: str
    previous_status: str   # "AVAILABLE" or "ROGUE"


@dataclass
class PlacementIntent:
    device_id: str
    rack_id: str
    u_position: int


@dataclass
class UnmountIntent:
    device_id: str
    keep_rack: bool = True
