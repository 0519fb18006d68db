from dataclasses import dataclass, field
from typing import List, Optional

from models.customer import Customer
from models.device import Device
from models.session import LeaseSession
from models.subnet import Subnet


@dataclass
class InventorySnapshot:
    """Records as fetched for one render; queries never mutate it."""
    devices: List[Device] = field(default_factory=list)
    customers: List[Customer] = field(default_factory=list)
    sessions: List[LeaseSession] = field(default_factory=list)
    subnets: List[Subnet] = field(default_factory=list)

    def subnet(self, prefix: str) -> Optional[Subnet]:
        return next((s for s in self.subnets if s.prefix == prefix), None)

    def device(self, device_id: str) -> Optional[Device]:
        return next((d for d in self.devices if d.device_id == device_id), None)
