from dataclasses import dataclass
from typing import Optional

from config.defaults import ASSIGNABLE_STATUSES, USED_STATUSES


@dataclass
class AddressClassification:
    """Derived per query; never stored."""
    octet: int
    ip_address: str
    status: str                  # "RESERVED", "ASSIGNED", "LEASED", "ROGUE", "AVAILABLE"
    kind: str                    # "Network", "Gateway", "Broadcast", "Device", "Customer",
                                 # "Session", "Unknown", "DHCP", "Static"
    label: str
    ref_id: Optional[str] = None  # device/customer/session id for claimed addresses

    @property
    def is_used(self) -> bool:
        return self.status in USED_STATUSES

    @property
    def is_assignable(self) -> bool:
        return self.status in ASSIGNABLE_STATUSES
