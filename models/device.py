from dataclasses import dataclass
from typing import Optional


@dataclass
class Device:
    device_id: str
    name: str
    device_type: str                 # "Router", "Switch", "OLT", "ONU", "Server", "Firewall"
    model: str = ""
    ip_address: Optional[str] = None
    status: str = "Active"
    location: str = ""
    rack_id: Optional[str] = None
    u_position: Optional[int] = None  # top-most occupied unit; None = unmounted
    u_height: int = 1

    @property
    def is_mounted(self) -> bool:
        return bool(self.rack_id) and self.u_position is not None

    @property
    def bottom_u(self) -> Optional[int]:
        if self.u_position is None:
            return None
        return self.u_position - self.u_height + 1

    @property
    def occupied_units(self) -> range:
        """Units covered by the device, bottom to top. Empty when unmounted."""
        if not self.is_mounted:
            return range(0)
        return range(self.bottom_u, self.u_position + 1)
