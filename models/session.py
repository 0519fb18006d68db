from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from config.defaults import ACTIVE_SESSION_STATUS


@dataclass
class LeaseSession:
    session_id: str
    username: str
    customer_id: Optional[str]
    ip_address: Optional[str]
    protocol: str = "PPPoE"          # "PPPoE", "DHCP", "Hotspot"
    status: str = ACTIVE_SESSION_STATUS
    start_time: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == ACTIVE_SESSION_STATUS
