from dataclasses import dataclass
from typing import Optional

from config.defaults import TOTAL_ADDRESSES


@dataclass
class Subnet:
    prefix: str                      # first three octets, e.g. "192.168.1"
    name: str = ""
    dhcp_start: Optional[int] = None
    dhcp_end: Optional[int] = None   # inclusive

    @property
    def cidr(self) -> str:
        return f"{self.prefix}.0/24"

    @property
    def has_dhcp_range(self) -> bool:
        return self.dhcp_start is not None and self.dhcp_end is not None

    def full_ip(self, octet: int) -> str:
        return f"{self.prefix}.{octet}"

    def in_dhcp_range(self, octet: int) -> bool:
        if not self.has_dhcp_range:
            return False
        return self.dhcp_start <= octet <= self.dhcp_end

    def octet_of(self, ip_address: str) -> Optional[int]:
        """Final octet of an address inside this subnet, else None."""
        if not ip_address:
            return None
        head, _, tail = ip_address.strip().rpartition(".")
        if head != self.prefix or not (tail.isascii() and tail.isdigit()):
            return None
        octet = int(tail)
        if octet >= TOTAL_ADDRESSES:
            return None
        return octet
