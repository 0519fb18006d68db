from dataclasses import dataclass
from typing import Optional


@dataclass
class Customer:
    customer_id: str
    name: str
    status: str = "Active"           # "Lead / Draft", "Verified", "Active", "Suspended", "Terminated"
    package_name: str = ""
    ip_address: Optional[str] = None  # static assignment, if any
