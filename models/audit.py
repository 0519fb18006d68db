from dataclasses import dataclass
from datetime import datetime


@dataclass
class AuditEntry:
    timestamp: datetime
    action: str              # "assign_ip", "move", "unmount", "scan", "upload", "reset"
    target_id: str           # ip address, device id or subnet prefix
    field_changed: str
    old_value: str
    new_value: str
    rationale: str = ""
