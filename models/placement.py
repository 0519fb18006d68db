from dataclasses import dataclass
from typing import Optional

from config.defaults import MOVE_OK
from models.device import Device
from models.intents import PlacementIntent


@dataclass
class MoveValidation:
    status: str                  # "ok", "collision", "out_of_bounds"
    reason: str = ""
    blocking_device_id: Optional[str] = None

    @property
    def is_ok(self) -> bool:
        return self.status == MOVE_OK


@dataclass
class MoveOutcome:
    """Result of a committed move attempt."""
    validation: MoveValidation
    device: Device                          # updated copy on success, original otherwise
    intent: Optional[PlacementIntent] = None

    @property
    def applied(self) -> bool:
        return self.validation.is_ok
