from models.device import Device
from models.customer import Customer
from models.session import LeaseSession
from models.subnet import Subnet
from models.classification import AddressClassification
from models.intents import AssignmentIntent, PlacementIntent, UnmountIntent
from models.placement import MoveValidation, MoveOutcome
from models.snapshot import InventorySnapshot
from models.audit import AuditEntry
