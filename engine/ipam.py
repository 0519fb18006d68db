"""IP address management: classify every address of a /24 and derive utilization."""

import random
from typing import Dict, Iterable, List, Optional

from loguru import logger

from config.defaults import (
    TOTAL_ADDRESSES, NETWORK_OCTET, GATEWAY_OCTET, BROADCAST_OCTET,
    STATUS_RESERVED, STATUS_ASSIGNED, STATUS_LEASED, STATUS_ROGUE, STATUS_AVAILABLE,
    POOL_DHCP, POOL_STATIC,
    DEFAULT_SCAN_COUNT, SCAN_FIRST_OCTET, SCAN_LAST_OCTET,
)
from models.classification import AddressClassification
from models.customer import Customer
from models.device import Device
from models.intents import AssignmentIntent
from models.session import LeaseSession
from models.subnet import Subnet
from engine.errors import NonAssignableAddressError, PreconditionViolation
from engine.stats import percent


def _index_by_ip(records: Iterable) -> Dict[str, object]:
    """Map address -> record. The first record wins when addresses collide."""
    index = {}
    for record in records:
        ip = record.ip_address
        if ip:
            index.setdefault(ip.strip(), record)
    return index


def _build_indexes(
    devices: Iterable[Device],
    customers: Iterable[Customer],
    sessions: Iterable[LeaseSession],
):
    return (
        _index_by_ip(devices),
        _index_by_ip(customers),
        _index_by_ip(s for s in sessions if s.is_active),
    )


def _check_octet(octet) -> None:
    if isinstance(octet, bool) or not isinstance(octet, int) or not 0 <= octet < TOTAL_ADDRESSES:
        raise PreconditionViolation(f"Octet must be an integer in [0, 255], got {octet!r}")


def _resolve(
    octet: int,
    subnet: Subnet,
    device_index: Dict[str, Device],
    customer_index: Dict[str, Customer],
    session_index: Dict[str, LeaseSession],
    rogue_set: set,
) -> AddressClassification:
    ip = subnet.full_ip(octet)

    # Step 1: reserved addresses win over any record
    if octet == NETWORK_OCTET:
        return AddressClassification(octet, ip, STATUS_RESERVED, "Network", "Network Address")
    if octet == GATEWAY_OCTET:
        return AddressClassification(octet, ip, STATUS_RESERVED, "Gateway", "Gateway / Router")
    if octet == BROADCAST_OCTET:
        return AddressClassification(octet, ip, STATUS_RESERVED, "Broadcast", "Broadcast Address")

    # Step 2: static claims, infrastructure before subscribers
    device = device_index.get(ip)
    if device is not None:
        return AddressClassification(octet, ip, STATUS_ASSIGNED, "Device", device.name, device.device_id)

    customer = customer_index.get(ip)
    if customer is not None:
        return AddressClassification(octet, ip, STATUS_ASSIGNED, "Customer", customer.name, customer.customer_id)

    # Step 3: dynamic leases
    session = session_index.get(ip)
    if session is not None:
        return AddressClassification(octet, ip, STATUS_LEASED, "Session", session.username, session.session_id)

    # Step 4: scanner findings
    if ip in rogue_set:
        return AddressClassification(octet, ip, STATUS_ROGUE, "Unknown", "Unknown Device Detected")

    # Step 5: free pool
    if subnet.in_dhcp_range(octet):
        return AddressClassification(octet, ip, STATUS_AVAILABLE, POOL_DHCP, "DHCP Pool")
    return AddressClassification(octet, ip, STATUS_AVAILABLE, POOL_STATIC, "Available Static")


def classify_address(
    octet: int,
    subnet: Subnet,
    devices: Iterable[Device],
    customers: Iterable[Customer],
    sessions: Iterable[LeaseSession] = (),
    rogue_ips: Iterable[str] = (),
) -> AddressClassification:
    """Classify a single address of the subnet by strict precedence.

    Order: network, gateway, broadcast, device, customer, active session,
    rogue, then free (DHCP pool if inside the subnet's range, else static).
    """
    _check_octet(octet)
    device_index, customer_index, session_index = _build_indexes(devices, customers, sessions)
    return _resolve(octet, subnet, device_index, customer_index, session_index, set(rogue_ips))


def classify_subnet(
    subnet: Subnet,
    devices: Iterable[Device],
    customers: Iterable[Customer],
    sessions: Iterable[LeaseSession] = (),
    rogue_ips: Iterable[str] = (),
) -> List[AddressClassification]:
    """Classify all 256 addresses, in octet order."""
    device_index, customer_index, session_index = _build_indexes(devices, customers, sessions)
    rogue_set = set(rogue_ips)
    return [
        _resolve(octet, subnet, device_index, customer_index, session_index, rogue_set)
        for octet in range(TOTAL_ADDRESSES)
    ]


def used_count(
    subnet: Subnet,
    devices: Iterable[Device],
    customers: Iterable[Customer],
    sessions: Iterable[LeaseSession] = (),
) -> int:
    """Reserved + statically assigned + leased addresses."""
    return sum(1 for c in classify_subnet(subnet, devices, customers, sessions) if c.is_used)


def subnet_utilization(
    subnet: Subnet,
    devices: Iterable[Device],
    customers: Iterable[Customer],
    sessions: Iterable[LeaseSession] = (),
) -> int:
    return percent(used_count(subnet, devices, customers, sessions), TOTAL_ADDRESSES)


def global_utilization(
    subnets: List[Subnet],
    devices: List[Device],
    customers: List[Customer],
    sessions: List[LeaseSession] = (),
) -> int:
    """Utilization across every managed subnet, weighted by address count."""
    if not subnets:
        return 0
    total_used = sum(used_count(s, devices, customers, sessions) for s in subnets)
    return percent(total_used, TOTAL_ADDRESSES * len(subnets))


def subnet_summary(
    subnet: Subnet,
    devices: Iterable[Device],
    customers: Iterable[Customer],
    sessions: Iterable[LeaseSession] = (),
    rogue_ips: Iterable[str] = (),
) -> dict:
    """Per-category counts for one subnet."""
    classifications = classify_subnet(subnet, devices, customers, sessions, rogue_ips)

    def count(status, kind=None):
        return sum(1 for c in classifications
                   if c.status == status and (kind is None or c.kind == kind))

    used = sum(1 for c in classifications if c.is_used)
    return {
        "prefix": subnet.prefix,
        "cidr": subnet.cidr,
        "name": subnet.name,
        "total": TOTAL_ADDRESSES,
        "used": used,
        "free": TOTAL_ADDRESSES - used,
        "reserved": count(STATUS_RESERVED),
        "devices": count(STATUS_ASSIGNED, "Device"),
        "customers": count(STATUS_ASSIGNED, "Customer"),
        "leased": count(STATUS_LEASED),
        "rogue": count(STATUS_ROGUE),
        "dhcp_free": count(STATUS_AVAILABLE, POOL_DHCP),
        "static_free": count(STATUS_AVAILABLE, POOL_STATIC),
        "utilization_pct": percent(used, TOTAL_ADDRESSES),
    }


def scan_for_rogues(
    subnet: Subnet,
    devices: Iterable[Device],
    customers: Iterable[Customer],
    sessions: Iterable[LeaseSession] = (),
    count: int = DEFAULT_SCAN_COUNT,
    rng: Optional[random.Random] = None,
) -> List[str]:
    """Simulated network probe returning addresses that answer but match no record.

    Best effort: samples `count` host octets and discards any that collide with
    a known device, customer or session, so fewer results than requested is normal.
    """
    if count < 0:
        raise PreconditionViolation(f"Scan count cannot be negative, got {count}")
    rng = rng or random.Random()

    candidates = range(SCAN_FIRST_OCTET, SCAN_LAST_OCTET + 1)
    sampled = rng.sample(candidates, min(count, len(candidates)))

    known = set(_index_by_ip(devices)) | set(_index_by_ip(customers)) | set(_index_by_ip(sessions))
    found = sorted(o for o in sampled if subnet.full_ip(o) not in known)

    logger.info(
        "Rogue scan of {} reported {} address(es), {} discarded as known",
        subnet.cidr, len(found), len(sampled) - len(found),
    )
    return [subnet.full_ip(o) for o in found]


def request_assign(
    ip_address: str,
    subnet: Subnet,
    devices: Iterable[Device],
    customers: Iterable[Customer],
    sessions: Iterable[LeaseSession] = (),
    rogue_ips: Iterable[str] = (),
) -> AssignmentIntent:
    """Build an assignment intent for a free or rogue address.

    Raises NonAssignableAddressError for reserved, assigned or leased addresses.
    Nothing is written here; the inventory store persists the intent.
    """
    octet = subnet.octet_of(ip_address)
    if octet is None:
        raise PreconditionViolation(f"{ip_address!r} is not an address of {subnet.cidr}")

    classification = classify_address(octet, subnet, devices, customers, sessions, rogue_ips)
    if not classification.is_assignable:
        logger.debug("Rejected assignment of {}: {}", ip_address, classification.status)
        raise NonAssignableAddressError(classification.ip_address, classification)

    return AssignmentIntent(
        ip_address=classification.ip_address,
        subnet_prefix=subnet.prefix,
        previous_status=classification.status,
    )


def next_free_address(
    subnet: Subnet,
    devices: Iterable[Device],
    customers: Iterable[Customer],
    sessions: Iterable[LeaseSession] = (),
    rogue_ips: Iterable[str] = (),
    pool: str = POOL_STATIC,
) -> Optional[str]:
    """Lowest free address in the given pool ("Static" or "DHCP"), or None."""
    for c in classify_subnet(subnet, devices, customers, sessions, rogue_ips):
        if c.status == STATUS_AVAILABLE and c.kind == pool:
            return c.ip_address
    return None
