"""Default configuration constants for the NetOps Resource Allocation console."""

# Address space (/24 subnets only)
TOTAL_ADDRESSES = 256
NETWORK_OCTET = 0
GATEWAY_OCTET = 1
BROADCAST_OCTET = 255

# Classification vocabulary
STATUS_RESERVED = "RESERVED"
STATUS_ASSIGNED = "ASSIGNED"
STATUS_LEASED = "LEASED"
STATUS_ROGUE = "ROGUE"
STATUS_AVAILABLE = "AVAILABLE"

# Statuses counted as "used" in utilization figures (rogues are not)
USED_STATUSES = {STATUS_ASSIGNED, STATUS_RESERVED, STATUS_LEASED}

# Statuses an operator may request an assignment for
ASSIGNABLE_STATUSES = {STATUS_AVAILABLE, STATUS_ROGUE}

POOL_DHCP = "DHCP"
POOL_STATIC = "Static"

# Only sessions in this state hold a lease
ACTIVE_SESSION_STATUS = "Active"

# Simulated rogue scan
DEFAULT_SCAN_COUNT = 5
SCAN_FIRST_OCTET = 2    # skip network + gateway
SCAN_LAST_OCTET = 254   # skip broadcast

# Rack geometry
TOTAL_UNITS = 42
DEFAULT_U_HEIGHT = 1

# Move validation outcomes
MOVE_OK = "ok"
MOVE_COLLISION = "collision"
MOVE_OUT_OF_BOUNDS = "out_of_bounds"

# Nominal power draw per device type (watts)
POWER_DRAW_WATTS = {
    "Router": 250,
    "Switch": 80,
    "OLT": 350,
    "ONU": 10,
    "Server": 400,
    "Firewall": 150,
}
DEFAULT_POWER_DRAW_WATTS = 50

# Watts -> BTU/hr
BTU_PER_WATT = 3.41

DEVICE_TYPES = list(POWER_DRAW_WATTS.keys())
DEVICE_STATUSES = ["Pending Validation", "Active", "Maintenance", "Retired"]

# Alert thresholds (percent)
SUBNET_SATURATION_PCT = 80
RACK_SATURATION_PCT = 85

# Subnets managed when no subnet sheet is uploaded
DEFAULT_SUBNETS = [
    {"Prefix": "103.10.10", "Name": "Core Infrastructure", "DHCP Start": None, "DHCP End": None},
    {"Prefix": "172.16.20", "Name": "Distribution / OLT", "DHCP Start": 100, "DHCP End": 200},
    {"Prefix": "10.20.30", "Name": "Subscriber NAT Pool", "DHCP Start": 50, "DHCP End": 250},
]
