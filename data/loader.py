"""File upload parsing — CSV/XLSX into typed record lists."""

import pandas as pd
from typing import List, Optional, Tuple
from loguru import logger
from models.customer import Customer
from models.device import Device
from models.session import LeaseSession
from models.subnet import Subnet


def _opt_str(row, column: str) -> Optional[str]:
    if column not in row.index or pd.isna(row[column]):
        return None
    value = str(row[column]).strip()
    return value or None


def _opt_int(row, column: str) -> Optional[int]:
    if column not in row.index or pd.isna(row[column]):
        return None
    return int(row[column])


def parse_devices(df: pd.DataFrame) -> List[Device]:
    """Convert a devices DataFrame into Device objects."""
    devices = []
    for _, row in df.iterrows():
        height = _opt_int(row, "U Height")
        devices.append(Device(
            device_id=str(row["Device ID"]).strip(),
            name=str(row["Name"]).strip(),
            device_type=str(row["Type"]).strip(),
            model=_opt_str(row, "Model") or "",
            ip_address=_opt_str(row, "IP Address"),
            status=_opt_str(row, "Status") or "Active",
            location=_opt_str(row, "Location") or "",
            rack_id=_opt_str(row, "Rack ID"),
            u_position=_opt_int(row, "U Position"),
            u_height=height if height is not None else 1,
        ))
    return devices


def parse_customers(df: pd.DataFrame) -> List[Customer]:
    """Convert a customers DataFrame into Customer objects."""
    customers = []
    for _, row in df.iterrows():
        customers.append(Customer(
            customer_id=str(row["Customer ID"]).strip(),
            name=str(row["Name"]).strip(),
            status=_opt_str(row, "Status") or "Active",
            package_name=_opt_str(row, "Package") or "",
            ip_address=_opt_str(row, "IP Address"),
        ))
    return customers


def parse_sessions(df: pd.DataFrame) -> List[LeaseSession]:
    """Convert an active-sessions DataFrame into LeaseSession objects."""
    sessions = []
    for _, row in df.iterrows():
        start = None
        if "Start Time" in df.columns and pd.notna(row.get("Start Time")):
            start = pd.to_datetime(row["Start Time"]).to_pydatetime()
        sessions.append(LeaseSession(
            session_id=str(row["Session ID"]).strip(),
            username=str(row["Username"]).strip(),
            customer_id=_opt_str(row, "Customer ID"),
            ip_address=_opt_str(row, "IP Address"),
            protocol=_opt_str(row, "Protocol") or "PPPoE",
            status=_opt_str(row, "Status") or "Active",
            start_time=start,
        ))
    return sessions


def parse_subnets(df: pd.DataFrame) -> List[Subnet]:
    """Convert a subnets DataFrame into Subnet objects."""
    subnets = []
    for _, row in df.iterrows():
        subnets.append(Subnet(
            prefix=str(row["Prefix"]).strip(),
            name=_opt_str(row, "Name") or "",
            dhcp_start=_opt_int(row, "DHCP Start"),
            dhcp_end=_opt_int(row, "DHCP End"),
        ))
    return subnets


def load_file(uploaded_file) -> pd.DataFrame:
    """Load an uploaded file (CSV or XLSX) into a DataFrame."""
    name = uploaded_file.name.lower()
    if name.endswith(".csv"):
        return pd.read_csv(uploaded_file)
    elif name.endswith(".xlsx") or name.endswith(".xls"):
        return pd.read_excel(uploaded_file, engine="openpyxl")
    else:
        raise ValueError(f"Unsupported file format: {name}. Use CSV or XLSX.")


# Expected sheet names for multi-tab Excel (case-insensitive matching)
SHEET_ALIASES = {
    "devices": ["devices", "device", "inventory", "device inventory", "assets"],
    "customers": ["customers", "customer", "subscribers", "customer master"],
    "sessions": ["sessions", "session", "active sessions", "radius", "leases", "radius sessions"],
    "subnets": ["subnets", "subnet", "ipam", "ip pools", "pools"],
}

# Sheets that may be absent from a workbook
OPTIONAL_SHEETS = {"sessions", "subnets"}


def _match_sheet(sheet_names: List[str], category: str) -> str:
    """Find a sheet name matching the given category. Returns the matched name or raises."""
    aliases = SHEET_ALIASES[category]
    lower_map = {s.lower().strip(): s for s in sheet_names}
    for alias in aliases:
        if alias in lower_map:
            return lower_map[alias]
    raise ValueError(
        f"Could not find a sheet for '{category}'. "
        f"Expected one of: {aliases}. "
        f"Found sheets: {sheet_names}"
    )


def load_multi_sheet_excel(uploaded_file) -> Tuple[pd.DataFrame, pd.DataFrame, Optional[pd.DataFrame], Optional[pd.DataFrame]]:
    """Load an inventory workbook with Devices, Customers and optional Sessions/Subnets tabs.

    Sheet names are matched case-insensitively against SHEET_ALIASES.

    Returns (devices_df, customers_df, sessions_df, subnets_df); the last two
    are None when the workbook has no such sheet.
    """
    xl = pd.ExcelFile(uploaded_file, engine="openpyxl")
    sheet_names = xl.sheet_names

    frames = {}
    for category in SHEET_ALIASES:
        try:
            sheet = _match_sheet(sheet_names, category)
        except ValueError:
            if category in OPTIONAL_SHEETS:
                frames[category] = None
                continue
            raise
        frames[category] = pd.read_excel(xl, sheet_name=sheet)

    logger.info("Loaded workbook sheets: {}", [k for k, v in frames.items() if v is not None])
    return frames["devices"], frames["customers"], frames["sessions"], frames["subnets"]
