"""Schema validation for uploaded inventory files."""

import re
from dataclasses import dataclass, field
from typing import List, Optional
import pandas as pd
from loguru import logger

from config.defaults import TOTAL_UNITS, TOTAL_ADDRESSES, DEVICE_TYPES, DEVICE_STATUSES


@dataclass
class ValidationResult:
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


DEVICE_REQUIRED_COLUMNS = [
    "Device ID",
    "Name",
    "Type",
]

CUSTOMER_REQUIRED_COLUMNS = [
    "Customer ID",
    "Name",
]

SESSION_REQUIRED_COLUMNS = [
    "Session ID",
    "Username",
    "IP Address",
]

SUBNET_REQUIRED_COLUMNS = [
    "Prefix",
]

PREFIX_PATTERN = re.compile(r"^(\d{1,3})\.(\d{1,3})\.(\d{1,3})$")


def _check_required_columns(df: pd.DataFrame, required: List[str], file_label: str) -> ValidationResult:
    result = ValidationResult()
    missing = [col for col in required if col not in df.columns]
    if missing:
        result.is_valid = False
        result.errors.append(f"{file_label}: Missing required columns: {', '.join(missing)}")
    if df.empty:
        result.is_valid = False
        result.errors.append(f"{file_label}: File contains no data rows.")
    return result


def _check_duplicate_ids(df: pd.DataFrame, column: str, file_label: str, result: ValidationResult):
    dupes = df.duplicated(subset=[column], keep=False)
    if dupes.any():
        result.is_valid = False
        result.errors.append(f"{file_label}: Duplicate {column} values: {df[dupes][column].unique().tolist()}")


def _placement_overlaps(df: pd.DataFrame) -> List[str]:
    """Describe every pair of devices whose unit spans intersect within a rack."""
    mounted = df[df["Rack ID"].notna() & df["U Position"].notna()]
    problems = []
    for rack_id, group in mounted.groupby("Rack ID"):
        spans = []
        for _, row in group.iterrows():
            top = int(row["U Position"])
            height = int(row["U Height"]) if "U Height" in group.columns and pd.notna(row["U Height"]) else 1
            spans.append((str(row["Device ID"]), top - height + 1, top))
        spans.sort(key=lambda s: s[1])
        for i, (id_a, _, top_a) in enumerate(spans):
            for id_b, bottom_b, _ in spans[i + 1:]:
                if bottom_b > top_a:
                    break
                problems.append(f"{rack_id}: {id_a} overlaps {id_b}")
    return problems


def validate_devices(df: pd.DataFrame) -> ValidationResult:
    result = _check_required_columns(df, DEVICE_REQUIRED_COLUMNS, "Devices")
    if not result.is_valid:
        return result

    _check_duplicate_ids(df, "Device ID", "Devices", result)

    unknown_types = sorted(set(df["Type"].dropna().astype(str)) - set(DEVICE_TYPES))
    if unknown_types:
        result.warnings.append(
            f"Devices: Unknown device types {unknown_types} will use the default power draw."
        )

    if "Status" in df.columns:
        unknown_statuses = sorted(set(df["Status"].dropna().astype(str)) - set(DEVICE_STATUSES))
        if unknown_statuses:
            result.warnings.append(f"Devices: Unrecognised status values: {unknown_statuses}")

    if "U Height" in df.columns and (df["U Height"].dropna() < 1).any():
        result.is_valid = False
        result.errors.append("Devices: U Height must be at least 1.")

    if "U Position" in df.columns:
        positions = df["U Position"].dropna()
        if ((positions < 1) | (positions > TOTAL_UNITS)).any():
            result.is_valid = False
            result.errors.append(f"Devices: U Position must be between 1 and {TOTAL_UNITS}.")

        if "U Height" in df.columns:
            spans = df[df["U Position"].notna()]
            bottoms = spans["U Position"] - spans["U Height"].fillna(1) + 1
            if (bottoms < 1).any():
                result.is_valid = False
                result.errors.append("Devices: Some devices extend below U1 (U Position lower than U Height).")

        if "Rack ID" in df.columns and result.is_valid:
            overlaps = _placement_overlaps(df)
            if overlaps:
                result.is_valid = False
                result.errors.append(f"Devices: Overlapping rack placements: {'; '.join(overlaps)}")

            staged = df[df["Rack ID"].notna() & df["U Position"].isna()]
            if not staged.empty:
                result.warnings.append(
                    f"Devices: {len(staged)} device(s) assigned to a rack without a U position "
                    "will be listed as unmounted."
                )

    return result


def validate_customers(df: pd.DataFrame) -> ValidationResult:
    result = _check_required_columns(df, CUSTOMER_REQUIRED_COLUMNS, "Customers")
    if not result.is_valid:
        return result

    _check_duplicate_ids(df, "Customer ID", "Customers", result)
    return result


def validate_sessions(df: pd.DataFrame) -> ValidationResult:
    result = _check_required_columns(df, SESSION_REQUIRED_COLUMNS, "Sessions")
    if not result.is_valid:
        return result

    _check_duplicate_ids(df, "Session ID", "Sessions", result)
    return result


def validate_subnets(df: pd.DataFrame) -> ValidationResult:
    result = _check_required_columns(df, SUBNET_REQUIRED_COLUMNS, "Subnets")
    if not result.is_valid:
        return result

    for prefix in df["Prefix"].astype(str).str.strip():
        match = PREFIX_PATTERN.match(prefix)
        if not match or any(int(part) > 255 for part in match.groups()):
            result.is_valid = False
            result.errors.append(f"Subnets: '{prefix}' is not a three-octet prefix (e.g. 192.168.1).")

    _check_duplicate_ids(df, "Prefix", "Subnets", result)

    if "DHCP Start" in df.columns and "DHCP End" in df.columns:
        ranged = df[df["DHCP Start"].notna() | df["DHCP End"].notna()]
        for _, row in ranged.iterrows():
            start, end = row["DHCP Start"], row["DHCP End"]
            if pd.isna(start) or pd.isna(end):
                result.is_valid = False
                result.errors.append(f"Subnets: {row['Prefix']} has an incomplete DHCP range.")
            elif not 0 <= start <= end < TOTAL_ADDRESSES:
                result.is_valid = False
                result.errors.append(
                    f"Subnets: {row['Prefix']} DHCP range {int(start)}-{int(end)} must satisfy 0 <= start <= end <= 255."
                )

    return result


def validate_cross_file(
    devices_df: pd.DataFrame,
    customers_df: pd.DataFrame,
    sessions_df: Optional[pd.DataFrame] = None,
) -> ValidationResult:
    """Warn about addresses claimed by more than one record."""
    result = ValidationResult()
    claims = []
    for df, label in ((devices_df, "device"), (customers_df, "customer"), (sessions_df, "session")):
        if df is not None and "IP Address" in df.columns:
            for ip in df["IP Address"].dropna().astype(str).str.strip():
                if ip:
                    claims.append((ip, label))

    seen = {}
    for ip, label in claims:
        seen.setdefault(ip, []).append(label)

    conflicts = {ip: labels for ip, labels in seen.items() if len(labels) > 1}
    for ip, labels in sorted(conflicts.items()):
        result.warnings.append(
            f"{ip} is claimed by {len(labels)} records ({', '.join(labels)}). "
            "Devices take precedence over customers, customers over sessions."
        )
    if conflicts:
        logger.warning("{} address(es) claimed by multiple records", len(conflicts))
    return result
