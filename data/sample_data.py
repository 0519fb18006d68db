"""Generate synthetic inventory datasets for the NetOps Resource Allocation console."""

import pandas as pd
import random
import os

from config.defaults import DEFAULT_SUBNETS


def generate_devices_df() -> pd.DataFrame:
    """Core and distribution gear: two racks at the POP plus a few unracked units."""
    rows = [
        {"Device ID": "DEV-001", "Name": "Core-Router-JKT", "Type": "Router", "Model": "MX204",
         "IP Address": "103.10.10.2", "Status": "Active", "Location": "POP Jakarta",
         "Rack ID": "RACK-JKT-01", "U Position": 40, "U Height": 2},
        {"Device ID": "DEV-002", "Name": "Edge-Firewall-01", "Type": "Firewall", "Model": "FG-600E",
         "IP Address": "103.10.10.3", "Status": "Active", "Location": "POP Jakarta",
         "Rack ID": "RACK-JKT-01", "U Position": 37, "U Height": 1},
        {"Device ID": "DEV-003", "Name": "Agg-Switch-01", "Type": "Switch", "Model": "S6720",
         "IP Address": "172.16.20.2", "Status": "Active", "Location": "POP Jakarta",
         "Rack ID": "RACK-JKT-01", "U Position": 35, "U Height": 1},
        {"Device ID": "DEV-004", "Name": "OLT-Robinson", "Type": "OLT", "Model": "C320",
         "IP Address": "172.16.30.5", "Status": "Active", "Location": "POP Jakarta",
         "Rack ID": "RACK-JKT-01", "U Position": 30, "U Height": 4},
        {"Device ID": "DEV-005", "Name": "RADIUS-Server", "Type": "Server", "Model": "R650",
         "IP Address": "103.10.10.10", "Status": "Active", "Location": "POP Jakarta",
         "Rack ID": "RACK-JKT-02", "U Position": 20, "U Height": 2},
        {"Device ID": "DEV-006", "Name": "NMS-Server", "Type": "Server", "Model": "R450",
         "IP Address": "103.10.10.11", "Status": "Maintenance", "Location": "POP Jakarta",
         "Rack ID": "RACK-JKT-02", "U Position": 17, "U Height": 1},
        {"Device ID": "DEV-007", "Name": "Access-Switch-Spare", "Type": "Switch", "Model": "S5735",
         "IP Address": None, "Status": "Pending Validation", "Location": "POP Jakarta",
         "Rack ID": "RACK-JKT-02", "U Position": None, "U Height": 1},
        {"Device ID": "DEV-008", "Name": "OLT-Bekasi", "Type": "OLT", "Model": "MA5800",
         "IP Address": "172.16.20.9", "Status": "Pending Validation", "Location": "Warehouse",
         "Rack ID": None, "U Position": None, "U Height": 2},
    ]
    return pd.DataFrame(rows)


def generate_customers_df() -> pd.DataFrame:
    """Subscribers; business customers carry static addresses."""
    random.seed(42)
    packages = ["Home 30M", "Home 50M", "Business 100M", "Dedicated 200M"]
    rows = []
    for i in range(1, 21):
        package = random.choice(packages)
        static = package.startswith(("Business", "Dedicated"))
        rows.append({
            "Customer ID": f"CID-25{i:04d}",
            "Name": f"Subscriber {i:02d}",
            "Status": random.choice(["Active", "Active", "Active", "Suspended"]),
            "Package": package,
            "IP Address": f"103.10.10.{100 + i}" if static else None,
        })
    return pd.DataFrame(rows)


def generate_sessions_df() -> pd.DataFrame:
    """Active PPPoE/DHCP sessions for residential subscribers."""
    random.seed(7)
    octets = random.sample(range(50, 251), 30)
    rows = []
    for i, octet in enumerate(octets, start=1):
        rows.append({
            "Session ID": f"SES-{i:05d}",
            "Username": f"user{i:03d}",
            "Customer ID": f"CID-25{i:04d}" if i <= 20 else None,
            "IP Address": f"10.20.30.{octet}",
            "Protocol": random.choice(["PPPoE", "PPPoE", "DHCP"]),
            "Status": "Active" if i % 10 else "Closed",
            "Start Time": f"2025-11-{(i % 28) + 1:02d}T08:00:00",
        })
    return pd.DataFrame(rows)


def generate_subnets_df() -> pd.DataFrame:
    return pd.DataFrame(DEFAULT_SUBNETS)


def generate_sample_csvs(output_dir: str):
    """Write sample CSV files to the given directory."""
    os.makedirs(output_dir, exist_ok=True)
    generate_devices_df().to_csv(os.path.join(output_dir, "devices.csv"), index=False)
    generate_customers_df().to_csv(os.path.join(output_dir, "customers.csv"), index=False)
    generate_sessions_df().to_csv(os.path.join(output_dir, "sessions.csv"), index=False)
    generate_subnets_df().to_csv(os.path.join(output_dir, "subnets.csv"), index=False)


def generate_sample_excel(output_dir: str):
    """Write a single multi-tab Excel workbook with all four datasets."""
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, "sample_inventory.xlsx")
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        generate_devices_df().to_excel(writer, sheet_name="Devices", index=False)
        generate_customers_df().to_excel(writer, sheet_name="Customers", index=False)
        generate_sessions_df().to_excel(writer, sheet_name="Sessions", index=False)
        generate_subnets_df().to_excel(writer, sheet_name="Subnets", index=False)


if __name__ == "__main__":
    out = os.path.join(os.path.dirname(__file__), "..", "sample_files")
    generate_sample_csvs(out)
    generate_sample_excel(out)
    print("Sample CSV and Excel files generated in sample_files/")
