"""Tests for the IPAM engine."""

import sys
import os
import random
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from models.customer import Customer
from models.device import Device
from models.session import LeaseSession
from models.subnet import Subnet
from engine.errors import NonAssignableAddressError, PreconditionViolation
from engine.ipam import (
    classify_address,
    classify_subnet,
    used_count,
    subnet_utilization,
    global_utilization,
    subnet_summary,
    scan_for_rogues,
    request_assign,
    next_free_address,
)


def make_subnet(prefix="10.0.0", dhcp=None):
    start, end = dhcp if dhcp else (None, None)
    return Subnet(prefix, "Test", start, end)


def make_device(device_id="DEV-1", ip="10.0.0.5", name="Core-Router"):
    return Device(device_id, name, "Router", ip_address=ip)


def make_customer(customer_id="CID-1", ip="10.0.0.5", name="Acme"):
    return Customer(customer_id, name, ip_address=ip)


def make_session(session_id="SES-1", ip="10.0.0.5", status="Active"):
    return LeaseSession(session_id, "user1", None, ip, status=status)


class TestClassifyAddress:
    def test_device_scenario(self):
        subnet = make_subnet()
        devices = [make_device()]

        c = classify_address(5, subnet, devices, [])
        assert c.status == "ASSIGNED"
        assert c.kind == "Device"
        assert c.ref_id == "DEV-1"

        assert classify_address(0, subnet, devices, []).kind == "Network"

        after = classify_address(5, subnet, [], [])
        assert after.status == "AVAILABLE"
        assert after.kind == "Static"

    def test_reserved_octets(self):
        subnet = make_subnet()
        assert classify_address(0, subnet, [], []).kind == "Network"
        assert classify_address(1, subnet, [], []).kind == "Gateway"
        assert classify_address(255, subnet, [], []).kind == "Broadcast"

    def test_reserved_beats_static_claims(self):
        subnet = make_subnet()
        customers = [make_customer(ip="10.0.0.1")]
        devices = [make_device(ip="10.0.0.255")]

        gateway = classify_address(1, subnet, devices, customers)
        assert gateway.status == "RESERVED"
        assert gateway.kind == "Gateway"
        assert classify_address(255, subnet, devices, customers).kind == "Broadcast"

    def test_device_beats_customer(self):
        c = classify_address(5, make_subnet(), [make_device()], [make_customer()])
        assert c.kind == "Device"

    def test_customer_beats_session(self):
        c = classify_address(5, make_subnet(), [], [make_customer()], [make_session()])
        assert c.status == "ASSIGNED"
        assert c.kind == "Customer"
        assert c.ref_id == "CID-1"

    def test_active_session_is_leased(self):
        c = classify_address(5, make_subnet(), [], [], [make_session()])
        assert c.status == "LEASED"
        assert c.ref_id == "SES-1"

    def test_closed_session_is_ignored(self):
        c = classify_address(5, make_subnet(), [], [], [make_session(status="Closed")])
        assert c.status == "AVAILABLE"

    def test_session_beats_rogue(self):
        c = classify_address(5, make_subnet(), [], [], [make_session()], rogue_ips=["10.0.0.5"])
        assert c.status == "LEASED"

    def test_rogue_when_unclaimed(self):
        c = classify_address(7, make_subnet(), [], [], rogue_ips=["10.0.0.7"])
        assert c.status == "ROGUE"
        assert c.is_assignable
        assert not c.is_used

    def test_rogue_on_reserved_octet_stays_reserved(self):
        c = classify_address(1, make_subnet(), [], [], rogue_ips=["10.0.0.1"])
        assert c.status == "RESERVED"

    def test_dhcp_range_is_inclusive(self):
        subnet = make_subnet(dhcp=(100, 200))
        assert classify_address(99, subnet, [], []).kind == "Static"
        assert classify_address(100, subnet, [], []).kind == "DHCP"
        assert classify_address(200, subnet, [], []).kind == "DHCP"
        assert classify_address(201, subnet, [], []).kind == "Static"

    def test_static_claim_inside_dhcp_range(self):
        subnet = make_subnet(dhcp=(2, 254))
        c = classify_address(5, subnet, [make_device()], [])
        assert c.status == "ASSIGNED"

    def test_records_from_other_subnets_do_not_match(self):
        c = classify_address(5, make_subnet(), [make_device(ip="10.0.1.5")], [])
        assert c.status == "AVAILABLE"

    @pytest.mark.parametrize("octet", [-1, 256, 1000, True, 5.0, "5"])
    def test_out_of_range_octet_is_rejected(self, octet):
        with pytest.raises(PreconditionViolation):
            classify_address(octet, make_subnet(), [], [])


class TestClassifySubnet:
    def test_every_address_gets_exactly_one_classification(self):
        subnet = make_subnet(dhcp=(100, 200))
        devices = [make_device(ip="10.0.0.5"), make_device("DEV-2", ip="10.0.0.150")]
        customers = [make_customer(ip="10.0.0.5"), make_customer("CID-2", ip="10.0.0.6")]
        sessions = [make_session(ip="10.0.0.6"), make_session("SES-2", ip="10.0.0.120")]
        rogue = ["10.0.0.120", "10.0.0.130"]

        result = classify_subnet(subnet, devices, customers, sessions, rogue)

        assert len(result) == 256
        assert [c.octet for c in result] == list(range(256))
        allowed = {"RESERVED", "ASSIGNED", "LEASED", "ROGUE", "AVAILABLE"}
        assert all(c.status in allowed for c in result)
        assert result[120].status == "LEASED"
        assert result[130].status == "ROGUE"
        assert result[6].kind == "Customer"

    def test_matches_single_address_classification(self):
        subnet = make_subnet(dhcp=(10, 20))
        devices = [make_device(ip="10.0.0.15")]
        customers = [make_customer(ip="10.0.0.30")]
        rogue = ["10.0.0.40"]

        grid = classify_subnet(subnet, devices, customers, [], rogue)
        for octet in (0, 1, 12, 15, 30, 40, 99, 255):
            single = classify_address(octet, subnet, devices, customers, [], rogue)
            assert grid[octet] == single

    def test_first_record_wins_on_duplicate_address(self):
        devices = [make_device("DEV-A", ip="10.0.0.9"), make_device("DEV-B", ip="10.0.0.9")]
        result = classify_subnet(make_subnet(), devices, [])
        assert result[9].ref_id == "DEV-A"


class TestUtilization:
    def test_empty_subnet_counts_reserved(self):
        assert used_count(make_subnet(), [], []) == 3
        assert subnet_utilization(make_subnet(), [], []) == 1  # 3/256 = 1.17%

    def test_rogue_not_counted_as_used(self):
        summary = subnet_summary(make_subnet(), [], [], rogue_ips=["10.0.0.9"])
        assert summary["used"] == 3
        assert summary["rogue"] == 1

    def test_leases_count_as_used(self):
        assert used_count(make_subnet(), [], [], [make_session(ip="10.0.0.50")]) == 4

    def test_half_rounds_up(self):
        # 3 reserved + 29 devices = 32 used -> exactly 12.5%
        devices = [make_device(f"DEV-{i}", ip=f"10.0.0.{i}") for i in range(2, 31)]
        assert used_count(make_subnet(), devices, []) == 32
        assert subnet_utilization(make_subnet(), devices, []) == 13

    def test_adding_assignment_never_decreases_used_count(self):
        subnet = make_subnet(dhcp=(100, 200))
        devices = []
        customers = [make_customer(ip="10.0.0.150")]
        sessions = [make_session(ip="10.0.0.160")]
        previous = used_count(subnet, devices, customers, sessions)
        # includes addresses already claimed and reserved ones
        for octet in (5, 5, 150, 160, 1, 180, 255, 42):
            devices = devices + [make_device(f"DEV-{len(devices)}", ip=f"10.0.0.{octet}")]
            current = used_count(subnet, devices, customers, sessions)
            assert current >= previous
            previous = current

    def test_removing_assignment_never_increases_used_count(self):
        subnet = make_subnet()
        devices = [make_device(f"DEV-{i}", ip=f"10.0.0.{i}") for i in (1, 5, 5, 9, 30)]
        previous = used_count(subnet, devices, [])
        while devices:
            devices = devices[1:]
            current = used_count(subnet, devices, [])
            assert current <= previous
            previous = current

    def test_global_utilization(self):
        busy = make_subnet("10.0.0")
        idle = make_subnet("10.0.1")
        devices = [make_device(f"DEV-{i}", ip=f"10.0.0.{i}") for i in range(2, 31)]
        # (32 + 3) / 512 = 6.84%
        assert global_utilization([busy, idle], devices, []) == 7

    def test_global_utilization_without_subnets(self):
        assert global_utilization([], [], []) == 0


class TestSubnetSummary:
    def test_category_counts(self):
        subnet = make_subnet(dhcp=(100, 109))
        summary = subnet_summary(
            subnet,
            [make_device(ip="10.0.0.5")],
            [make_customer(ip="10.0.0.6")],
            [make_session(ip="10.0.0.100")],
            rogue_ips=["10.0.0.7"],
        )
        assert summary["cidr"] == "10.0.0.0/24"
        assert summary["reserved"] == 3
        assert summary["devices"] == 1
        assert summary["customers"] == 1
        assert summary["leased"] == 1
        assert summary["rogue"] == 1
        assert summary["dhcp_free"] == 9
        assert summary["used"] == 6
        assert summary["free"] == 250
        assert summary["static_free"] == 256 - 6 - 1 - 9
        assert summary["utilization_pct"] == 2


class TestScanForRogues:
    def test_results_are_unclaimed_hosts(self):
        subnet = make_subnet()
        devices = [make_device(f"DEV-{i}", ip=f"10.0.0.{i}") for i in range(2, 100)]
        customers = [make_customer(ip="10.0.0.150")]

        found = scan_for_rogues(subnet, devices, customers, count=20, rng=random.Random(3))

        assert len(found) <= 20
        assert len(set(found)) == len(found)
        known = {d.ip_address for d in devices} | {"10.0.0.150"}
        for ip in found:
            octet = int(ip.rsplit(".", 1)[1])
            assert 2 <= octet <= 254
            assert ip.startswith("10.0.0.")
            assert ip not in known

    def test_sorted_by_octet(self):
        found = scan_for_rogues(make_subnet(), [], [], count=10, rng=random.Random(1))
        octets = [int(ip.rsplit(".", 1)[1]) for ip in found]
        assert octets == sorted(octets)
        assert len(found) == 10

    def test_fully_claimed_subnet_yields_nothing(self):
        devices = [make_device(f"DEV-{i}", ip=f"10.0.0.{i}") for i in range(2, 255)]
        assert scan_for_rogues(make_subnet(), devices, [], count=5, rng=random.Random(0)) == []

    def test_sessions_are_excluded(self):
        sessions = [make_session(f"SES-{i}", ip=f"10.0.0.{i}") for i in range(2, 255)]
        assert scan_for_rogues(make_subnet(), [], [], sessions, count=5) == []

    def test_zero_count(self):
        assert scan_for_rogues(make_subnet(), [], [], count=0) == []

    def test_negative_count_rejected(self):
        with pytest.raises(PreconditionViolation):
            scan_for_rogues(make_subnet(), [], [], count=-1)

    def test_does_not_mutate_records(self):
        devices = [make_device()]
        customers = [make_customer(ip="10.0.0.6")]
        scan_for_rogues(make_subnet(), devices, customers, count=50, rng=random.Random(9))
        assert devices == [make_device()]
        assert customers == [make_customer(ip="10.0.0.6")]


class TestRequestAssign:
    def test_free_address(self):
        intent = request_assign("10.0.0.20", make_subnet(), [], [])
        assert intent.ip_address == "10.0.0.20"
        assert intent.subnet_prefix == "10.0.0"
        assert intent.previous_status == "AVAILABLE"

    def test_free_dhcp_address(self):
        intent = request_assign("10.0.0.120", make_subnet(dhcp=(100, 200)), [], [])
        assert intent.previous_status == "AVAILABLE"

    def test_rogue_address(self):
        intent = request_assign("10.0.0.20", make_subnet(), [], [], rogue_ips=["10.0.0.20"])
        assert intent.previous_status == "ROGUE"

    def test_assigned_address_rejected(self):
        with pytest.raises(NonAssignableAddressError) as exc:
            request_assign("10.0.0.5", make_subnet(), [make_device()], [])
        assert exc.value.classification.kind == "Device"
        assert "10.0.0.5" in str(exc.value)

    def test_leased_address_rejected(self):
        with pytest.raises(NonAssignableAddressError):
            request_assign("10.0.0.5", make_subnet(), [], [], [make_session()])

    def test_reserved_address_rejected(self):
        with pytest.raises(NonAssignableAddressError):
            request_assign("10.0.0.1", make_subnet(), [], [])

    def test_rejection_has_no_side_effect(self):
        devices = [make_device()]
        with pytest.raises(NonAssignableAddressError):
            request_assign("10.0.0.5", make_subnet(), devices, [])
        assert devices == [make_device()]

    @pytest.mark.parametrize("ip", ["10.0.1.5", "10.0.0.256", "10.0.0.x", "", "10.0.0", "10.0.0.\u00b2", "10.0.0.\u0665"])
    def test_address_outside_subnet_rejected(self, ip):
        with pytest.raises(PreconditionViolation):
            request_assign(ip, make_subnet(), [], [])

    def test_octet_of_accepts_ascii_digits_only(self):
        subnet = make_subnet()
        assert subnet.octet_of("10.0.0.42") == 42
        assert subnet.octet_of("10.0.0.\u00b2") is None
        assert subnet.octet_of("10.0.0.\u0665") is None


class TestNextFreeAddress:
    def test_lowest_static_address(self):
        devices = [make_device(ip="10.0.0.2")]
        assert next_free_address(make_subnet(), devices, []) == "10.0.0.3"

    def test_dhcp_pool(self):
        subnet = make_subnet(dhcp=(100, 200))
        sessions = [make_session(ip="10.0.0.100")]
        assert next_free_address(subnet, [], [], sessions, pool="DHCP") == "10.0.0.101"

    def test_rogue_is_skipped(self):
        assert next_free_address(make_subnet(), [], [], rogue_ips=["10.0.0.2"]) == "10.0.0.3"

    def test_no_static_space(self):
        assert next_free_address(make_subnet(dhcp=(2, 254)), [], []) is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
