"""Data models for inventory filters, address lookup strategies and state changes."""

from __future__ import annotations

from dataclasses import dataclass
from ipaddress import IPv4Address, IPv6Address

IPAddress = IPv4Address | IPv6Address


@dataclass(frozen=True)
class Ec2Filter:
    """A single describe_instances filter predicate."""

    name: str
    value: str

    def to_boto(self) -> dict[str, object]:
        """Render in the shape boto3 expects inside ``Filters=[...]``."""
        return {"Name": self.name, "Values": [self.value]}


@dataclass(frozen=True)
class AddressFilter:
    """One row of the address-to-instance lookup table."""

    strategy: str
    filter_name: str  # EC2 filter matched against the address
    ip_version: int  # 4 or 6

    def filter_for(self, address: IPAddress) -> Ec2Filter | None:
        """Build the filter for this address, or None if the address family does not apply."""
        if address.version != self.ip_version:
            return None
        return Ec2Filter(name=self.filter_name, value=str(address))


# Every row is tried for every address, even after an earlier row matched.
ADDRESS_FILTERS: tuple[AddressFilter, ...] = (
    AddressFilter("public-ip", "ip-address", 4),
    AddressFilter("public-eip", "network-interface.addresses.association.public-ip", 4),
    AddressFilter("private-ip", "private-ip-address", 4),
    AddressFilter("private-netif-ip", "network-interface.addresses.private-ip-address", 4),
    AddressFilter("netif-ipv6", "network-interface.ipv6-addresses.ipv6-address", 6),
)


@dataclass(frozen=True)
class InstanceStateChange:
    """Previous and current state of one instance as reported by a lifecycle call."""

    instance_id: str
    previous_state: str
    current_state: str

    @classmethod
    def from_boto(cls, raw: dict) -> InstanceStateChange:
        return cls(
            instance_id=raw.get("InstanceId") or "",
            previous_state=(raw.get("PreviousState") or {}).get("Name") or "",
            current_state=(raw.get("CurrentState") or {}).get("Name") or "",
        )

    def __str__(self) -> str:
        return f"{self.instance_id}: {self.previous_state} -> {self.current_state}"
