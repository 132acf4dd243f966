"""Address configuration of one network interface."""

from __future__ import annotations

from snoopkit.types import Ip, Mac


class NetInfo:
    """Address, hardware address, subnet mask and gateway of an interface."""

    def __init__(self):
        self.ip = Ip(0)
        self.mac = Mac.clean()
        self.subnet = Ip(0)
        self.gateway = Ip(0)

    def __repr__(self):
        return (
            f"NetInfo(ip={self.ip}, mac={self.mac}, "
            f"subnet={self.subnet}, gateway={self.gateway})"
        )

    def __eq__(self, other):
        if not isinstance(other, NetInfo):
            return NotImplemented
        return (self.ip, self.mac, self.subnet, self.gateway) == (
            other.ip,
            other.mac,
            other.subnet,
            other.gateway,
        )

    def clear(self):
        self.ip = Ip(0)
        self.mac = Mac.clean()
        self.subnet = Ip(0)
        self.gateway = Ip(0)

    def assign(self, ip=0, mac=None, subnet=0, gateway=0):
        """Set all fields at once."""
        self.ip = Ip(ip)
        self.mac = Mac.clean() if mac is None else Mac(mac)
        self.subnet = Ip(subnet)
        self.gateway = Ip(gateway)
        return self

    def is_same_lan_ip(self, ip):
        """True when ``ip`` lies on this interface's subnet."""
        return (self.ip & self.subnet) == (Ip(ip) & self.subnet)

    def adj_ip(self, ip):
        """The next hop for ``ip``: itself on the LAN, else the gateway."""
        ip = Ip(ip)
        return ip if self.is_same_lan_ip(ip) else self.gateway

    def start_ip(self):
        """First host address of the subnet."""
        return (self.ip & self.subnet) + 1

    def end_ip(self):
        """Last address of the subnet."""
        return self.ip | ~self.subnet

    def load(self, element):
        self.ip = Ip(element.get("ip", str(self.ip)))
        self.mac = Mac(element.get("mac", str(self.mac)))
        self.subnet = Ip(element.get("subnet", str(self.subnet)))
        self.gateway = Ip(element.get("gateway", str(self.gateway)))

    def save(self, element):
        element.set("ip", str(self.ip))
        element.set("mac", str(self.mac))
        element.set("subnet", str(self.subnet))
        element.set("gateway", str(self.gateway))