"""Known hosts: address pairs with an optional name, storable as XML."""

from __future__ import annotations

import dataclasses
import xml.etree.ElementTree as ET

from snoopkit.types import Ip, Mac


@dataclasses.dataclass
class Host:
    """A host on the local network."""

    ip: Ip = Ip(0)
    mac: Mac = dataclasses.field(default_factory=Mac.clean)
    name: str = ""

    def __post_init__(self):
        self.ip = Ip(self.ip)
        self.mac = Mac(self.mac)

    def load(self, element):
        """Read attributes from ``element``; missing ones keep their value."""
        self.ip = Ip(element.get("ip", str(self.ip)))
        self.mac = Mac(element.get("mac", str(self.mac)))
        self.name = element.get("name", self.name)

    def save(self, element):
        element.set("ip", str(self.ip))
        element.set("mac", str(self.mac))
        element.set("name", self.name)


class HostList(list):
    """A list of :class:`Host` entries."""

    def find_by_ip(self, ip):
        """Return the first host with address ``ip``, or None."""
        ip = Ip(ip)
        return next((host for host in self if host.ip == ip), None)

    def load(self, element):
        """Replace the contents with one host per child of ``element``."""
        self.clear()
        for child in element:
            host = Host()
            host.load(child)
            self.append(host)

    def save(self, element):
        """Replace the children of ``element`` with one ``host`` element per entry."""
        for child in list(element):
            element.remove(child)
        for host in self:
            host.save(ET.SubElement(element, "host"))