"""Ordered, hashable keys identifying hosts, flows and sessions."""

from __future__ import annotations

import dataclasses

from snoopkit.types import Ip, Mac

_mac_field = dataclasses.field(default_factory=Mac.clean)


@dataclasses.dataclass(frozen=True, order=True)
class MacKey:
    """A single hardware address."""

    mac: Mac = dataclasses.field(default_factory=Mac.clean)


@dataclasses.dataclass(frozen=True, order=True)
class MacFlowKey:
    """A directed pair of hardware addresses, ordered by source then destination."""

    src_mac: Mac = dataclasses.field(default_factory=Mac.clean)
    dst_mac: Mac = dataclasses.field(default_factory=Mac.clean)

    def reverse(self):
        return MacFlowKey(self.dst_mac, self.src_mac)


@dataclasses.dataclass(frozen=True, order=True)
class MacSessionKey:
    """An undirected pair of hardware addresses."""

    mac1: Mac = dataclasses.field(default_factory=Mac.clean)
    mac2: Mac = dataclasses.field(default_factory=Mac.clean)


@dataclasses.dataclass(frozen=True, order=True)
class IpKey:
    """A single IPv4 address."""

    ip: Ip = Ip(0)


@dataclasses.dataclass(frozen=True, order=True)
class IpFlowKey:
    """A directed pair of IPv4 addresses."""

    src_ip: Ip = Ip(0)
    dst_ip: Ip = Ip(0)

    def reverse(self):
        return IpFlowKey(self.dst_ip, self.src_ip)


@dataclasses.dataclass(frozen=True, order=True)
class IpSessionKey:
    """An undirected pair of IPv4 addresses."""

    ip1: Ip = Ip(0)
    ip2: Ip = Ip(0)


@dataclasses.dataclass(frozen=True, order=True)
class PortKey:
    """A single port."""

    port: int = 0


@dataclasses.dataclass(frozen=True, order=True)
class PortFlowKey:
    """A directed pair of ports."""

    src_port: int = 0
    dst_port: int = 0

    def reverse(self):
        return PortFlowKey(self.dst_port, self.src_port)


@dataclasses.dataclass(frozen=True, order=True)
class PortSessionKey:
    """An undirected pair of ports."""

    port1: int = 0
    port2: int = 0


@dataclasses.dataclass(frozen=True, order=True)
class TransportKey:
    """An address and port, ordered by address then port."""

    ip: Ip = Ip(0)
    port: int = 0


TcpKey = TransportKey
UdpKey = TransportKey


@dataclasses.dataclass(frozen=True, order=True)
class TransportFlowKey:
    """A directed transport flow: source address/port to destination address/port."""

    src_ip: Ip = Ip(0)
    src_port: int = 0
    dst_ip: Ip = Ip(0)
    dst_port: int = 0

    def reverse(self):
        return TransportFlowKey(self.dst_ip, self.dst_port, self.src_ip, self.src_port)


TcpFlowKey = TransportFlowKey
UdpFlowKey = TransportFlowKey


@dataclasses.dataclass(frozen=True, order=True)
class TransportSessionKey:
    """An undirected transport session between two endpoints."""

    ip1: Ip = Ip(0)
    port1: int = 0
    ip2: Ip = Ip(0)
    port2: int = 0


TcpSessionKey = TransportSessionKey
UdpSessionKey = TransportSessionKey


@dataclasses.dataclass(frozen=True, order=True)
class TupleFlowKey:
    """A transport flow qualified by its IP protocol number."""

    proto: int = 0
    flow: TransportFlowKey = dataclasses.field(default_factory=TransportFlowKey)

    def reverse(self):
        return TupleFlowKey(self.proto, self.flow.reverse())