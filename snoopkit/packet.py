"""A captured frame together with the headers found in it."""

from __future__ import annotations

import dataclasses
from typing import Any, Optional

from snoopkit.types import (
    ETHERTYPE_ARP,
    ETHERTYPE_IP,
    IPPROTO_ICMP,
    IPPROTO_TCP,
    IPPROTO_UDP,
    ArpHeader,
    EthHeader,
    IpHeader,
    LinkType,
)

_TCP_MIN = 20
_UDP_LEN = 8
_ICMP_LEN = 8


@dataclasses.dataclass
class PacketHeader:
    """Capture record header: timestamp and lengths."""

    ts_sec: int = 0
    ts_usec: int = 0
    caplen: int = 0
    length: int = 0


@dataclasses.dataclass
class FlowValue:
    """Per-flow counters."""

    packets: int = 0
    bytes: int = 0
    ts_sec: int = 0
    ts_usec: int = 0
    created: bool = False
    total_mem: Optional[bytearray] = None


@dataclasses.dataclass
class Packet:
    """A frame and the layers parsed out of it.

    ``tcp_hdr``, ``udp_hdr`` and ``icmp_hdr`` hold the raw header bytes;
    ``data`` holds the transport payload.
    """

    header: Optional[PacketHeader] = None
    raw: bytes = b""
    link_type: int = LinkType.NULL
    eth_hdr: Optional[EthHeader] = None
    net_type: int = 0
    ip_hdr: Optional[IpHeader] = None
    arp_hdr: Optional[ArpHeader] = None
    proto: int = 0
    tcp_hdr: Optional[bytes] = None
    udp_hdr: Optional[bytes] = None
    icmp_hdr: Optional[bytes] = None
    data: bytes = b""
    drop: bool = False
    flow_key: Any = None
    flow_value: Optional[FlowValue] = None
    divert_addr: Any = None

    @property
    def data_len(self):
        return len(self.data)

    def clear(self):
        """Reset every field to its default."""
        for field in dataclasses.fields(self):
            if field.default_factory is not dataclasses.MISSING:
                value = field.default_factory()
            else:
                value = field.default
            setattr(self, field.name, value)

    def to_bytes(self):
        """The captured bytes, ``caplen`` of them."""
        if self.header is None:
            raise ValueError("packet holds no captured frame")
        return bytes(self.raw[: self.header.caplen])

    def parse(self):
        """Decode Ethernet, IPv4/ARP and TCP/UDP/ICMP layers.

        Returns True when an Ethernet header was found.
        """
        frame = self.to_bytes() if self.header is not None else bytes(self.raw)
        if self.link_type != LinkType.EN10MB or len(frame) < EthHeader.SIZE:
            return False
        self.eth_hdr = EthHeader.unpack(frame)
        self.net_type = self.eth_hdr.ether_type
        rest = frame[EthHeader.SIZE:]
        if self.net_type == ETHERTYPE_IP:
            self._parse_ip(rest)
        elif self.net_type == ETHERTYPE_ARP and len(rest) >= ArpHeader.SIZE:
            self.arp_hdr = ArpHeader.unpack(rest)
        return True

    def _parse_ip(self, buf):
        if len(buf) < IpHeader.SIZE:
            return
        hdr = IpHeader.unpack(buf)
        header_len = hdr.header_len * 4
        if hdr.version != 4 or header_len < IpHeader.SIZE or header_len > len(buf):
            return
        self.ip_hdr = hdr
        self.proto = hdr.protocol
        end = min(hdr.total_length, len(buf)) if hdr.total_length >= header_len else len(buf)
        segment = buf[header_len:end]
        if self.proto == IPPROTO_TCP:
            if len(segment) < _TCP_MIN:
                return
            offset = (segment[12] >> 4) * 4
            if offset < _TCP_MIN or offset > len(segment):
                return
            self.tcp_hdr = segment[:offset]
            self.data = segment[offset:]
        elif self.proto == IPPROTO_UDP:
            if len(segment) < _UDP_LEN:
                return
            self.udp_hdr = segment[:_UDP_LEN]
            self.data = segment[_UDP_LEN:]
        elif self.proto == IPPROTO_ICMP:
            if len(segment) >= _ICMP_LEN:
                self.icmp_hdr = segment[:_ICMP_LEN]