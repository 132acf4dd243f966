"""Addresses, link types and fixed protocol headers."""

from __future__ import annotations

import dataclasses
import enum
import functools
import ipaddress
import operator
import random
import re
import struct

ETHERTYPE_IP = 0x0800
ETHERTYPE_ARP = 0x0806
ARPHRD_ETHER = 1
ARPOP_REQUEST = 1
ARPOP_REPLY = 2
IPPROTO_ICMP = 1
IPPROTO_TCP = 6
IPPROTO_UDP = 17

IPTOS_LOWDELAY = 0x10
IPTOS_THROUGHPUT = 0x08
IPTOS_RELIABILITY = 0x04
IPTOS_LOWCOST = 0x02

IP_RF = 0x8000
IP_DF = 0x4000
IP_MF = 0x2000
IP_OFFMASK = 0x1FFF

_MAC_PATTERN = re.compile("[-:]*".join(["([0-9A-Fa-f]{2})"] * 6))
_IP_MASK = 0xFFFFFFFF


@functools.total_ordering
class Mac:
    """An immutable six-byte hardware address."""

    SIZE = 6
    __slots__ = ("_value",)

    def __init__(self, value=bytes(6)):
        if isinstance(value, Mac):
            raw = value._value
        elif isinstance(value, str):
            raw = Mac.from_string(value)._value
        else:
            raw = bytes(value)
        if len(raw) != self.SIZE:
            raise ValueError(f"a MAC address is {self.SIZE} bytes, got {len(raw)}")
        self._value = raw

    @classmethod
    def from_string(cls, s):
        """Parse hex digit pairs, optionally separated by '-' or ':'."""
        match = _MAC_PATTERN.match(s)
        if match is None:
            raise ValueError(f"invalid MAC address: {s!r}")
        return cls(bytes(int(group, 16) for group in match.groups()))

    def __str__(self):
        text = self._value.hex().upper()
        return f"{text[:6]}-{text[6:]}"

    def __repr__(self):
        return f"Mac({str(self)!r})"

    def __bytes__(self):
        return self._value

    def __eq__(self, other):
        if isinstance(other, Mac):
            return self._value == other._value
        if isinstance(other, (bytes, bytearray)):
            return self._value == bytes(other)
        return NotImplemented

    def __lt__(self, other):
        if not isinstance(other, Mac):
            return NotImplemented
        return self._value < other._value

    def __hash__(self):
        return hash(self._value)

    def is_clean(self):
        return self == Mac.clean()

    def is_broadcast(self):
        return self == Mac.broadcast()

    def is_multicast(self):
        v = self._value
        return v[0] == 0x01 and v[1] == 0x00 and v[2] == 0x5E and (v[3] & 0x80) == 0

    @classmethod
    def random(cls):
        """Random unicast-looking address with the top bit of byte 0 cleared."""
        raw = bytearray(random.randbytes(cls.SIZE))
        raw[0] &= 0x7F
        return cls(raw)

    @classmethod
    def clean(cls):
        return cls(bytes(cls.SIZE))

    @classmethod
    def broadcast(cls):
        return cls(b"\xff" * cls.SIZE)


class Ip(int):
    """An IPv4 address held as a 32-bit unsigned integer."""

    def __new__(cls, value=0):
        if isinstance(value, str):
            try:
                number = int(ipaddress.IPv4Address(value.strip()))
            except ValueError as exc:
                raise ValueError(f"invalid IPv4 address: {value!r}") from exc
        elif isinstance(value, (bytes, bytearray)):
            if len(value) != 4:
                raise ValueError("an IPv4 address is 4 bytes")
            number = int.from_bytes(value, "big")
        else:
            number = operator.index(value)
        if not 0 <= number <= _IP_MASK:
            raise ValueError(f"IPv4 address out of range: {number}")
        return super().__new__(cls, number)

    def __str__(self):
        return str(ipaddress.IPv4Address(int(self)))

    def __repr__(self):
        return f"Ip({str(self)!r})"

    def __bytes__(self):
        return int(self).to_bytes(4, "big")

    def _wrap(self, number):
        return Ip(number & _IP_MASK)

    def __and__(self, other):
        if not isinstance(other, int):
            return NotImplemented
        return self._wrap(int(self) & int(other))

    __rand__ = __and__

    def __or__(self, other):
        if not isinstance(other, int):
            return NotImplemented
        return self._wrap(int(self) | int(other))

    __ror__ = __or__

    def __xor__(self, other):
        if not isinstance(other, int):
            return NotImplemented
        return self._wrap(int(self) ^ int(other))

    __rxor__ = __xor__

    def __add__(self, other):
        if not isinstance(other, int):
            return NotImplemented
        return self._wrap(int(self) + int(other))

    __radd__ = __add__

    def __sub__(self, other):
        if not isinstance(other, int):
            return NotImplemented
        return self._wrap(int(self) - int(other))

    def __invert__(self):
        return self._wrap(~int(self))

    def __hash__(self):
        return int.__hash__(self)


class LinkType(enum.IntEnum):
    """Data link types as reported by packet capture."""

    NULL = 0
    EN10MB = 1
    AX25 = 3
    IEEE802 = 6
    ARCNET = 7
    SLIP = 8
    PPP = 9
    FDDI = 10
    PPP_SERIAL = 50
    PPP_ETHER = 51
    ATM_RFC1483 = 100
    RAW = 101
    C_HDLC = 104
    IEEE802_11 = 105
    FRELAY = 107
    LOOP = 108
    LINUX_SLL = 113
    LTALK = 114
    PFLOG = 117
    PRISM_HEADER = 119
    IP_OVER_FC = 122
    SUNATM = 123
    IEEE802_11_RADIO = 127
    ARCNET_LINUX = 129
    APPLE_IP_OVER_IEEE1394 = 138
    MTP2_WITH_PHDR = 139
    MTP2 = 140
    MTP3 = 141
    SCCP = 142
    DOCSIS = 143
    LINUX_IRDA = 144
    USER0 = 147
    USER1 = 148
    USER2 = 149
    USER3 = 150
    USER4 = 151
    USER5 = 152
    USER6 = 153
    USER7 = 154
    USER8 = 155
    USER9 = 156
    USER10 = 157
    USER11 = 158
    USER12 = 159
    USER13 = 160
    USER14 = 161
    USER15 = 162
    IEEE802_11_RADIO_AVS = 163
    BACNET_MS_TP = 165
    PPP_PPPD = 166
    GPRS_LLC = 169
    LINUX_LAPD = 177
    BLUETOOTH_HCI_H4 = 187
    USB_LINUX = 189
    PPI = 192
    IEEE802_15_4 = 195
    SITA = 196
    ERF = 197
    BLUETOOTH_HCI_H4_WITH_PHDR = 201
    AX25_KISS = 202
    LAPD = 203
    PPP_WITH_DIR = 204
    C_HDLC_WITH_DIR = 205
    FRELAY_WITH_DIR = 206
    IPMB_LINUX = 209
    IEEE802_15_4_NONASK_PHY = 215
    USB_LINUX_MMAPPED = 220
    FC_2 = 224
    FC_2_WITH_FRAME_DELIMS = 225
    IPNET = 226
    CAN_SOCKETCAN = 227
    IPV4 = 228
    IPV6 = 229
    IEEE802_15_4_NOFCS = 230
    DBUS = 231
    DVB_CI = 235
    MUX27010 = 236
    STANAG_5066_D_PDU = 237
    NFLOG = 239
    NETANALYZER = 240
    NETANALYZER_TRANSPARENT = 241
    IPOIB = 242
    MPEG_2_TS = 243
    NG40 = 244
    NFC_LLCP = 245


def _pack(fmt, *values):
    try:
        return struct.pack(fmt, *values)
    except struct.error as exc:
        raise ValueError(str(exc)) from exc


def _unpack(fmt, data, name):
    size = struct.calcsize(fmt)
    if len(data) < size:
        raise ValueError(f"{name} needs {size} bytes, got {len(data)}")
    return struct.unpack_from(fmt, data)


@dataclasses.dataclass
class EthHeader:
    """Ethernet II header."""

    dst: Mac = dataclasses.field(default_factory=Mac.clean)
    src: Mac = dataclasses.field(default_factory=Mac.clean)
    ether_type: int = 0

    FORMAT = "!6s6sH"
    SIZE = 14

    def pack(self):
        return _pack(self.FORMAT, bytes(self.dst), bytes(self.src), self.ether_type)

    @classmethod
    def unpack(cls, data):
        dst, src, ether_type = _unpack(cls.FORMAT, data, "Ethernet header")
        return cls(Mac(dst), Mac(src), ether_type)


@dataclasses.dataclass
class ArpHeader:
    """ARP header for Ethernet/IPv4."""

    hardware_type: int = ARPHRD_ETHER
    protocol_type: int = ETHERTYPE_IP
    hardware_len: int = Mac.SIZE
    protocol_len: int = 4
    operation: int = ARPOP_REQUEST
    sender_mac: Mac = dataclasses.field(default_factory=Mac.clean)
    sender_ip: Ip = Ip(0)
    target_mac: Mac = dataclasses.field(default_factory=Mac.clean)
    target_ip: Ip = Ip(0)

    FORMAT = "!HHBBH6sI6sI"
    SIZE = 28

    def pack(self):
        return _pack(
            self.FORMAT,
            self.hardware_type,
            self.protocol_type,
            self.hardware_len,
            self.protocol_len,
            self.operation,
            bytes(self.sender_mac),
            int(self.sender_ip),
            bytes(self.target_mac),
            int(self.target_ip),
        )

    @classmethod
    def unpack(cls, data):
        hrd, pro, hln, pln, op, sa, si, ta, ti = _unpack(cls.FORMAT, data, "ARP header")
        return cls(hrd, pro, hln, pln, op, Mac(sa), Ip(si), Mac(ta), Ip(ti))


@dataclasses.dataclass
class IpHeader:
    """IPv4 header without options."""

    version: int = 4
    header_len: int = 5
    tos: int = 0
    total_length: int = 0
    identification: int = 0
    fragment: int = 0
    ttl: int = 64
    protocol: int = 0
    checksum: int = 0
    src: Ip = Ip(0)
    dst: Ip = Ip(0)

    FORMAT = "!BBHHHBBHII"
    SIZE = 20

    def pack(self):
        if not (0 <= self.version <= 15 and 0 <= self.header_len <= 15):
            raise ValueError("version and header length must fit in four bits")
        return _pack(
            self.FORMAT,
            (self.version << 4) | self.header_len,
            self.tos,
            self.total_length,
            self.identification,
            self.fragment,
            self.ttl,
            self.protocol,
            self.checksum,
            int(self.src),
            int(self.dst),
        )

    @classmethod
    def unpack(cls, data):
        vhl, tos, length, ident, frag, ttl, proto, csum, src, dst = _unpack(
            cls.FORMAT, data, "IPv4 header"
        )
        return cls(vhl >> 4, vhl & 0x0F, tos, length, ident, frag, ttl, proto, csum, Ip(src), Ip(dst))


@dataclasses.dataclass
class DnsHeader:
    """DNS message header."""

    id: int = 0
    flags: int = 0
    num_q: int = 0
    num_answ_rr: int = 0
    num_auth_rr: int = 0
    num_addi_rr: int = 0

    FORMAT = "!HHHHHH"
    SIZE = 12

    def pack(self):
        return _pack(
            self.FORMAT,
            self.id,
            self.flags,
            self.num_q,
            self.num_answ_rr,
            self.num_auth_rr,
            self.num_addi_rr,
        )

    @classmethod
    def unpack(cls, data):
        return cls(*_unpack(cls.FORMAT, data, "DNS header"))