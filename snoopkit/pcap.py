"""Captures that read the pcap record format, plus pcap file reading and writing."""

from __future__ import annotations

import logging
import re
import struct
import time

from snoopkit.base import (
    DEFAULT_READ_TIMEOUT,
    DEFAULT_SNAP_LEN,
    CaptureType,
    ErrorCode,
    SnoopError,
)
from snoopkit.capture import Capture
from snoopkit.packet import Packet, PacketHeader
from snoopkit.types import IPPROTO_ICMP, IPPROTO_TCP, IPPROTO_UDP, LinkType

_log = logging.getLogger(__name__)

PCAP_OPENFLAG_PROMISCUOUS = 1

_MAGIC_USEC = 0xA1B2C3D4
_MAGIC_NSEC = 0xA1B23C4D
_GLOBAL_FORMAT = "IHHiIII"
_GLOBAL_SIZE = 24
_RECORD_SIZE = 16


class PcapReader:
    """Iterates over the records of a pcap stream as ``(PacketHeader, bytes)``."""

    def __init__(self, stream):
        self._stream = stream
        head = stream.read(_GLOBAL_SIZE)
        if len(head) < _GLOBAL_SIZE:
            raise SnoopError("pcap global header is truncated", ErrorCode.IN_PCAP_OPEN)
        for order in "<>":
            (magic,) = struct.unpack(order + "I", head[:4])
            if magic in (_MAGIC_USEC, _MAGIC_NSEC):
                break
        else:
            raise SnoopError(f"bad pcap magic {head[:4].hex()}", ErrorCode.IN_PCAP_OPEN)
        self.nanosecond = magic == _MAGIC_NSEC
        (
            _,
            self.version_major,
            self.version_minor,
            self.this_zone,
            self.sigfigs,
            self.snap_len,
            self.link_type,
        ) = struct.unpack(order + _GLOBAL_FORMAT, head)
        self._record = struct.Struct(order + "IIII")

    def __iter__(self):
        while True:
            head = self._stream.read(_RECORD_SIZE)
            if not head:
                return
            if len(head) < _RECORD_SIZE:
                raise SnoopError("pcap record header is truncated", ErrorCode.IN_PCAP_NEXT_EX)
            sec, frac, caplen, length = self._record.unpack(head)
            data = self._stream.read(caplen)
            if len(data) < caplen:
                raise SnoopError("pcap record data is truncated", ErrorCode.IN_PCAP_NEXT_EX)
            usec = frac // 1000 if self.nanosecond else frac
            yield PacketHeader(sec, usec, caplen, length), data


class PcapWriter:
    """Writes pcap records (microsecond timestamps, little-endian) to a stream."""

    def __init__(self, stream, link_type=LinkType.EN10MB, snap_len=65535):
        if snap_len <= 0:
            raise ValueError("snap length must be positive")
        self._stream = stream
        self.link_type = int(link_type)
        self.snap_len = snap_len
        stream.write(
            struct.pack("<" + _GLOBAL_FORMAT, _MAGIC_USEC, 2, 4, 0, 0, snap_len, self.link_type)
        )

    def write(self, header, data):
        """Write one record; a None header stamps it with the current time.

        Returns the number of captured bytes stored.
        """
        data = bytes(data)
        if header is None:
            now = time.time()
            sec = int(now)
            usec = int((now - sec) * 1_000_000)
            length = len(data)
        else:
            sec, usec = header.ts_sec, header.ts_usec
            length = header.length or len(data)
        captured = data[: self.snap_len]
        self._stream.write(struct.pack("<IIII", sec, usec, len(captured), length))
        self._stream.write(captured)
        return len(captured)


_PRIMITIVES = {
    "ip": lambda p: p.ip_hdr is not None,
    "arp": lambda p: p.arp_hdr is not None,
    "tcp": lambda p: p.ip_hdr is not None and p.proto == IPPROTO_TCP,
    "udp": lambda p: p.ip_hdr is not None and p.proto == IPPROTO_UDP,
    "icmp": lambda p: p.ip_hdr is not None and p.proto == IPPROTO_ICMP,
}

_LEXEME_PATTERN = re.compile(r"\(|\)|&&|\|\||!|[A-Za-z0-9_]+|\S")


class _FilterParser:
    """Compiles a small protocol filter: ip, arp, tcp, udp, icmp with and/or/not."""

    def __init__(self, expr):
        self.words = [w.lower() for w in _LEXEME_PATTERN.findall(expr)]
        self.pos = 0

    def parse(self):
        predicate = self._or()
        if self.pos != len(self.words):
            self._fail(f"unexpected {self.words[self.pos]!r}")
        return predicate

    def _peek(self):
        return self.words[self.pos] if self.pos < len(self.words) else None

    def _or(self):
        parts = [self._and()]
        while self._peek() in ("or", "||"):
            self.pos += 1
            parts.append(self._and())
        if len(parts) == 1:
            return parts[0]
        return lambda p, parts=tuple(parts): any(f(p) for f in parts)

    def _and(self):
        parts = [self._not()]
        while self._peek() in ("and", "&&"):
            self.pos += 1
            parts.append(self._not())
        if len(parts) == 1:
            return parts[0]
        return lambda p, parts=tuple(parts): all(f(p) for f in parts)

    def _not(self):
        word = self._peek()
        if word is None:
            self._fail("unexpected end of expression")
        self.pos += 1
        if word in ("not", "!"):
            inner = self._not()
            return lambda p: not inner(p)
        if word == "(":
            inner = self._or()
            if self._peek() != ")":
                self._fail("missing ')'")
            self.pos += 1
            return inner
        primitive = _PRIMITIVES.get(word)
        if primitive is None:
            self._fail(f"unknown term {word!r}")
        return primitive

    @staticmethod
    def _fail(message):
        raise SnoopError(f"error in pcap_compile({message})", ErrorCode.IN_PCAP_COMPILE)


class PcapCapture(Capture):
    """A capture reading pcap records, with an optional filter expression."""

    def __init__(self):
        super().__init__()
        self.filter = ""
        self.snap_len = DEFAULT_SNAP_LEN
        self.flags = PCAP_OPENFLAG_PROMISCUOUS
        self.read_timeout = DEFAULT_READ_TIMEOUT
        self.writer = None
        self._stream = None
        self._records = None
        self._filter = None
        self._data_link = LinkType.NULL
        self._source = ""

    @property
    def source_name(self):
        """Name of the opened source, empty when closed."""
        return self._source

    def _pcap_open(self, path, source=None):
        _log.debug("source=%s", path)
        try:
            stream = open(path, "rb")
        except OSError as exc:
            raise SnoopError(f"error in pcap_open({exc})", ErrorCode.IN_PCAP_OPEN) from exc
        try:
            reader = PcapReader(stream)
        except BaseException:
            stream.close()
            raise
        self._stream = stream
        self._records = iter(reader)
        self._data_link = reader.link_type
        if self._data_link != LinkType.EN10MB:
            _log.warning("data link is %d source=%s", self._data_link, path)
        self._source = path if source is None else source
        filtering = self._data_link not in (LinkType.NFLOG, LinkType.USB_LINUX_MMAPPED)
        if filtering and self.filter:
            self._filter = _FilterParser(self.filter).parse()

    def _do_close(self):
        self._stop_thread()
        if self._stream is not None:
            self._stream.close()
        self._stream = None
        self._records = None
        self._filter = None
        self._data_link = LinkType.NULL
        self._source = ""
        super()._do_close()

    def read(self, packet):
        if not self._opened or self._records is None:
            raise SnoopError(
                f"not opened state({type(self).__name__})", ErrorCode.NOT_OPENED_STATE
            )
        link_type = self.data_link()
        for header, data in self._records:
            if self._filter is not None:
                probe = Packet(header=header, raw=data, link_type=link_type)
                probe.parse()
                if not self._filter(probe):
                    continue
            packet.clear()
            packet.header = header
            packet.raw = data
            packet.link_type = link_type
            if self.auto_parse:
                self.parse(packet)
            return header.caplen
        raise SnoopError("end of capture reached", ErrorCode.IN_PCAP_NEXT_EX)

    def write(self, packet):
        return self.write_bytes(packet.to_bytes())

    def write_bytes(self, buf):
        if self.writer is None:
            raise SnoopError("no output to send packets to", ErrorCode.NOT_WRITABLE)
        self.writer.write(None, buf)
        return len(buf)

    def capture_type(self):
        return CaptureType.OUT_OF_PATH

    def data_link(self):
        try:
            return LinkType(self._data_link)
        except ValueError:
            return self._data_link

    def relay(self, packet):
        raise SnoopError("relay not supported", ErrorCode.NOT_SUPPORTED)

    def load(self, element):
        super().load(element)
        self.filter = element.get("filter", self.filter)
        self.snap_len = int(element.get("snapLen", self.snap_len))
        self.flags = int(element.get("flags", self.flags))
        self.read_timeout = int(element.get("readTimeout", self.read_timeout))

    def save(self, element):
        super().save(element)
        element.set("filter", self.filter)
        element.set("snapLen", str(self.snap_len))
        element.set("flags", str(self.flags))
        element.set("readTimeout", str(self.read_timeout))


class SourcePcap(PcapCapture):
    """A pcap capture opened from the path in ``source``."""

    def __init__(self):
        super().__init__()
        self.source = ""

    def _do_open(self):
        self._pcap_open(self.source)
        super()._do_open()

    def load(self, element):
        super().load(element)
        self.source = element.get("source", self.source)

    def save(self, element):
        super().save(element)
        element.set("source", self.source)