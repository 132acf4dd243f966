"""Network interfaces available for capture."""

from __future__ import annotations

import copy
import dataclasses
import functools
import logging
import socket
import struct
import time
import xml.etree.ElementTree as ET
from typing import Any, Callable, Optional

try:
    import fcntl
except ImportError:  # not available on every platform
    fcntl = None

from snoopkit.base import INVALID_ADAPTER_INDEX, ErrorCode, SnoopError
from snoopkit.netinfo import NetInfo
from snoopkit.packet import PacketHeader
from snoopkit.types import Ip, LinkType, Mac

_log = logging.getLogger(__name__)

_ETH_P_ALL = 0x0003
_SIOCGIFADDR = 0x8915
_SIOCGIFNETMASK = 0x891B


class _RawSocketDevice:
    """A live link-layer socket bound to one interface."""

    link_type = LinkType.EN10MB

    def __init__(self, name, snap_len, read_timeout):
        self.name = name
        self.snap_len = snap_len
        try:
            sock = socket.socket(socket.AF_PACKET, socket.SOCK_RAW, socket.htons(_ETH_P_ALL))
        except (OSError, AttributeError) as exc:
            raise SnoopError(f"error in pcap_open({exc})", ErrorCode.IN_PCAP_OPEN) from exc
        try:
            sock.bind((name, 0))
            sock.settimeout(max(read_timeout, 1) / 1000.0)
        except OSError as exc:
            sock.close()
            raise SnoopError(f"error in pcap_open({exc})", ErrorCode.IN_PCAP_OPEN) from exc
        self._sock = sock

    def recv(self):
        """Return ``(PacketHeader, bytes)``, or None when the read timed out."""
        try:
            data = self._sock.recv(self.snap_len)
        except TimeoutError:
            return None
        except OSError as exc:
            raise SnoopError(f"receive failed({exc})", ErrorCode.IN_PCAP_NEXT_EX) from exc
        now = time.time()
        sec = int(now)
        header = PacketHeader(sec, int((now - sec) * 1_000_000), len(data), len(data))
        return header, data

    def send(self, buf):
        try:
            return self._sock.send(bytes(buf))
        except OSError as exc:
            raise SnoopError(f"send failed({exc})", ErrorCode.NOT_WRITABLE) from exc

    def close(self):
        self._sock.close()


def _system_mac(name):
    try:
        with open(f"/sys/class/net/{name}/address", encoding="ascii") as handle:
            text = handle.read().strip()
    except OSError:
        return Mac.clean()
    try:
        return Mac.from_string(text)
    except ValueError:
        return Mac.clean()


def _ioctl_ip(sock, request, name):
    packed = struct.pack("256s", name.encode()[:15])
    try:
        result = fcntl.ioctl(sock.fileno(), request, packed)
    except OSError:
        return Ip(0)
    return Ip(result[20:24])


def _system_net_info(name):
    info = NetInfo()
    info.mac = _system_mac(name)
    if fcntl is None:
        return info
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    except OSError:
        return info
    with sock:
        info.ip = _ioctl_ip(sock, _SIOCGIFADDR, name)
        info.subnet = _ioctl_ip(sock, _SIOCGIFNETMASK, name)
    return info


@dataclasses.dataclass(eq=False)
class Interface:
    """One capture interface.

    ``dev`` opens the interface: ``dev(snap_len, read_timeout)`` returns a
    device with ``recv()``, ``send(buf)`` and ``close()``.
    """

    index: int = INVALID_ADAPTER_INDEX
    name: str = ""
    description: str = ""
    dev: Optional[Callable[..., Any]] = None
    net_info: NetInfo = dataclasses.field(default_factory=NetInfo)

    def __eq__(self, other):
        if not isinstance(other, Interface):
            return NotImplemented
        return (self.index, self.name, self.description) == (
            other.index,
            other.name,
            other.description,
        )

    def load(self, element):
        self.index = int(element.get("index", self.index))
        self.name = element.get("name", self.name)
        self.description = element.get("description", self.description)

    def save(self, element):
        element.set("index", str(self.index))
        element.set("name", self.name)
        element.set("description", self.description)


class Interfaces(list):
    """The interface list; entry 0 stands for the default adapter."""

    _instance = None

    def load(self, element):
        """Append one interface per child of ``element``."""
        for child in element:
            intf = Interface()
            intf.load(child)
            self.append(intf)

    def save(self, element):
        """Replace the children of ``element`` with one ``interface`` element each."""
        for child in list(element):
            element.remove(child)
        for intf in self:
            intf.save(ET.SubElement(element, "interface"))

    @classmethod
    def instance(cls):
        """The shared list of this machine's interfaces, built on first use."""
        if cls._instance is None:
            cls._instance = cls.from_system()
        return cls._instance

    @classmethod
    def from_system(cls):
        """Enumerate the interfaces of this machine."""
        result = cls()
        result.append(Interface())
        try:
            names = [name for _, name in socket.if_nameindex()]
        except (OSError, AttributeError) as exc:
            _log.error("can not list interfaces (%s)", exc)
            names = []
        live = hasattr(socket, "AF_PACKET")
        for index, name in enumerate(names, start=1):
            result.append(
                Interface(
                    index=index,
                    name=name,
                    description="",
                    dev=functools.partial(_RawSocketDevice, name) if live else None,
                    net_info=copy.copy(_system_net_info(name)),
                )
            )
        return result