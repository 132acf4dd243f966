"""Capture from a live network interface."""

from __future__ import annotations

import logging

from snoopkit.base import (
    DEFAULT_ADAPTER_INDEX,
    INVALID_ADAPTER_INDEX,
    ErrorCode,
    SnoopError,
)
from snoopkit.interface import Interfaces
from snoopkit.packet import Packet
from snoopkit.pcap import PcapCapture, _FilterParser
from snoopkit.types import LinkType

_log = logging.getLogger(__name__)


class AdapterCapture(PcapCapture):
    """Reads and sends frames on the interface chosen by ``adapter_index``."""

    def __init__(self, interfaces=None):
        super().__init__()
        self._interfaces = interfaces
        self._adapter_index = DEFAULT_ADAPTER_INDEX
        self._device = None

    @property
    def interfaces(self):
        if self._interfaces is None:
            self._interfaces = Interfaces.instance()
        return self._interfaces

    @property
    def adapter_index(self):
        return self._adapter_index

    @adapter_index.setter
    def adapter_index(self, value):
        value = int(value)
        if value == self._adapter_index:
            return
        maximum = len(self.interfaces) - 1
        if value > maximum:
            _log.error("too big value(%d). maximum value is %d", value, maximum)
            return
        self._adapter_index = value

    def _selected_interface(self):
        index = self._adapter_index
        if index == INVALID_ADAPTER_INDEX:
            raise SnoopError("invalid adapter index(-1)", ErrorCode.INVALID_INDEX)
        if not 0 <= index < len(self.interfaces):
            raise SnoopError(f"invalid adapter index({index})", ErrorCode.INVALID_INDEX)
        return self.interfaces[index]

    def _do_open(self):
        if not self.enabled:
            _log.debug("enabled is false")
            return
        intf = self._selected_interface()
        if intf.dev is None:
            raise SnoopError("dev is NULL", ErrorCode.OBJECT_IS_NULL)
        _log.debug("source=%s", intf.name)
        self._device = intf.dev(self.snap_len, self.read_timeout)
        self._data_link = int(getattr(self._device, "link_type", LinkType.EN10MB))
        if self._data_link != LinkType.EN10MB:
            _log.warning("data link is %d source=%s", self._data_link, intf.name)
        self._source = intf.name
        filtering = self._data_link not in (LinkType.NFLOG, LinkType.USB_LINUX_MMAPPED)
        if filtering and self.filter:
            self._filter = _FilterParser(self.filter).parse()
        super()._do_open()

    def _do_close(self):
        if not self.enabled:
            _log.debug("enabled is false")
            return
        self._stop_thread()
        device, self._device = self._device, None
        if device is not None:
            device.close()
        super()._do_close()

    def read(self, packet):
        if not self._opened or self._device is None:
            raise SnoopError(
                f"not opened state({type(self).__name__})", ErrorCode.NOT_OPENED_STATE
            )
        packet.clear()
        received = self._device.recv()
        if received is None:
            return 0
        header, data = received
        link_type = self.data_link()
        if self._filter is not None:
            probe = Packet(header=header, raw=data, link_type=link_type)
            probe.parse()
            if not self._filter(probe):
                return 0
        packet.header = header
        packet.raw = data
        packet.link_type = link_type
        if self.auto_parse:
            self.parse(packet)
        return header.caplen

    def write_bytes(self, buf):
        if self._device is None:
            raise SnoopError("adapter is not opened", ErrorCode.NOT_WRITABLE)
        self._device.send(bytes(buf))
        return len(buf)

    def load(self, element):
        super().load(element)
        self.adapter_index = int(element.get("adapterIndex", self._adapter_index))

    def save(self, element):
        super().save(element)
        element.set("adapterIndex", str(self._adapter_index))