"""Resolve hardware addresses of hosts by ARP."""

from __future__ import annotations

import copy
import logging
import time
import xml.etree.ElementTree as ET

from snoopkit.adapter import AdapterCapture
from snoopkit.base import DEFAULT_TIMEOUT, ErrorCode, SnoopError
from snoopkit.hostlist import HostList
from snoopkit.netinfo import NetInfo
from snoopkit.packet import Packet
from snoopkit.types import (
    ARPHRD_ETHER,
    ARPOP_REPLY,
    ARPOP_REQUEST,
    ETHERTYPE_ARP,
    ETHERTYPE_IP,
    ArpHeader,
    EthHeader,
    Ip,
    Mac,
)

_log = logging.getLogger(__name__)


def _tick():
    return time.monotonic() * 1000.0


class FindHost(AdapterCapture):
    """Sends ARP requests for the hosts in ``host_list`` and records the replies.

    Times are in milliseconds. A non-zero ``scan_interval`` resends requests
    for unresolved hosts while waiting. ``found_callbacks`` receive
    ``(ip, mac)`` for each reply read by :meth:`run`.
    """

    def __init__(self, interfaces=None):
        super().__init__(interfaces)
        self.filter = "arp"
        self.find_all_timeout = DEFAULT_TIMEOUT
        self.scan_interval = 0
        self.send_interval = 0
        self.host_list = HostList()
        self.net_info = NetInfo()
        self.found_callbacks = []
        self._last_send_tick = 0.0

    def _do_open(self):
        self._last_send_tick = _tick()
        index = self.adapter_index
        if 0 <= index < len(self.interfaces):
            self.net_info = copy.copy(self.interfaces[index].net_info)
        else:
            self.net_info = NetInfo()
        super()._do_open()

    def _do_close(self):
        self._last_send_tick = 0.0
        super()._do_close()

    def find_all(self):
        """Resolve every host; raise when ``find_all_timeout`` runs out."""
        if self.is_found_all():
            return True
        self.send_arp_request_all()
        start = _tick()
        while True:
            if self.is_found_all():
                return True
            if _tick() - start > self.find_all_timeout:
                for host in self.unfound_hosts():
                    _log.info("unfound host ip=%s", host.ip)
                raise SnoopError("can not find all host", ErrorCode.CAN_NOT_FIND_ALL_HOST)
            self.read_reply()

    def is_found_all(self):
        return not self.unfound_hosts()

    def unfound_hosts(self):
        """Hosts whose hardware address is still unknown."""
        return [host for host in self.host_list if host.mac.is_clean()]

    def send_arp_request_all(self):
        """Send a request for each unresolved host; return how many were sent."""
        sent = 0
        for host in self.unfound_hosts():
            self.send_arp_request(host.ip)
            sent += 1
        self._last_send_tick = _tick()
        return sent

    def build_arp_request(self, ip):
        """The broadcast ARP request frame asking for ``ip``."""
        eth = EthHeader(Mac.broadcast(), self.net_info.mac, ETHERTYPE_ARP)
        arp = ArpHeader(
            hardware_type=ARPHRD_ETHER,
            protocol_type=ETHERTYPE_IP,
            hardware_len=Mac.SIZE,
            protocol_len=4,
            operation=ARPOP_REQUEST,
            sender_mac=self.net_info.mac,
            sender_ip=self.net_info.ip,
            target_mac=Mac.clean(),
            target_ip=Ip(ip),
        )
        return eth.pack() + arp.pack()

    def send_arp_request(self, ip):
        return self.write_bytes(self.build_arp_request(ip))

    def read_reply(self):
        """Read one frame; return ``(ip, mac)`` for a reply to a listed host, else None."""
        packet = Packet()
        res = self.read(packet)
        if self.scan_interval and _tick() - self._last_send_tick > self.scan_interval:
            self.send_arp_request_all()
        if res <= 0 or packet.arp_hdr is None:
            return None
        arp = packet.arp_hdr
        if arp.operation != ARPOP_REPLY or packet.eth_hdr.dst != self.net_info.mac:
            return None
        ip, mac = arp.sender_ip, arp.sender_mac
        found = False
        for host in self.host_list:
            if host.ip == ip:
                host.mac = mac
                found = True
        return (ip, mac) if found else None

    def run(self):
        while not self._stop.is_set():
            try:
                result = self.read_reply()
            except SnoopError as exc:
                _log.debug("find host stopped: %s", exc)
                break
            if result is None:
                continue
            for callback in list(self.found_callbacks):
                callback(*result)

    def load(self, element):
        super().load(element)
        self.find_all_timeout = int(element.get("findAllTimeout", self.find_all_timeout))
        self.scan_interval = int(element.get("scanInterval", self.scan_interval))
        self.send_interval = int(element.get("sendInterval", self.send_interval))
        child = element.find("hostList")
        if child is None:
            self.host_list.clear()
        else:
            self.host_list.load(child)

    def save(self, element):
        super().save(element)
        element.set("findAllTimeout", str(self.find_all_timeout))
        element.set("scanInterval", str(self.scan_interval))
        element.set("sendInterval", str(self.send_interval))
        child = element.find("hostList")
        if child is None:
            child = ET.SubElement(element, "hostList")
        self.host_list.save(child)