import threading
import xml.etree.ElementTree as ET

import pytest

from snoopkit.base import CaptureType, ErrorCode, SnoopError
from snoopkit.capture import Capture
from snoopkit.packet import Packet, PacketHeader
from snoopkit.types import (
    ARPOP_REQUEST,
    ETHERTYPE_ARP,
    ArpHeader,
    EthHeader,
    Ip,
    LinkType,
    Mac,
)

MAC_A = Mac("02-00-00-00-00-01")


def arp_frame(last=2):
    eth = EthHeader(Mac.broadcast(), MAC_A, ETHERTYPE_ARP)
    arp = ArpHeader(sender_mac=MAC_A, sender_ip=Ip("10.0.0.1"), target_ip=Ip(f"10.0.0.{last}"))
    return eth.pack() + arp.pack()


class ListCapture(Capture):
    def __init__(self, frames, kind=CaptureType.OUT_OF_PATH):
        super().__init__()
        self.frames = list(frames)
        self.kind = kind
        self.relayed = []

    def read(self, packet):
        if not self.frames:
            raise SnoopError("end", ErrorCode.IN_PCAP_NEXT_EX)
        data = self.frames.pop(0)
        packet.clear()
        if not data:
            return 0
        packet.header = PacketHeader(caplen=len(data), length=len(data))
        packet.raw = data
        packet.link_type = LinkType.EN10MB
        if self.auto_parse:
            self.parse(packet)
        return len(data)

    def capture_type(self):
        return self.kind

    def relay(self, packet):
        self.relayed.append(packet.raw)
        return True


def test_base_read_and_write_raise():
    cap = Capture()
    with pytest.raises(SnoopError) as info:
        cap.read(Packet())
    assert info.value.code == ErrorCode.NOT_READABLE
    with pytest.raises(SnoopError) as info:
        cap.write(Packet())
    assert info.value.code == ErrorCode.NOT_WRITABLE
    with pytest.raises(SnoopError) as info:
        cap.write_bytes(b"abc")
    assert info.value.code == ErrorCode.NOT_WRITABLE


def test_base_relay_raises():
    with pytest.raises(SnoopError) as info:
        Capture().relay(Packet())
    assert info.value.code == ErrorCode.NOT_SUPPORTED


def test_base_defaults():
    cap = Capture()
    assert cap.capture_type() is CaptureType.NONE
    assert cap.data_link() == LinkType.NULL
    assert (cap.enabled, cap.auto_read, cap.auto_parse) == (True, True, True)


def test_parse_decodes_arp():
    frame = arp_frame()
    packet = Packet(header=PacketHeader(caplen=len(frame), length=len(frame)), raw=frame,
                    link_type=LinkType.EN10MB)
    assert Capture().parse(packet) is True
    assert packet.arp_hdr.operation == ARPOP_REQUEST
    assert packet.arp_hdr.sender_mac == MAC_A


def test_run_delivers_packets_and_skips_empty_reads():
    cap = ListCapture([arp_frame(2), b"", arp_frame(3)])
    seen = []
    Capture.on_captured(cap, lambda p: seen.append(p.arp_hdr.target_ip))
    Capture.run(cap)
    assert seen == [Ip("10.0.0.2"), Ip("10.0.0.3")]
    assert cap.relayed == []


def test_in_path_relays_unless_dropped():
    cap = ListCapture([arp_frame(2), arp_frame(3), arp_frame(4)], kind=CaptureType.IN_PATH)

    def mark(packet):
        packet.drop = packet.arp_hdr.target_ip == Ip("10.0.0.3")

    Capture.on_captured(cap, mark)
    Capture.run(cap)
    assert cap.relayed == [arp_frame(2), arp_frame(4)]


def test_open_starts_reader_thread():
    cap = ListCapture([arp_frame(2), arp_frame(3)])
    done = threading.Event()
    seen = []

    def collect(packet):
        seen.append(packet.arp_hdr.target_ip)
        if len(seen) == 2:
            done.set()

    Capture.on_captured(cap, collect)
    Capture.open(cap)
    assert done.wait(5)
    Capture.close(cap)
    assert seen == [Ip("10.0.0.2"), Ip("10.0.0.3")]
    assert cap.opened is False


def test_open_without_auto_read_reads_manually():
    cap = ListCapture([b"x"])
    cap.auto_read = False
    cap.auto_parse = False
    seen = []
    cap.on_captured(seen.append)
    with cap:
        assert cap.opened is True
        packet = Packet()
        assert cap.read(packet) == 1
    assert seen == []
    assert cap.opened is False


def test_save_load_round_trip():
    cap = Capture()
    cap.enabled = False
    cap.auto_parse = False
    element = ET.Element("capture")
    cap.save(element)
    assert element.get("enabled") == "false"
    assert element.get("autoRead") == "true"
    other = Capture()
    other.load(element)
    assert (other.enabled, other.auto_read, other.auto_parse) == (False, True, False)


def test_load_keeps_missing_values():
    cap = Capture()
    cap.auto_read = False
    cap.load(ET.Element("capture", {"enabled": "false"}))
    assert cap.enabled is False
    assert cap.auto_read is False
    assert cap.auto_parse is True