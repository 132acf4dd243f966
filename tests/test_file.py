import time
import xml.etree.ElementTree as ET

import pytest

from snoopkit.base import ErrorCode, SnoopError
from snoopkit.file import FileCapture
from snoopkit.packet import Packet, PacketHeader
from snoopkit.pcap import PcapWriter
from snoopkit.types import ETHERTYPE_ARP, ArpHeader, EthHeader, Ip, LinkType, Mac

MAC_A = Mac("02-00-00-00-00-01")


def arp_frame(last=2):
    eth = EthHeader(Mac.broadcast(), MAC_A, ETHERTYPE_ARP)
    arp = ArpHeader(sender_mac=MAC_A, sender_ip=Ip("10.0.0.1"), target_ip=Ip(f"10.0.0.{last}"))
    return eth.pack() + arp.pack()


def write_pcap(path, stamps):
    with open(path, "wb") as fh:
        writer = PcapWriter(fh, LinkType.EN10MB, 65535)
        for i, (sec, usec) in enumerate(stamps):
            frame = arp_frame(i + 2)
            writer.write(PacketHeader(ts_sec=sec, ts_usec=usec, length=len(frame)), frame)


def make_capture(path, speed=0.0):
    cap = FileCapture()
    cap.auto_read = False
    cap.file_name = str(path)
    cap.speed = speed
    return cap


def test_defaults():
    cap = FileCapture()
    assert cap.file_name == ""
    assert cap.speed == 0.0


def test_empty_file_name():
    with pytest.raises(SnoopError) as info:
        FileCapture().open()
    assert info.value.code == ErrorCode.FILENAME_NOT_SPECIFIED


def test_missing_file(tmp_path):
    cap = make_capture(tmp_path / "absent.pcap")
    with pytest.raises(SnoopError) as info:
        cap.open()
    assert info.value.code == ErrorCode.FILE_NOT_EXIST
    assert cap.opened is False


def test_disabled_open_does_nothing(tmp_path):
    cap = make_capture(tmp_path / "absent.pcap")
    cap.enabled = False
    cap.open()
    assert cap.opened is True
    with pytest.raises(SnoopError) as info:
        cap.read(Packet())
    assert info.value.code == ErrorCode.NOT_OPENED_STATE
    cap.close()
    assert cap.opened is False


def test_reads_all_records(tmp_path):
    path = tmp_path / "cap.pcap"
    write_pcap(path, [(1000, 0), (1001, 0)])
    cap = make_capture(path)
    packet = Packet()
    with cap:
        assert cap.source_name == "file://" + str(path)
        assert cap.read(packet) == len(arp_frame(2))
        assert packet.arp_hdr.target_ip == Ip("10.0.0.2")
        cap.read(packet)
        assert packet.arp_hdr.target_ip == Ip("10.0.0.3")
        with pytest.raises(SnoopError) as info:
            cap.read(packet)
        assert info.value.code == ErrorCode.IN_PCAP_NEXT_EX


def test_speed_paces_packets(tmp_path):
    path = tmp_path / "cap.pcap"
    write_pcap(path, [(1000, 0), (1000, 200000)])
    cap = make_capture(path, speed=1.0)
    packet = Packet()
    start = time.monotonic()
    with cap:
        assert cap.read(packet) == len(arp_frame(2))
        assert cap.read(packet) == len(arp_frame(3))
        assert packet.arp_hdr.target_ip == Ip("10.0.0.3")
    assert time.monotonic() - start >= 0.19


def test_zero_speed_does_not_wait(tmp_path):
    path = tmp_path / "cap.pcap"
    write_pcap(path, [(1000, 0), (1100, 0)])
    cap = make_capture(path)
    packet = Packet()
    start = time.monotonic()
    with cap:
        assert cap.read(packet) == len(arp_frame(2))
        assert cap.read(packet) == len(arp_frame(3))
        assert packet.arp_hdr.target_ip == Ip("10.0.0.3")
    assert time.monotonic() - start < 5


def test_save_load_round_trip():
    cap = FileCapture()
    cap.file_name = "trace.pcap"
    cap.speed = 2.5
    cap.filter = "arp"
    element = ET.Element("capture")
    cap.save(element)
    other = FileCapture()
    other.load(element)
    assert other.file_name == "trace.pcap"
    assert other.speed == 2.5
    assert other.filter == "arp"