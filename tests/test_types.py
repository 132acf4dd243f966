import pytest

from snoopkit.types import (
    ARPOP_REPLY,
    ETHERTYPE_ARP,
    ArpHeader,
    DnsHeader,
    EthHeader,
    Ip,
    IpHeader,
    LinkType,
    Mac,
)


@pytest.mark.parametrize(
    "text", ["02-00-5e-10-20-30", "02:00:5E:10:20:30", "02005e102030", "020000-5e1020"]
)
def test_mac_parses_separators(text):
    expected = Mac(bytes.fromhex(text.replace("-", "").replace(":", "")))
    assert Mac.from_string(text) == expected


def test_mac_str_round_trip():
    mac = Mac(bytes([0x02, 0xAB, 0xCD, 0x01, 0x02, 0x03]))
    assert Mac(str(mac)) == mac
    assert Mac.from_string(str(mac)) == mac


def test_mac_str_format():
    assert str(Mac.broadcast()) == "FFFFFF-FFFFFF"
    assert str(Mac.clean()) == "000000-000000"


@pytest.mark.parametrize("text", ["", "zz:00:00:00:00:00", "02:00:00"])
def test_mac_invalid_string(text):
    with pytest.raises(ValueError):
        Mac.from_string(text)


def test_mac_wrong_length():
    with pytest.raises(ValueError):
        Mac(b"\x00\x01")


def test_mac_bytes_and_equality_with_bytes():
    raw = bytes([2, 0, 0, 0, 0, 9])
    mac = Mac(raw)
    assert bytes(mac) == raw
    assert mac == raw


def test_mac_predicates():
    assert Mac.clean().is_clean()
    assert not Mac.broadcast().is_clean()
    assert Mac.broadcast().is_broadcast()
    assert Mac("01:00:5e:7f:00:01").is_multicast()
    assert not Mac("01:00:5e:80:00:01").is_multicast()
    assert not Mac("02:00:5e:00:00:01").is_multicast()


def test_mac_random_has_top_bit_cleared():
    for _ in range(50):
        mac = Mac.random()
        assert bytes(mac)[0] & 0x80 == 0


def test_mac_ordering_and_hash():
    low = Mac(bytes(6))
    high = Mac(bytes([0, 0, 0, 0, 0, 1]))
    assert low < high
    assert high >= low
    assert len({low, Mac(bytes(6)), high}) == 2


@pytest.mark.parametrize("text", ["192.168.10.2", "0.0.0.0", "255.255.255.255", "8.8.8.8"])
def test_ip_str_round_trip(text):
    ip = Ip(text)
    assert str(ip) == text
    assert Ip(int(ip)) == ip


@pytest.mark.parametrize("value", ["300.1.1.1", "abc", -1, 2**32])
def test_ip_invalid(value):
    with pytest.raises(ValueError):
        Ip(value)


def test_ip_bitwise_stays_32_bit():
    mask = Ip("255.255.255.0")
    ip = Ip("192.168.10.2")
    inverted = ~mask
    assert 0 <= inverted <= 0xFFFFFFFF
    assert (inverted & mask) == 0
    assert (inverted | mask) == Ip("255.255.255.255")
    assert ((ip | inverted) & mask) == (ip & mask)
    assert isinstance(ip & mask, Ip)


def test_ip_add_wraps():
    top = Ip("255.255.255.255")
    assert top + 1 == Ip(0)
    assert Ip(0) - 1 == top


def test_ip_bytes_round_trip():
    ip = Ip("10.1.2.3")
    assert Ip(bytes(ip)) == ip


def test_link_type_lookup():
    assert LinkType(LinkType.NFLOG.value) is LinkType.NFLOG


def test_eth_header_wire_bytes():
    header = EthHeader(Mac.broadcast(), Mac.clean(), ETHERTYPE_ARP)
    assert header.pack() == b"\xff" * 6 + b"\x00" * 6 + b"\x08\x06"
    assert EthHeader.unpack(header.pack()) == header


def test_eth_header_too_short():
    with pytest.raises(ValueError):
        EthHeader.unpack(b"\x00" * 5)


def test_arp_header_round_trip():
    header = ArpHeader(
        operation=ARPOP_REPLY,
        sender_mac=Mac("02:00:00:00:00:01"),
        sender_ip=Ip("10.0.0.1"),
        target_mac=Mac("02:00:00:00:00:02"),
        target_ip=Ip("10.0.0.2"),
    )
    data = header.pack()
    assert len(data) == ArpHeader.SIZE
    assert ArpHeader.unpack(data) == header


def test_arp_header_too_short():
    with pytest.raises(ValueError):
        ArpHeader.unpack(b"\x00" * (ArpHeader.SIZE - 1))


def test_ip_header_round_trip():
    header = IpHeader(
        tos=0x10,
        total_length=60,
        identification=7,
        protocol=6,
        src=Ip("10.0.0.1"),
        dst=Ip("10.0.0.2"),
    )
    data = header.pack()
    assert len(data) == IpHeader.SIZE
    assert IpHeader.unpack(data) == header
    assert data[0] >> 4 == header.version


def test_ip_header_rejects_bad_version():
    with pytest.raises(ValueError):
        IpHeader(version=16).pack()


def test_dns_header_round_trip():
    header = DnsHeader(id=0x1234, flags=0x0100, num_q=1)
    data = header.pack()
    assert len(data) == DnsHeader.SIZE
    assert DnsHeader.unpack(data) == header


def test_dns_header_field_out_of_range():
    with pytest.raises(ValueError):
        DnsHeader(id=70000).pack()