# snoopkit

Building blocks for capturing and inspecting network packets in pure Python,
with no third-party dependencies.

## What it provides

- `snoopkit.base`: shared constants (`DEFAULT_SNAP_LEN`, `DEFAULT_TIMEOUT`,
  `INVALID_ADAPTER_INDEX`, ...), the `CaptureType` enumeration
  (`NONE`, `IN_PATH`, `OUT_OF_PATH`) and `SnoopError`, the exception every
  capture raises, carrying an `ErrorCode`.
- `snoopkit.types`: `Mac` and `Ip` address types, the `LinkType` enumeration,
  and header classes (`EthHeader`, `ArpHeader`, `IpHeader`, `DnsHeader`)
  with `pack()` / `unpack()`.
- `snoopkit.keys`: ordered, hashable keys for hosts, flows and sessions
  (`MacFlowKey`, `IpFlowKey`, `PortFlowKey`, `TransportFlowKey`,
  `TupleFlowKey`, ...). Flow keys have `reverse()`, which swaps source and
  destination.
- `snoopkit.hostlist`: `Host` and `HostList` (with `find_by_ip()`).
- `snoopkit.netinfo`: `NetInfo`, an interface's address, MAC, subnet mask and
  gateway, with `is_same_lan_ip()`, `adj_ip()`, `start_ip()` and `end_ip()`.
  Host lists and `NetInfo` load from and save to `xml.etree.ElementTree`
  elements.
- `snoopkit.packet`: `Packet`, which holds captured bytes and decodes
  Ethernet, IPv4/ARP and TCP/UDP/ICMP layers with `parse()`.
- `snoopkit.capture`: `Capture`, the base class. `open()` / `close()` (or a
  `with` block) control its lifecycle. With `auto_read` set, a reader thread
  passes every packet to the callbacks registered with `on_captured()`.
- `snoopkit.pcap`: `PcapReader` and `PcapWriter` for pcap files,
  `PcapCapture` and `SourcePcap`, which reads the pcap file named in `source`.
- `snoopkit.file`: `FileCapture`, which replays `file_name`. A non-zero
  `speed` paces packets by their timestamps, where 1.0 is real time.
- `snoopkit.interface`: `Interface` and `Interfaces`, the machine's network
  interfaces. Entry 0 stands for the default adapter.
- `snoopkit.adapter`: `AdapterCapture`, for live capture and sending on the
  interface chosen by `adapter_index`.
- `snoopkit.findhost`: `FindHost`, which resolves MAC addresses for the hosts
  in `host_list` by ARP. `find_all()` raises `SnoopError` when
  `find_all_timeout` runs out.
- `snoopkit.factory`: `CaptureFactory` and `default_factory()`, which create
  captures by name.

## Installation

```
pip install .
```

## Examples

Addresses:

```python
from snoopkit.types import Mac, Ip

mac = Mac.from_string("00:11:22:33:44:55")
print(mac)                              # 001122-334455
print(Mac.broadcast().is_broadcast())   # True
print(Ip("10.0.0.1"))                   # 10.0.0.1
```

Flow keys:

```python
from snoopkit.keys import TransportFlowKey
from snoopkit.types import Ip

key = TransportFlowKey(Ip("10.0.0.1"), 1234, Ip("10.0.0.2"), 80)
print(key.reverse())
```

Reading a capture file:

```python
from snoopkit.pcap import PcapReader

with open("capture.pcap", "rb") as stream:
    for header, data in PcapReader(stream):
        print(header.caplen, len(data))
```

Replaying a file through a capture, without a reader thread:

```python
from snoopkit.base import SnoopError
from snoopkit.file import FileCapture
from snoopkit.packet import Packet

capture = FileCapture()
capture.file_name = "capture.pcap"
capture.filter = "tcp or udp"
capture.auto_read = False
with capture:
    packet = Packet()
    try:
        while True:
            capture.read(packet)
            print(packet.ip_hdr)
    except SnoopError:
        pass  # end of file
```

Creating a capture by name:

```python
from snoopkit.factory import default_factory

factory = default_factory()
print(factory.names())   # ['AdapterCapture', 'FileCapture', 'SourcePcap']
capture = factory.create("FileCapture")
```

## What it does not do

- There is no command-line program; the package is a library only.
- Filters are a small expression language: the terms `ip`, `arp`, `tcp`,
  `udp` and `icmp`, combined with `and`/`&&`, `or`/`||`, `not`/`!` and
  parentheses. Host, port and other filter terms are rejected.
- Live capture in `AdapterCapture` uses link-layer raw sockets (`AF_PACKET`).
  These exist only on Linux and usually need elevated privileges. On other
  systems the interfaces are still listed, but they cannot be opened.
- Interface descriptions are empty. Gateways are not discovered from the
  system.

## Running the tests

```
pip install .[test]
pytest
```