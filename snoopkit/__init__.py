"""Packet capture primitives: address types, flow keys, pcap files, captures and ARP host discovery."""

__version__ = "0.1.0"

__all__ = [
    "base",
    "types",
    "keys",
    "hostlist",
    "netinfo",
    "packet",
    "capture",
    "pcap",
    "file",
    "interface",
    "adapter",
    "findhost",
    "factory",
]