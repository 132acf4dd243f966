[build-system]
requires = ["setuptools>=61.0"]
build-backend = "setuptools.build_meta"

[project]
name = "snoopkit"
version = "0.1.0"
description = "Packet capture primitives: MAC/IP types, flow keys, pcap files, capture objects and ARP host discovery"
requires-python = ">=3.10"
dependencies = []
keywords = ["packet", "capture", "pcap", "arp", "network", "flow"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.setuptools.packages.find]
include = ["snoopkit*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
