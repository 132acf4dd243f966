"""Shared constants, capture types and the package error type."""

from __future__ import annotations

import enum

SNOOP_VERSION = "Snoop 9.1"

DEFAULT_READ_TIMEOUT = 1
DEFAULT_SNAP_LEN = 1600
DEFAULT_TIMEOUT = 5000
INVALID_ADAPTER_INDEX = -1
DEFAULT_ADAPTER_INDEX = 0


class CaptureType(enum.Enum):
    """How a capture sits relative to the traffic it sees."""

    NONE = "None"
    IN_PATH = "InPath"
    OUT_OF_PATH = "OutOfPath"

    @classmethod
    def from_str(cls, s):
        """Return the capture type named by ``s``; unknown names give NONE."""
        try:
            return cls(s)
        except ValueError:
            return cls.NONE

    def __str__(self):
        return self.value


class ErrorCode(enum.IntEnum):
    """Codes carried by :class:`SnoopError`."""

    UNKNOWN = 1
    NOT_READABLE = 2
    NOT_WRITABLE = 3
    NOT_SUPPORTED = 4
    NOT_OPENED_STATE = 5
    OBJECT_IS_NULL = 6
    INVALID_INDEX = 7
    FILENAME_NOT_SPECIFIED = 8
    FILE_NOT_EXIST = 9

    INVALID_ADAPTER_INDEX = 1000
    IN_PCAP_OPEN = 1001
    IN_PCAP_COMPILE = 1002
    IN_PCAP_SETFILTER = 1003
    IN_PCAP_NEXT_EX = 1004
    IN_PCAP_FINDALLDEVS_EX = 1005
    CANCELED_BY_USER = 1006
    IN_PCAP_OPEN_DEAD = 1007
    HOST_NOT_SPECIFIED = 1008
    CAN_NOT_FIND_ALL_HOST = 1009
    SESSION_COUNT_IS_ZERO = 1010
    THE_SAME_SOURCE_AND_TARGET_IP = 1011
    CAN_NOT_FIND_HOST = 1012
    THE_SAME_REAL_AND_TARGET_MAC = 1013
    CAN_NOT_OPEN_INFECT_THREAD = 1014
    IN_PCAP_DUMP_OPEN = 1015
    CAN_NOT_SPOOF_MYSELF = 1016


class SnoopError(Exception):
    """Error raised by captures and helpers, with an :class:`ErrorCode`."""

    def __init__(self, message, code=ErrorCode.UNKNOWN):
        super().__init__(message)
        self.message = message
        self.code = ErrorCode(code)

    def __str__(self):
        return f"{self.message} ({self.code.name})"