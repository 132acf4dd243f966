"""A capture replaying a pcap file, optionally at the recorded pace."""

from __future__ import annotations

import logging
import os
import time

from snoopkit.base import ErrorCode, SnoopError
from snoopkit.pcap import PcapCapture

_log = logging.getLogger(__name__)


def _tick():
    return time.monotonic() * 1000.0


class FileCapture(PcapCapture):
    """Reads packets from ``file_name``.

    A non-zero ``speed`` paces packets by their timestamps: 1.0 replays in
    real time, 2.0 twice as fast.
    """

    def __init__(self):
        super().__init__()
        self.file_name = ""
        self.speed = 0.0
        self._start_ts = 0
        self._start_tick = 0.0

    def _do_open(self):
        if not self.enabled:
            _log.debug("enabled is false")
            return
        if not self.file_name:
            raise SnoopError("file name not specified", ErrorCode.FILENAME_NOT_SPECIFIED)
        if not os.path.exists(self.file_name):
            raise SnoopError(f"file({self.file_name}) not exist", ErrorCode.FILE_NOT_EXIST)
        self._pcap_open(self.file_name, "file://" + self.file_name)
        if self.speed != 0:
            self._start_ts = 0
            self._start_tick = _tick()
        super()._do_open()

    def _do_close(self):
        if not self.enabled:
            _log.debug("enabled is false")
            return
        super()._do_close()

    def read(self, packet):
        res = super().read(packet)
        if self.speed != 0:
            header = packet.header
            now_ts = header.ts_sec * 1000 + header.ts_usec // 1000
            if self._start_ts == 0:
                self._start_ts = now_ts
            elapsed_ts = now_ts - self._start_ts
            while (_tick() - self._start_tick) * self.speed < elapsed_ts:
                if self._stop.wait(0.001):
                    break
        return res

    def load(self, element):
        super().load(element)
        self.file_name = element.get("fileName", self.file_name)
        self.speed = float(element.get("speed", self.speed))

    def save(self, element):
        super().save(element)
        element.set("fileName", self.file_name)
        element.set("speed", repr(float(self.speed)))