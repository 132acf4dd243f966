"""Base class of every packet capture."""

from __future__ import annotations

import logging
import threading

from snoopkit.base import CaptureType, ErrorCode, SnoopError
from snoopkit.packet import Packet
from snoopkit.types import LinkType

_log = logging.getLogger(__name__)

_TRUE_WORDS = ("true", "1", "yes", "on")
_BOOL_TEXT = {True: "true", False: "false"}


def _get_bool(element, name, default):
    value = element.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_WORDS


class Capture:
    """A source of packets.

    With ``auto_read`` set, :meth:`open` starts a reader thread that runs
    :meth:`run` and hands every packet to the callbacks registered with
    :meth:`on_captured`.
    """

    def __init__(self):
        self.enabled = True
        self.auto_read = True
        self.auto_parse = True
        self.packet = Packet()
        self._opened = False
        self._stop = threading.Event()
        self._thread = None
        self._callbacks = []

    @property
    def opened(self):
        return self._opened

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def open(self):
        """Open the capture; a failed open leaves it closed and raises."""
        if self._opened:
            return
        self._stop.clear()
        try:
            self._do_open()
        except BaseException:
            try:
                self._do_close()
            finally:
                self._opened = False
            raise
        self._opened = True

    def close(self):
        if not self._opened:
            return
        try:
            self._do_close()
        finally:
            self._opened = False

    def _do_open(self):
        if self.auto_read:
            # The reader thread checks the opened state, so set it first.
            self._opened = True
            self._thread = threading.Thread(
                target=self.run, name=f"{type(self).__name__}-reader", daemon=True
            )
            self._thread.start()

    def _stop_thread(self):
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def _do_close(self):
        self._stop_thread()

    def read(self, packet):
        """Fill ``packet``; return its length, or 0 when nothing arrived."""
        raise SnoopError("read not supported", ErrorCode.NOT_READABLE)

    def write(self, packet):
        raise SnoopError("write not supported", ErrorCode.NOT_WRITABLE)

    def write_bytes(self, buf):
        raise SnoopError("write not supported", ErrorCode.NOT_WRITABLE)

    def parse(self, packet):
        """Decode the layers of ``packet``; True when Ethernet was found."""
        return packet.parse()

    def capture_type(self):
        return CaptureType.NONE

    def data_link(self):
        return LinkType.NULL

    def relay(self, packet):
        raise SnoopError("relay not supported", ErrorCode.NOT_SUPPORTED)

    def on_captured(self, callback):
        """Register ``callback(packet)`` for every captured packet."""
        self._callbacks.append(callback)
        return callback

    def run(self):
        """Read packets until the capture stops or a read fails."""
        capture_type = self.capture_type()
        while not self._stop.is_set():
            try:
                res = self.read(self.packet)
            except SnoopError as exc:
                _log.debug("capture stopped: %s", exc)
                break
            if res == 0:
                continue
            for callback in list(self._callbacks):
                callback(self.packet)
            if capture_type is CaptureType.IN_PATH and not self.packet.drop:
                self.relay(self.packet)

    def load(self, element):
        self.enabled = _get_bool(element, "enabled", self.enabled)
        self.auto_read = _get_bool(element, "autoRead", self.auto_read)
        self.auto_parse = _get_bool(element, "autoParse", self.auto_parse)

    def save(self, element):
        element.set("enabled", _BOOL_TEXT[bool(self.enabled)])
        element.set("autoRead", _BOOL_TEXT[bool(self.auto_read)])
        element.set("autoParse", _BOOL_TEXT[bool(self.auto_parse)])