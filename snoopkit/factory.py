"""Registry creating captures by name."""

from __future__ import annotations

from snoopkit.adapter import AdapterCapture
from snoopkit.capture import Capture
from snoopkit.file import FileCapture
from snoopkit.pcap import SourcePcap


class CaptureFactory:
    """Maps capture names to capture classes."""

    def __init__(self):
        self._classes = {}

    def register(self, name, cls):
        if not (isinstance(cls, type) and issubclass(cls, Capture)):
            raise TypeError(f"{cls!r} is not a capture class")
        self._classes[name] = cls

    def create(self, name):
        try:
            cls = self._classes[name]
        except KeyError:
            raise KeyError(f"unknown capture {name!r}") from None
        return cls()

    def names(self):
        """Registered names, in registration order."""
        return list(self._classes)

    def create_default_capture(self):
        return AdapterCapture()


def default_factory():
    """A factory holding the standard captures."""
    factory = CaptureFactory()
    for cls in (AdapterCapture, FileCapture, SourcePcap):
        factory.register(cls.__name__, cls)
    return factory