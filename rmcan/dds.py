"""Publish/subscribe data service for pushed robot telemetry."""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, BinaryIO, ClassVar, Protocol

from .protocol import Package, SequenceTracker

BASE_ID = 0x09
SUBCONTROLLER_ID = 0x03
CMDSET_DDS = 0x48
CMDID_DDS_ADD_SUB = 0x03
CMDID_DDS_DEL_SUB = 0x04
CMDID_DDS_RESET_NODE = 0x02
CMDID_DDS_PUSH_MSG = 0x08

# Bit 0: add timestamp, bit 1: stop when disconnected.
_SUB_FLAGS = 0x3


class Topic(Protocol):
    """A message type that can be subscribed to."""

    UID: ClassVar[bytes]

    @classmethod
    def from_package(cls, package: Package) -> Any: ...


@dataclass(frozen=True)
class Metadata:
    """Timestamp that precedes every pushed message."""

    time_ms: int
    time_ns: int

    @classmethod
    def from_package(cls, package: Package) -> Metadata:
        """Consume the timestamp from the front of the payload."""
        return cls(*package.unpack("II"))


Handler = Callable[[Package], None]


class Dds:
    """Subscribes to topics and dispatches pushed messages to callbacks."""

    def __init__(
        self,
        in_stream: BinaryIO,
        out_stream: BinaryIO,
        tracker: SequenceTracker | None = None,
    ) -> None:
        self._in = in_stream
        self._out = out_stream
        self._tracker = tracker
        self.sender = BASE_ID
        self.receiver = SUBCONTROLLER_ID
        self._subscriptions: list[Handler] = []
        self._thread: threading.Thread | None = None

    def _package(self, cmd_id: int) -> Package:
        return Package(self.sender, self.receiver, CMDSET_DDS, cmd_id)

    def _send_add_sub(
        self, uids: Sequence[bytes], sub_mode: int, msg_id: int, frequency: int
    ) -> None:
        pkg = self._package(CMDID_DDS_ADD_SUB)
        pkg.pack("BBBBB", self.sender, msg_id, _SUB_FLAGS, sub_mode, len(uids))
        for uid in uids:
            pkg.data.extend(uid)
        pkg.pack("H", frequency)
        pkg.write_to(self._out, self._tracker)

    def _send_remove_sub(self, node_id: int, sub_mode: int, msg_id: int) -> None:
        pkg = self._package(CMDID_DDS_DEL_SUB)
        pkg.pack("BBB", sub_mode, node_id, msg_id)
        pkg.write_to(self._out, self._tracker)

    def subscribe(
        self,
        callback: Callable[..., Any],
        topics: Sequence[type[Topic]],
        frequency: int,
    ) -> int:
        """Subscribe ``callback`` to ``topics`` pushed at ``frequency`` Hz.

        The callback receives the metadata followed by one decoded message
        per topic, in the order given. Returns the subscription id.
        """
        topics = tuple(topics)
        msg_id = len(self._subscriptions)
        self._send_remove_sub(self.sender, 0, msg_id)
        self._send_add_sub([topic.UID for topic in topics], 0, msg_id, frequency)

        def handler(package: Package) -> None:
            meta = Metadata.from_package(package)
            callback(meta, *(topic.from_package(package) for topic in topics))

        self._subscriptions.append(handler)
        return msg_id

    def handle(self, package: Package) -> bool:
        """Dispatch a received package; return whether a callback ran."""
        if not (
            package.sender == self.receiver
            and package.receiver == self.sender
            and package.cmd_set == CMDSET_DDS
            and package.cmd_id == CMDID_DDS_PUSH_MSG
        ):
            return False
        _sub_mode, msg_id = package.unpack("BB")
        if msg_id >= len(self._subscriptions):
            return False
        self._subscriptions[msg_id](package)
        return True

    def _run(self) -> None:
        while True:
            try:
                package = Package.read_from(self._in)
            except EOFError:
                return
            self.handle(package)

    def start(self) -> threading.Thread:
        """Start reading incoming packages on a background thread."""
        if self._thread is None or not self._thread.is_alive():
            self._thread = threading.Thread(target=self._run, daemon=True)
            self._thread.start()
        return self._thread

    def reset_node(self, node_id: int) -> None:
        """Ask the subcontroller to drop every subscription of ``node_id``."""
        pkg = self._package(CMDID_DDS_RESET_NODE)
        pkg.pack("B", node_id)
        pkg.write_to(self._out, self._tracker)