import struct

import pytest

from rmcan.can_stream import CanStream
from rmcan.protocol import Package, SequenceTracker


class FakeSocket:
    def __init__(self, incoming=(), short_send=False):
        self.sent = []
        self.incoming = list(incoming)
        self.short_send = short_send
        self.closed = False

    def send(self, frame):
        self.sent.append(frame)
        return len(frame) - 1 if self.short_send else len(frame)

    def recv(self, size):
        return self.incoming.pop(0) if self.incoming else b""

    def close(self):
        self.closed = True


def frame(can_id, payload):
    return struct.pack("=IB3x8s", can_id, len(payload), payload)


def payloads(sock):
    result = []
    for raw in sock.sent:
        _, dlc, data = struct.unpack("=IB3x8s", raw)
        result.append(data[:dlc])
    return result


def test_seven_bytes_stay_buffered():
    sock = FakeSocket()
    stream = CanStream("can0", 0x200, sock=sock)
    assert stream.write(b"1234567") == 7
    assert sock.sent == []


def test_eighth_byte_sends_full_frame():
    sock = FakeSocket()
    stream = CanStream("can0", 0x200, sock=sock)
    stream.write(b"12345678")
    assert sock.sent == [frame(0x200, b"12345678")]
    assert len(sock.sent[0]) == 16


def test_flush_sends_remainder():
    sock = FakeSocket()
    stream = CanStream("can0", 0x201, sock=sock)
    stream.write(b"abcdefghij")
    stream.flush()
    assert payloads(sock) == [b"abcdefgh", b"ij"]
    assert all(struct.unpack_from("=I", raw)[0] == 0x201 for raw in sock.sent)


def test_flush_with_empty_buffer_sends_nothing():
    sock = FakeSocket()
    stream = CanStream("can0", 0x200, sock=sock)
    stream.flush()
    assert sock.sent == []


def test_short_send_raises():
    sock = FakeSocket(short_send=True)
    stream = CanStream("can0", 0x200, sock=sock)
    with pytest.raises(OSError):
        stream.write(b"12345678")


def test_read_returns_frame_payload_in_pieces():
    sock = FakeSocket([frame(0x202, b"hello"), frame(0x202, b"!")])
    stream = CanStream("can0", 0x202, sock=sock)
    assert stream.read(2) == b"he"
    assert stream.read(10) == b"llo"
    assert stream.read() == b"!"


def test_read_at_end_returns_empty():
    stream = CanStream("can0", 0x202, sock=FakeSocket())
    assert stream.read(4) == b""


def test_context_manager_closes_socket():
    sock = FakeSocket()
    with CanStream("can0", 0x200, sock=sock) as stream:
        stream.write(b"x")
    assert sock.closed is True


def test_package_round_trip_over_frames():
    out_sock = FakeSocket()
    out = CanStream("can0", 0x200, sock=out_sock)
    pkg = Package(0x09, 0xC3, 0x3F, 0x20, data=b"\x1e\x00\xe2\xff\xe2\xff\x1e\x00")
    pkg.write_to(out, SequenceTracker())
    out.flush()
    assert b"".join(payloads(out_sock)) == pkg.to_bytes(0)

    in_sock = FakeSocket([frame(0x202, p) for p in payloads(out_sock)])
    parsed = Package.read_from(CanStream("can0", 0x202, sock=in_sock))
    assert parsed.data == pkg.data
    assert (parsed.cmd_set, parsed.cmd_id) == (0x3F, 0x20)