import io

import pytest

from rmcan.chassis import Attitude, Battery
from rmcan.dds import (
    BASE_ID,
    CMDID_DDS_ADD_SUB,
    CMDID_DDS_DEL_SUB,
    CMDID_DDS_PUSH_MSG,
    CMDID_DDS_RESET_NODE,
    CMDSET_DDS,
    SUBCONTROLLER_ID,
    Dds,
    Metadata,
)
from rmcan.protocol import Package, SequenceTracker


def _read_all(raw):
    stream = io.BytesIO(raw)
    packages = []
    while True:
        try:
            packages.append(Package.read_from(stream))
        except EOFError:
            return packages


def _push(msg_id, body_fmt, *values, sender=SUBCONTROLLER_ID):
    pkg = Package(sender, BASE_ID, CMDSET_DDS, CMDID_DDS_PUSH_MSG)
    pkg.pack("BB", 0, msg_id)
    pkg.pack("II", 7, 9)
    pkg.pack(body_fmt, *values)
    return pkg


@pytest.fixture
def out():
    return io.BytesIO()


@pytest.fixture
def dds(out):
    return Dds(io.BytesIO(), out, SequenceTracker())


def test_metadata_from_package():
    pkg = Package().pack("IIB", 12, 34, 5)
    assert Metadata.from_package(pkg) == Metadata(12, 34)
    assert pkg.data == bytearray([5])


def test_subscribe_sends_remove_then_add(dds, out):
    msg_id = dds.subscribe(lambda *a: None, [Attitude], 20)
    assert msg_id == 0
    remove, add = _read_all(out.getvalue())
    assert (remove.cmd_set, remove.cmd_id) == (CMDSET_DDS, CMDID_DDS_DEL_SUB)
    assert (remove.sender, remove.receiver) == (BASE_ID, SUBCONTROLLER_ID)
    assert bytes(remove.data) == bytes([0, BASE_ID, 0])
    assert (add.cmd_set, add.cmd_id) == (CMDSET_DDS, CMDID_DDS_ADD_SUB)
    expected = bytes([BASE_ID, 0, 0x03, 0, 1]) + Attitude.UID + (20).to_bytes(2, "little")
    assert bytes(add.data) == expected


def test_second_subscription_gets_next_id(dds, out):
    dds.subscribe(lambda *a: None, [Attitude], 20)
    assert dds.subscribe(lambda *a: None, [Attitude, Battery], 1) == 1
    packages = _read_all(out.getvalue())
    add = packages[-1]
    assert add.data[1] == 1
    assert add.data[4] == 2
    assert bytes(add.data[5:13]) == Attitude.UID
    assert bytes(add.data[13:21]) == Battery.UID


def test_handle_dispatches_decoded_messages(dds):
    received = []
    dds.subscribe(lambda meta, att: received.append((meta, att)), [Attitude], 20)
    assert dds.handle(_push(0, "fff", 1.5, -2.0, 0.25)) is True
    meta, att = received[0]
    assert meta == Metadata(7, 9)
    assert (att.yaw, att.pitch, att.roll) == (1.5, -2.0, 0.25)


def test_handle_multiple_topics(dds):
    received = []
    dds.subscribe(lambda *a: received.append(a), [Attitude, Battery], 20)
    dds.handle(_push(0, "fffHhiB", 1.0, 2.0, 3.0, 100, -5, 42, 80))
    _, att, bat = received[0]
    assert att.roll == 3.0
    assert (bat.adc_val, bat.temperature, bat.current, bat.percent) == (100, -5, 42, 80)


def test_handle_ignores_unknown_msg_id(dds):
    received = []
    dds.subscribe(lambda *a: received.append(a), [Attitude], 20)
    assert dds.handle(_push(3, "fff", 1.0, 2.0, 3.0)) is False
    assert received == []


def test_handle_ignores_other_sender(dds):
    received = []
    dds.subscribe(lambda *a: received.append(a), [Attitude], 20)
    assert dds.handle(_push(0, "fff", 1.0, 2.0, 3.0, sender=0x04)) is False
    assert received == []


def test_start_reads_from_input_stream(out):
    raw = _push(0, "fff", 4.0, 5.0, 6.0).to_bytes()
    dds = Dds(io.BytesIO(b"\x00\x01" + raw), out, SequenceTracker())
    received = []
    dds.subscribe(lambda meta, att: received.append(att.yaw), [Attitude], 20)
    thread = dds.start()
    thread.join(timeout=5)
    assert not thread.is_alive()
    assert received == [4.0]


def test_reset_node(dds, out):
    dds.reset_node(0x09)
    (pkg,) = _read_all(out.getvalue())
    assert (pkg.cmd_set, pkg.cmd_id) == (CMDSET_DDS, CMDID_DDS_RESET_NODE)
    assert bytes(pkg.data) == bytes([0x09])