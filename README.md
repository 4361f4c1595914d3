# rmcan

Control a RoboMaster robot directly over its CAN bus from Linux, using
SocketCAN. The package builds and parses the robot's framed packages
(header CRC-8, body CRC-16, per-command sequence numbers), sends chassis,
gimbal and LED commands, and subscribes to the robot's pushed telemetry
(attitude, wheel encoders, IMU, battery, velocity).

## Requirements

- Linux with SocketCAN and a configured CAN interface (for example `can0`)
- Python 3.10 or later
- No third-party libraries

## Installation

```
pip install .
```

## Command line

Installing the package provides one command, `rmcan`, whose first argument
names a tool:

| Tool            | What it does                                                                 |
|-----------------|------------------------------------------------------------------------------|
| `run-vel`       | Enables SDK mode, then sends a heartbeat and 30 rpm on every wheel every 10 ms until Ctrl-C |
| `control-vel`   | Takes four rpm values (front-right, front-left, back-left, back-right), prints them, and sends them for about 20 ms |
| `stop-wheel`    | Enables SDK mode, sets all wheels to 0 rpm, then leaves SDK mode              |
| `center-gimbal` | Sets the gimbal work mode and recentres it                                    |
| `move-gimbal`   | Sets the gimbal work mode and moves it to yaw 100, pitch 200                  |
| `read-enc`      | Subscribes to attitude, wheel encoders, IMU, velocity and battery and prints them until Ctrl-C |

Every tool accepts `-i/--interface` (default `can0`). Examples:

```
rmcan --help
rmcan control-vel 30 30 30 30
rmcan stop-wheel -i can1
rmcan read-enc --help
```

Commands go out on CAN id `0x200`; `read-enc` sends its subscriptions on
`0x201` and listens for pushed messages on `0x202`.

## Library use

`rmcan.can_stream.CanStream` is a binary stream over a raw CAN socket bound
to one CAN id. Written bytes go out in 8-byte frames; `flush()` sends the
remainder. It is a context manager.

```python
from rmcan.can_stream import CanStream
from rmcan.chassis import Chassis

with CanStream("can0", 0x200) as stream:
    chassis = Chassis(stream)
    chassis.send_workmode(1)
    chassis.send_wheel_speed(30, 30, 30, 30)   # front-right, front-left, back-left, back-right rpm
    chassis.send_speed(0.5, 0.0, 0.0)          # vx, vy, omega
```

`Chassis` also has `send_heartbeat()`. The gimbal and LEDs work the same way:

```python
from rmcan.gimbal import Gimbal
from rmcan.led import Led

gimbal = Gimbal(stream)
gimbal.send_workmode(1)
gimbal.recenter()
gimbal.send_angles(100, 200)

Led(stream).send_led(1, 255, 0, 0, 0, 0, 0xFF)  # mode, r, g, b, speed_up, speed_down, led_mask
```

### Telemetry

`rmcan.dds.Dds` sends subscriptions and dispatches pushed messages. Each
callback receives a `Metadata` (`time_ms`, `time_ns`) followed by one
decoded value per requested topic, in the order given. The topics are the
dataclasses `Attitude`, `WheelEncoders`, `Imu`, `Battery` and `Velocity`
in `rmcan.chassis`.

```python
from rmcan.can_stream import CanStream
from rmcan.chassis import Attitude, Battery
from rmcan.dds import Dds

def on_update(meta, attitude, battery):
    print(meta.time_ns, attitude.yaw, battery.percent)

incoming = CanStream("can0", 0x202)
config = CanStream("can0", 0x201)
dds = Dds(incoming, config)
dds.subscribe(on_update, [Attitude, Battery], 20)   # returns the subscription id
config.flush()
dds.start()                                          # background reader thread
```

`Dds.handle(package)` dispatches a single already-read package and returns
whether a callback ran; `Dds.reset_node(node_id)` asks the robot to drop all
subscriptions of a node.

### Packages and checksums

`rmcan.protocol.Package` builds and decodes frames on any binary stream:
`pack()`/`unpack()` append and consume little-endian `struct` values,
`to_bytes(seq_id)` serialises, `write_to(stream)` numbers the package through
a `SequenceTracker` (the process-wide `default_tracker()` unless one is
given) and writes it, and `Package.read_from(stream)` skips noise and
corrupt frames until a valid one arrives, raising `EOFError` when the stream
ends. `rmcan.crc` exposes the `crc8` and `crc16` checksums used by the
framing.

## Limitations

- Only Linux SocketCAN is supported as a transport.
- Commands are sent without waiting for or checking acknowledgements, and
  replies to commands are not read.
- Individual subscriptions cannot be removed; only `reset_node` clears them.
- Only the five chassis topics listed above can be decoded.

## Running the tests

```
pip install ".[test]"
pytest
```