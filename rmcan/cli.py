"""Command-line tools for driving the robot and watching its telemetry."""

from __future__ import annotations

import argparse
import sys
import time
from collections.abc import Callable, Sequence

from .can_stream import CanStream
from .chassis import Attitude, Battery, Chassis, Imu, Velocity, WheelEncoders
from .dds import Dds, Metadata
from .gimbal import Gimbal

DEFAULT_INTERFACE = "can0"
COMMAND_CAN_ID = 0x200
CONFIG_CAN_ID = 0x201
PUSH_CAN_ID = 0x202

RUN_VEL_RPM = 30
RUN_VEL_PERIOD = 0.01
CONTROL_VEL_PERIOD = 0.001
CONTROL_VEL_DURATION = 0.02
GIMBAL_TARGET = (100, 200)


def _parser(prog: str, description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description=description)
    parser.add_argument(
        "-i",
        "--interface",
        default=DEFAULT_INTERFACE,
        help=f"CAN interface to use (default: {DEFAULT_INTERFACE})",
    )
    return parser


def _args(argv: Sequence[str] | None) -> list[str]:
    return list(sys.argv[1:] if argv is None else argv)


def _int16(value: int) -> int:
    return ((value + 0x8000) & 0xFFFF) - 0x8000


def _num(value: float) -> str:
    return f"{value:g}"


def parse_wheel_speeds(args: Sequence[str]) -> tuple[int, int, int, int]:
    """Parse front-right, front-left, back-left and back-right rpm values.

    Values are taken as 16-bit signed integers; arguments after the fourth
    are ignored.
    """
    if len(args) < 4:
        raise ValueError(f"expected four wheel speeds, got {len(args)}")
    fr, fl, bl, br = (_int16(int(arg)) for arg in args[:4])
    return fr, fl, bl, br


def run_vel(argv: Sequence[str] | None = None) -> int:
    """Drive all wheels at a constant speed until interrupted."""
    args = _parser(
        "rmcan run-vel", "Drive all wheels at a constant speed until interrupted."
    ).parse_args(_args(argv))
    with CanStream(args.interface, COMMAND_CAN_ID) as stream:
        chassis = Chassis(stream)
        chassis.send_workmode(1)
        try:
            while True:
                chassis.send_heartbeat()
                chassis.send_wheel_speed(RUN_VEL_RPM, RUN_VEL_RPM, RUN_VEL_RPM, RUN_VEL_RPM)
                time.sleep(RUN_VEL_PERIOD)
        except KeyboardInterrupt:
            pass
    return 0


def control_vel(argv: Sequence[str] | None = None) -> int:
    """Drive the wheels at the given speeds for a short burst."""
    parser = _parser("rmcan control-vel", "Drive the wheels at the given speeds briefly.")
    parser.add_argument(
        "speeds", nargs="*", metavar="RPM", help="front-right front-left back-left back-right"
    )
    args = parser.parse_args(_args(argv))
    try:
        fr, fl, bl, br = parse_wheel_speeds(args.speeds)
    except ValueError as exc:
        parser.error(str(exc))

    with CanStream(args.interface, COMMAND_CAN_ID) as stream:
        chassis = Chassis(stream)
        chassis.send_workmode(1)
        print(f"{fr} {fl} {bl} {br}", flush=True)
        start = time.monotonic()
        while True:
            chassis.send_wheel_speed(fr, fl, bl, br)
            time.sleep(CONTROL_VEL_PERIOD)
            if time.monotonic() - start > CONTROL_VEL_DURATION:
                break
    return 0


def stop_wheel(argv: Sequence[str] | None = None) -> int:
    """Stop all wheels and leave SDK control mode."""
    args = _parser("rmcan stop-wheel", "Stop all wheels.").parse_args(_args(argv))
    with CanStream(args.interface, COMMAND_CAN_ID) as stream:
        chassis = Chassis(stream)
        chassis.send_workmode(1)
        chassis.send_wheel_speed(0, 0, 0, 0)
        chassis.send_workmode(0)
    return 0


def center_gimbal(argv: Sequence[str] | None = None) -> int:
    """Move the gimbal back to its centre position."""
    args = _parser("rmcan center-gimbal", "Recenter the gimbal.").parse_args(_args(argv))
    with CanStream(args.interface, COMMAND_CAN_ID) as stream:
        gimbal = Gimbal(stream)
        gimbal.send_workmode(1)
        gimbal.recenter()
    return 0


def move_gimbal(argv: Sequence[str] | None = None) -> int:
    """Move the gimbal to a fixed yaw and pitch."""
    args = _parser("rmcan move-gimbal", "Move the gimbal.").parse_args(_args(argv))
    with CanStream(args.interface, COMMAND_CAN_ID) as stream:
        gimbal = Gimbal(stream)
        gimbal.send_workmode(1)
        gimbal.send_angles(*GIMBAL_TARGET)
    return 0


def _on_attitude_battery(meta: Metadata, attitude: Attitude, battery: Battery) -> None:
    print(f"t {meta.time_ns}Vel cls {_num(attitude.yaw)} bat {battery.percent}", flush=True)


def _on_attitude(_meta: Metadata, attitude: Attitude) -> None:
    print(
        f"Attitude {_num(attitude.roll)} {_num(attitude.pitch)} {_num(attitude.yaw)}",
        flush=True,
    )


def _on_wheel_encoders(_meta: Metadata, encoders: WheelEncoders) -> None:
    print(f"ENC RPM {encoders.rpm[0]}", flush=True)


def _on_imu(_meta: Metadata, imu: Imu) -> None:
    print(f"GYRO {_num(imu.gyr_x)}", flush=True)


def _on_battery(_meta: Metadata, battery: Battery) -> None:
    print(f"BAT {battery.percent}", flush=True)


def _on_velocity(_meta: Metadata, velocity: Velocity) -> None:
    print(f"Vel {_num(velocity.vgy)}", flush=True)


def read_enc(argv: Sequence[str] | None = None) -> int:
    """Subscribe to chassis telemetry and print it until interrupted."""
    args = _parser("rmcan read-enc", "Print chassis telemetry.").parse_args(_args(argv))
    with CanStream(args.interface, PUSH_CAN_ID) as in_stream, CanStream(
        args.interface, CONFIG_CAN_ID
    ) as out_stream:
        dds = Dds(in_stream, out_stream)
        dds.subscribe(_on_attitude_battery, [Attitude, Battery], 20)
        dds.subscribe(_on_attitude, [Attitude], 20)
        dds.subscribe(_on_wheel_encoders, [WheelEncoders], 20)
        dds.subscribe(_on_imu, [Imu], 20)
        dds.subscribe(_on_velocity, [Velocity], 20)
        dds.subscribe(_on_battery, [Battery], 1)
        out_stream.flush()
        dds.start()
        try:
            while True:
                time.sleep(0.1)
        except KeyboardInterrupt:
            pass
    return 0


COMMANDS: dict[str, Callable[[Sequence[str] | None], int]] = {
    "run-vel": run_vel,
    "control-vel": control_vel,
    "stop-wheel": stop_wheel,
    "center-gimbal": center_gimbal,
    "move-gimbal": move_gimbal,
    "read-enc": read_enc,
}


def main(argv: Sequence[str] | None = None) -> int:
    """Run one of the robot tools named by the first argument."""
    parser = argparse.ArgumentParser(prog="rmcan", description="Robot CAN tools.")
    parser.add_argument("command", choices=sorted(COMMANDS))
    parser.add_argument("args", nargs=argparse.REMAINDER)
    args = parser.parse_args(_args(argv))
    return COMMANDS[args.command](args.args)


if __name__ == "__main__":
    sys.exit(main())