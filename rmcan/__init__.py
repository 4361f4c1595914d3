"""RoboMaster chassis, gimbal, LED control and telemetry over SocketCAN."""

__version__ = "0.1.0"