[build-system]
requires = ["setuptools>=61"]
build-backend = "setuptools.build_meta"

[project]
name = "rmcan"
version = "0.1.0"
description = "Talk to a RoboMaster chassis, gimbal and LEDs over Linux SocketCAN"
requires-python = ">=3.10"
dependencies = []
keywords = ["robomaster", "can", "socketcan", "robotics", "chassis", "gimbal", "dds"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Embedded Systems :: Controller Area Network (CAN)",
    "Topic :: Scientific/Engineering :: Human Machine Interfaces",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
rmcan = "rmcan.cli:main"

[tool.setuptools.packages.find]
include = ["rmcan*"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
