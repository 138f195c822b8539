[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "chargerlink"
version = "0.1.0"
description = "Validated, bounded FIFO command queue for a multi-channel battery charger on a serial port"
requires-python = ">=3.10"
dependencies = []
keywords = ["serial", "battery", "charger", "command queue", "tty"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Terminals :: Serial",
    "Topic :: System :: Hardware",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["chargerlink"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
