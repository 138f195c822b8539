"""Command definitions for the multi-channel battery charger and their validation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Union

logger = logging.getLogger(__name__)

MAX_LEVEL = 100
MAX_TIME = 240
MAX_CHANNEL = 7


class CommandType(IntEnum):
    """Command codes understood by the charger."""

    SET_PARAMS = 0x63
    ON_OFF = 0x64
    EMERGENCY = 0x65


class ChargerError(Exception):
    """Base class for charger link errors."""


class InvalidCommandError(ChargerError, ValueError):
    """Raised when a command does not meet the device specification."""


@dataclass(frozen=True)
class SetParams:
    """Charging parameters: levels in percent, time in minutes."""

    min_level: int
    max_level: int
    max_time: int


@dataclass(frozen=True)
class OnOff:
    """Switch a channel on (1) or off (0)."""

    on_off: int
    channel: int


@dataclass(frozen=True)
class DeviceCommand:
    """A command for the device: a type code and its payload, if any."""

    command_type: int
    data: Optional[Union[SetParams, OnOff]] = None


def make_set_params(min_level: int, max_level: int, max_time: int) -> DeviceCommand:
    """Build a SET_PARAMS command."""
    return DeviceCommand(CommandType.SET_PARAMS, SetParams(min_level, max_level, max_time))


def make_on_off(on_off: int, channel: int) -> DeviceCommand:
    """Build an ON_OFF command."""
    return DeviceCommand(CommandType.ON_OFF, OnOff(int(on_off), channel))


def make_emergency() -> DeviceCommand:
    """Build an EMERGENCY command."""
    return DeviceCommand(CommandType.EMERGENCY)


def _validate_set_params(params: object) -> None:
    if not isinstance(params, SetParams):
        raise InvalidCommandError("SET_PARAMS command requires SetParams data")
    invalid = (
        not 0 <= params.min_level <= MAX_LEVEL
        or not 0 <= params.max_level <= MAX_LEVEL
        or not 1 <= params.max_time <= MAX_TIME
        or params.min_level > params.max_level
    )
    if invalid:
        logger.warning(
            "Invalid SET_PARAMS command: min_level=%d, max_level=%d, max_time=%d",
            params.min_level,
            params.max_level,
            params.max_time,
        )
        raise InvalidCommandError(
            f"invalid SET_PARAMS command: min_level={params.min_level}, "
            f"max_level={params.max_level}, max_time={params.max_time}"
        )
    logger.info(
        "Validated SET_PARAMS command: min_level=%d, max_level=%d, max_time=%d",
        params.min_level,
        params.max_level,
        params.max_time,
    )


def _validate_on_off(switch: object) -> None:
    if not isinstance(switch, OnOff):
        raise InvalidCommandError("ON_OFF command requires OnOff data")
    if switch.on_off not in (0, 1) or not 0 <= switch.channel <= MAX_CHANNEL:
        logger.warning(
            "Invalid ON_OFF command: on_off=%d, channel=%d", switch.on_off, switch.channel
        )
        raise InvalidCommandError(
            f"invalid ON_OFF command: on_off={switch.on_off}, channel={switch.channel}"
        )
    logger.info("Validated ON_OFF command: on_off=%d, channel=%d", switch.on_off, switch.channel)


def validate_command(command: Optional[DeviceCommand]) -> DeviceCommand:
    """Check a command against the device specification and return it.

    Raises InvalidCommandError if the command is missing, of an unknown
    type, or carries out-of-range parameters.
    """
    if command is None:
        logger.warning("Missing command")
        raise InvalidCommandError("command is missing")

    try:
        kind = CommandType(command.command_type)
    except ValueError:
        logger.warning("Unknown command type: 0x%x", command.command_type)
        raise InvalidCommandError(
            f"unknown command type: 0x{command.command_type:x}"
        ) from None

    if kind is CommandType.SET_PARAMS:
        _validate_set_params(command.data)
    elif kind is CommandType.ON_OFF:
        _validate_on_off(command.data)
    else:
        logger.info("Validated EMERGENCY command")
    return command