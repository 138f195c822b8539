"""A bounded, thread-safe command queue attached to the charger's serial port."""

from __future__ import annotations

import logging
import os
import threading
from collections import deque
from types import TracebackType
from typing import Deque, Optional, Type

from chargerlink.commands import ChargerError, DeviceCommand, validate_command

logger = logging.getLogger(__name__)

POOL_SIZE = 32
MAX_PORT_NAME = 30
TEST_PORT = "/dev/null"


class AlreadyInitializedError(ChargerError):
    """Raised when opening a link that is already open."""


class NotInitializedError(ChargerError):
    """Raised when using a link that has not been opened."""


class PoolFullError(ChargerError):
    """Raised when no free slot is left for a new command."""


class NoCommandError(ChargerError):
    """Raised when no command is waiting to be taken."""


class PortError(ChargerError):
    """Raised when the serial port name is unusable or the port cannot be set up."""


def _configure_port(fd: int, port: str, speed: int) -> None:
    import termios

    try:
        attrs = termios.tcgetattr(fd)
    except termios.error as exc:
        raise PortError(f"failed to get terminal attributes for {port}") from exc
    attrs[2] |= termios.CLOCAL | termios.CREAD
    attrs[4] = speed
    attrs[5] = speed
    try:
        termios.tcsetattr(fd, termios.TCSANOW, attrs)
    except termios.error as exc:
        raise PortError(f"failed to set terminal attributes for {port}") from exc


class CommandLink:
    """Serial link to the charger holding a FIFO of at most ``pool_size`` commands."""

    def __init__(self, pool_size: int = POOL_SIZE) -> None:
        if pool_size <= 0:
            raise ValueError("pool_size must be positive")
        self.pool_size = pool_size
        self._lock = threading.Lock()
        self._active: Deque[DeviceCommand] = deque()
        self._fd: Optional[int] = None
        self._is_open = False

    @property
    def is_open(self) -> bool:
        """Whether the link has been opened and not yet closed."""
        return self._is_open

    def open(self, port: Optional[str], speed: int) -> "CommandLink":
        """Open the serial port and reset the command pool.

        ``speed`` is a termios speed constant. The port ``/dev/null`` is
        accepted without touching any device.
        """
        if self._is_open:
            logger.warning("Serial communication already initialized")
            raise AlreadyInitializedError("link is already open")
        if port is None:
            logger.warning("Initialization failed: port name is missing")
            raise PortError("port name is missing")
        if len(port) > MAX_PORT_NAME:
            logger.warning(
                "Initialization failed: port name exceeds maximum length (%d characters)",
                MAX_PORT_NAME,
            )
            raise PortError(f"port name exceeds {MAX_PORT_NAME} characters")

        logger.info("Initializing serial communication module")
        if port == TEST_PORT:
            fd = None
            logger.info("Serial communication initialized with %s (test mode)", TEST_PORT)
        else:
            flags = os.O_WRONLY | getattr(os, "O_NOCTTY", 0)
            try:
                fd = os.open(port, flags)
            except OSError as exc:
                logger.warning("Failed to open serial port %s", port)
                raise PortError(f"failed to open serial port {port}") from exc
            try:
                _configure_port(fd, port, speed)
            except BaseException:
                os.close(fd)
                raise
            logger.info("Serial port %s opened and configured", port)

        with self._lock:
            self._fd = fd
            self._active.clear()
            self._is_open = True
        logger.info("Serial communication module initialized")
        return self

    def close(self) -> None:
        """Close the port and drop all pending commands."""
        if not self._is_open:
            logger.warning("Deinitialization failed: module not initialized")
            raise NotInitializedError("link is not open")
        with self._lock:
            if self._fd is not None:
                os.close(self._fd)
                logger.info("Serial port closed")
            self._fd = None
            self._active.clear()
            self._is_open = False
        logger.info("Serial communication module deinitialized")

    def add(self, command: Optional[DeviceCommand]) -> None:
        """Validate a command and append it to the queue."""
        if not self._is_open:
            logger.warning("Failed to add command: module not initialized")
            raise NotInitializedError("link is not open")
        validate_command(command)
        with self._lock:
            if len(self._active) >= self.pool_size:
                logger.warning("Command pool is full (no unused entries available)")
                raise PoolFullError("command pool is full")
            self._active.append(command)
        logger.info("Command added successfully: 0x%x", command.command_type)

    def next_command(self) -> DeviceCommand:
        """Remove and return the oldest queued command."""
        if not self._is_open:
            logger.warning("Failed to get command: module not initialized")
            raise NotInitializedError("link is not open")
        with self._lock:
            if not self._active:
                logger.info("No active commands available")
                raise NoCommandError("no active commands available")
            command = self._active.popleft()
        logger.info("Command retrieved and entry returned to unused pool")
        return command

    def active_count(self) -> int:
        """Number of queued commands; 0 when the link is not open."""
        if not self._is_open:
            return 0
        with self._lock:
            return len(self._active)

    def unused_count(self) -> int:
        """Number of free slots; 0 when the link is not open."""
        if not self._is_open:
            return 0
        with self._lock:
            return self.pool_size - len(self._active)

    def __enter__(self) -> "CommandLink":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        if self._is_open:
            self.close()