# chargerlink

`chargerlink` prepares commands for a multi-channel battery charger that is
reached over a serial port. It checks each command before queuing it and
holds queued commands in a bounded first-in, first-out pool. Your code then
takes the commands off the pool one at a time.

## Installation

```
pip install .
```

To run the tests, install the test extra and run pytest:

```
pip install ".[test]"
pytest
```

## Commands

`chargerlink.commands` defines the commands the charger accepts.
`CommandType` is an `IntEnum` that lists them.

| Command      | Code   | Builder                                           | Accepted values                                                      |
|--------------|--------|---------------------------------------------------|----------------------------------------------------------------------|
| `SET_PARAMS` | `0x63` | `make_set_params(min_level, max_level, max_time)` | levels 0–100 with `min_level <= max_level`; `max_time` 1–240 minutes |
| `ON_OFF`     | `0x64` | `make_on_off(on_off, channel)`                    | `on_off` 0 or 1; `channel` 0–7                                       |
| `EMERGENCY`  | `0x65` | `make_emergency()`                                | no parameters                                                        |

Each builder returns a frozen `DeviceCommand` dataclass. Its `command_type`
field holds the code. Its `data` field holds a `SetParams` or `OnOff`
dataclass, or `None` for `EMERGENCY`.

`validate_command(command)` returns the command if it is valid. It raises
`InvalidCommandError` in these cases:

- the command is `None`
- the type code is unknown
- the payload is missing or of the wrong kind
- a value is out of range

`InvalidCommandError` is a subclass of both `ChargerError` and `ValueError`.

```python
from chargerlink.commands import make_set_params, validate_command, InvalidCommandError

validate_command(make_set_params(10, 90, 60))      # returns the command

try:
    validate_command(make_set_params(90, 80, 60))  # min_level above max_level
except InvalidCommandError as err:
    print(err)
```

## The command link

`chargerlink.link.CommandLink(pool_size=32)` owns the serial port and the
command pool. If `pool_size` is not positive, the constructor raises
`ValueError`.

```python
from chargerlink.commands import make_on_off, make_emergency
from chargerlink.link import CommandLink, NoCommandError

with CommandLink() as link:
    link.open("/dev/null", 0)      # test mode: no device is opened
    link.add(make_on_off(1, 3))
    link.add(make_emergency())

    print(link.active_count(), link.unused_count())   # 2 30

    while True:
        try:
            command = link.next_command()   # oldest first
        except NoCommandError:
            break
        print(command)
```

When the `with` block exits, the link is closed if it is still open.

### Methods

- `open(port, speed)` opens the port for writing and returns the link. It
  sets `CLOCAL | CREAD` and sets both the input and output speed to `speed`,
  which must be a `termios` baud-rate constant such as `termios.B9600`. Port
  names may be at most 30 characters. The name `/dev/null` selects a test
  mode that opens no device.
- `close()` closes the port and discards any queued commands.
- `add(command)` validates the command and appends it to the pool.
- `next_command()` removes and returns the oldest queued command.
- `active_count()` returns the number of queued commands.
- `unused_count()` returns the number of free slots.
- `is_open` is a property that is true between a successful `open()` and
  `close()`.

A lock guards the pool, so several threads can add and take commands. When
the link is not open, `active_count()` and `unused_count()` return 0.

### Errors

Every error in this table is a `ChargerError`.

| Error                     | Raised when                                                                         |
|---------------------------|-------------------------------------------------------------------------------------|
| `AlreadyInitializedError` | `open()` is called on an open link                                                  |
| `NotInitializedError`     | `close()`, `add()` or `next_command()` is called on a link that is not open         |
| `PortError`               | the port name is `None` or too long, or the port cannot be opened or configured     |
| `InvalidCommandError`     | a command fails validation                                                          |
| `PoolFullError`           | every slot in the pool is in use                                                    |
| `NoCommandError`          | the pool holds no commands                                                          |

The modules log through the standard `logging` module, under the names
`chargerlink.commands` and `chargerlink.link`.

## What it does not do

`chargerlink` opens and configures the serial port. It does not encode
commands into bytes and does not write them to the device. Sending the
commands taken from `next_command()` is left to your code. The package has no
command-line program.