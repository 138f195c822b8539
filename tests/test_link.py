import threading

import pytest

from chargerlink.commands import (
    CommandType,
    DeviceCommand,
    InvalidCommandError,
    make_emergency,
    make_on_off,
    make_set_params,
)
from chargerlink.link import (
    POOL_SIZE,
    AlreadyInitializedError,
    CommandLink,
    NoCommandError,
    NotInitializedError,
    PoolFullError,
    PortError,
)

B9600 = 9600
B115200 = 115200


@pytest.fixture
def link():
    lnk = CommandLink()
    lnk.open("/dev/null", B9600)
    yield lnk
    if lnk.is_open:
        lnk.close()


def test_init_valid_port():
    lnk = CommandLink()
    assert lnk.open("/dev/null", B9600) is lnk
    assert lnk.is_open
    lnk.close()
    assert not lnk.is_open


def test_init_long_port():
    with pytest.raises(PortError):
        CommandLink().open("/dev/port_name_exceeding_thirty_chars_123", B9600)


def test_init_null_port():
    with pytest.raises(PortError):
        CommandLink().open(None, B9600)


def test_init_missing_device():
    with pytest.raises(PortError):
        CommandLink().open("/nonexistent/ttyX", B9600)


def test_init_double_initialization(link):
    with pytest.raises(AlreadyInitializedError):
        link.open("/dev/null", B9600)
    assert link.is_open


def test_init_various_speeds():
    lnk = CommandLink()
    lnk.open("/dev/null", B9600)
    lnk.close()
    lnk.open("/dev/null", B115200)
    assert lnk.unused_count() == POOL_SIZE
    lnk.close()


def test_deinit_without_init():
    with pytest.raises(NotInitializedError):
        CommandLink().close()


def test_deinit_double_deinit():
    lnk = CommandLink()
    lnk.open("/dev/null", B9600)
    lnk.close()
    with pytest.raises(NotInitializedError):
        lnk.close()


def test_add_valid_set_params_command(link):
    link.add(make_set_params(10, 90, 60))
    assert link.active_count() == 1


def test_add_boundary_set_params_command(link):
    link.add(make_set_params(0, 0, 1))
    link.add(make_set_params(100, 100, 240))
    assert link.active_count() == 2


@pytest.mark.parametrize(
    "min_level,max_level,max_time",
    [(101, 90, 60), (10, 101, 60), (10, 90, 0), (10, 90, 241), (90, 80, 60)],
)
def test_add_invalid_set_params(link, min_level, max_level, max_time):
    with pytest.raises(InvalidCommandError):
        link.add(make_set_params(min_level, max_level, max_time))
    assert link.active_count() == 0


def test_add_valid_on_off_command(link):
    link.add(make_on_off(1, 3))
    link.add(make_on_off(0, 5))
    assert link.active_count() == 2


def test_add_boundary_on_off_command(link):
    link.add(make_on_off(1, 0))
    link.add(make_on_off(0, 7))
    assert link.active_count() == 2


@pytest.mark.parametrize("on_off,channel", [(2, 3), (1, 8)])
def test_add_invalid_on_off(link, on_off, channel):
    with pytest.raises(InvalidCommandError):
        link.add(make_on_off(on_off, channel))
    assert link.active_count() == 0


def test_add_emergency_command(link):
    link.add(make_emergency())
    assert link.active_count() == 1


def test_add_invalid_command_type(link):
    with pytest.raises(InvalidCommandError):
        link.add(DeviceCommand(0xFF))
    assert link.active_count() == 0


def test_add_null_command(link):
    with pytest.raises(InvalidCommandError):
        link.add(None)
    assert link.active_count() == 0


def test_add_commands_to_fill_pool(link):
    cmd = make_emergency()
    for _ in range(POOL_SIZE):
        link.add(cmd)
    with pytest.raises(PoolFullError):
        link.add(cmd)
    assert link.active_count() == POOL_SIZE
    assert link.unused_count() == 0


def test_add_command_without_init():
    with pytest.raises(NotInitializedError):
        CommandLink().add(make_emergency())


def test_get_next_command(link):
    link.add(make_emergency())
    assert link.active_count() == 1
    got = link.next_command()
    assert got.command_type == CommandType.EMERGENCY
    assert link.active_count() == 0
    with pytest.raises(NoCommandError):
        link.next_command()


def test_get_next_command_without_init():
    with pytest.raises(NotInitializedError):
        CommandLink().next_command()


def test_get_commands_fifo_order(link):
    link.add(make_emergency())
    link.add(make_on_off(1, 1))
    link.add(make_set_params(20, 80, 60))
    assert link.active_count() == 3

    first = link.next_command()
    assert first.command_type == CommandType.EMERGENCY

    second = link.next_command()
    assert second.command_type == CommandType.ON_OFF
    assert second.data.on_off == 1
    assert second.data.channel == 1

    third = link.next_command()
    assert third.command_type == CommandType.SET_PARAMS
    assert third.data.min_level == 20
    assert third.data.max_level == 80
    assert third.data.max_time == 60

    with pytest.raises(NoCommandError):
        link.next_command()


def test_command_count_without_init():
    lnk = CommandLink()
    assert lnk.active_count() == 0
    assert lnk.unused_count() == 0


def test_command_count_with_empty_pools(link):
    assert link.active_count() == 0
    assert link.unused_count() == POOL_SIZE


def test_command_count_with_activity(link):
    num = 5
    for _ in range(num):
        link.add(make_emergency())
    assert link.active_count() == num
    assert link.unused_count() == POOL_SIZE - num
    link.next_command()
    assert link.active_count() == num - 1
    assert link.unused_count() == POOL_SIZE - num + 1


def test_reopen_starts_with_empty_pool():
    lnk = CommandLink()
    lnk.open("/dev/null", B9600)
    lnk.add(make_emergency())
    lnk.close()
    lnk.open("/dev/null", B9600)
    assert lnk.active_count() == 0
    assert lnk.unused_count() == POOL_SIZE
    lnk.close()


def test_custom_pool_size():
    lnk = CommandLink(2).open("/dev/null", B9600)
    lnk.add(make_emergency())
    lnk.add(make_emergency())
    with pytest.raises(PoolFullError):
        lnk.add(make_emergency())
    lnk.close()
    assert lnk.active_count() == 0


def test_invalid_pool_size():
    with pytest.raises(ValueError):
        CommandLink(0)


def test_context_manager_closes():
    with CommandLink().open("/dev/null", B9600) as lnk:
        lnk.add(make_emergency())
        assert lnk.active_count() == 1
    assert not lnk.is_open
    assert lnk.active_count() == 0


def test_concurrent_adds_respect_capacity(link):
    errors = []

    def worker():
        for _ in range(10):
            try:
                link.add(make_emergency())
            except PoolFullError as exc:
                errors.append(exc)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert link.active_count() == POOL_SIZE
    assert len(errors) == 80 - POOL_SIZE