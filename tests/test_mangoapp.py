import struct

import pytest

from hudstats.mangoapp import (
    CTRL_CLEAR,
    CTRL_IGNORE,
    CTRL_SET,
    CTRL_TOGGLE,
    USAGE,
    AppMessage,
    CtrlMessage,
    UsageError,
    build_ctrl_message,
    str_to_bool,
)


@pytest.mark.parametrize("value", ["true", "TRUE", "True", "1"])
def test_str_to_bool_true(value):
    assert str_to_bool(value) is True


@pytest.mark.parametrize("value", ["false", "FaLsE", "0"])
def test_str_to_bool_false(value):
    assert str_to_bool(value) is False


@pytest.mark.parametrize("value", ["yes", "", "01", "2"])
def test_str_to_bool_rejects(value):
    with pytest.raises(ValueError, match="not an accepted boolean"):
        str_to_bool(value)


def test_set_no_display_true_and_false():
    on = build_ctrl_message(["set", "no_display", "true"])
    assert on.no_display == CTRL_SET
    assert on.log_session == CTRL_IGNORE
    off = build_ctrl_message(["set", "no_display", "0"])
    assert off.no_display == CTRL_CLEAR


def test_toggle_log_session():
    msg = build_ctrl_message(["toggle", "log_session"])
    assert msg.log_session == CTRL_TOGGLE
    assert msg.no_display == CTRL_IGNORE


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["set"],
        ["set", "no_display"],
        ["toggle", "no_display", "1"],
        ["frob", "no_display"],
        ["set", "bogus", "1"],
        ["toggle", "bogus"],
    ],
)
def test_usage_errors(argv):
    with pytest.raises(UsageError) as info:
        build_ctrl_message(argv)
    assert str(info.value) == USAGE


def test_invalid_boolean_is_reported_before_attribute():
    with pytest.raises(ValueError, match="maybe"):
        build_ctrl_message(["set", "bogus", "maybe"])


def test_ctrl_message_header_bytes():
    data = build_ctrl_message(["toggle", "no_display"]).pack()
    assert data[:16] == struct.pack("<qII", 2, 1, 1)
    assert data[16] == CTRL_TOGGLE
    assert data[17] == CTRL_IGNORE


def test_ctrl_message_round_trip():
    msg = CtrlMessage(no_display=CTRL_SET, log_session=CTRL_TOGGLE, log_session_name="run")
    assert CtrlMessage.unpack(msg.pack()) == msg


def test_ctrl_message_truncated():
    data = CtrlMessage().pack()
    with pytest.raises(ValueError):
        CtrlMessage.unpack(data[:-1])


def test_app_message_full():
    data = struct.pack("<qIIQBBQQ", 1, 1, 4242, 16_666_666, 1, 2, 15_000_000, 30_000_000)
    msg = AppMessage.unpack(data)
    assert msg.msg_type == 1
    assert msg.pid == 4242
    assert msg.visible_frametime_ns == 16_666_666
    assert msg.fsr_upscale == 1
    assert msg.fsr_sharpness == 2
    assert msg.app_frametime_ns == 15_000_000
    assert msg.latency_ns == 30_000_000


def test_app_message_older_sender():
    data = struct.pack("<qIIQBB", 1, 1, 7, 1000, 0, 3)
    msg = AppMessage.unpack(data)
    assert msg.fsr_sharpness == 3
    assert msg.app_frametime_ns is None
    assert msg.latency_ns is None


def test_app_message_bad_version():
    data = struct.pack("<qIIQ", 1, 2, 7, 1000)
    with pytest.raises(ValueError, match="Unsupported"):
        AppMessage.unpack(data)


def test_app_message_too_short():
    with pytest.raises(ValueError):
        AppMessage.unpack(b"\x01\x00")