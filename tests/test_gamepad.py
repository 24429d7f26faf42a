import os

import pytest

from hudstats.gamepad import Gamepad, gamepad_info, scan_gamepads


def _entry(root, name, **files):
    path = root / name
    path.mkdir()
    for fname, content in files.items():
        (path / fname).write_text(content + "\n")
    return str(path)


def test_scan_finds_only_controllers(tmp_path):
    xbox = _entry(tmp_path, "gip0")
    ds4 = _entry(tmp_path, "sony_controller_battery_aa")
    _entry(tmp_path, "BAT0")
    _entry(tmp_path, "AC")
    found = scan_gamepads(str(tmp_path))
    assert sorted(found) == sorted([xbox, ds4])


def test_scan_missing_directory_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        scan_gamepads(str(tmp_path / "missing"))


def test_single_pads_named_without_number(tmp_path):
    _entry(tmp_path, "gip0", capacity="80", status="Charging")
    _entry(tmp_path, "sony_controller_battery_aa", capacity_level="Normal", status="Discharging")
    pads = gamepad_info(scan_gamepads(str(tmp_path)))
    assert [p.name for p in pads] == ["DS4 PAD", "XBOX PAD"]
    ds4, xbox = pads
    assert xbox.battery == "Full"
    assert xbox.battery_percent == "80"
    assert xbox.report_percent is True
    assert xbox.is_charging is True
    assert ds4.battery == "Normal"
    assert ds4.report_percent is False
    assert ds4.is_charging is False


def test_multiple_pads_of_a_kind_are_numbered(tmp_path):
    _entry(tmp_path, "gip0", capacity="10")
    _entry(tmp_path, "xpadneo-1", capacity="60")
    pads = gamepad_info(scan_gamepads(str(tmp_path)))
    assert [p.name for p in pads] == ["XBOX PAD-1", "XBOX PAD-2"]
    assert {p.battery for p in pads} == {"Low", "High"}


def test_full_status_counts_as_charging(tmp_path):
    _entry(tmp_path, "hid-e4aa", status="Full")
    (pad,) = gamepad_info(scan_gamepads(str(tmp_path)))
    assert pad.name == "8BITDO PAD"
    assert pad.is_charging is True
    assert pad.battery == ""


def test_non_numeric_capacity_raises(tmp_path):
    path = _entry(tmp_path, "ps-controller-battery-x", capacity="abc")
    with pytest.raises(ValueError):
        gamepad_info([path])


def test_result_is_sorted_by_name(tmp_path):
    paths = [
        _entry(tmp_path, "nintendo_switch_controller_1"),
        _entry(tmp_path, "hid-e4bb"),
        _entry(tmp_path, "ps-controller-battery-y"),
    ]
    pads = gamepad_info(paths)
    names = [p.name for p in pads]
    assert names == sorted(names)
    assert len(pads) == len(paths)


def test_no_paths_gives_no_pads():
    assert gamepad_info([]) == []


def test_gamepad_ordering():
    assert Gamepad(name="A", battery="Full") < Gamepad(name="B", battery="Low")
    assert os.path.basename("x") == "x"