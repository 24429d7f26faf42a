"""Battery state of game controllers listed under the power_supply class."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field

POWER_SUPPLY_DIR = "/sys/class/power_supply"

# Display label and the name fragments that identify each kind of controller.
_KINDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("XBOX PAD", ("gip", "xpadneo")),
    ("DS4 PAD", ("sony_controller",)),
    ("DS5 PAD", ("ps-controller",)),
    ("SWITCH PAD", ("nintendo_switch_controller",)),
    ("8BITDO PAD", ("hid-e4",)),
)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@dataclass(order=True)
class Gamepad:
    """One controller; gamepads order by name."""

    name: str = ""
    battery: str = field(default="", compare=False)
    battery_percent: str = field(default="", compare=False)
    report_percent: bool = field(default=False, compare=False)
    is_charging: bool = field(default=False, compare=False)


def scan_gamepads(path: str = POWER_SUPPLY_DIR) -> list[str]:
    """Paths of the controller entries under ``path``."""
    found: list[str] = []
    for name in sorted(os.listdir(path)):
        for _, patterns in _KINDS:
            for pattern in patterns:
                if pattern in name:
                    found.append(os.path.join(path, name))
    return found


def _first_line(path: str) -> str | None:
    try:
        with open(path, encoding="utf-8", errors="replace") as fh:
            line = fh.readline()
    except OSError:
        return None
    if not line:
        return None
    return line.rstrip("\n")


def _parse_int(text: str) -> int:
    match = _LEADING_INT.match(text)
    if match is None:
        raise ValueError(f"invalid battery capacity: {text!r}")
    return int(match.group(1))


def _battery_level(percent: int) -> str | None:
    if 0 <= percent <= 25:
        return "Low"
    if 26 <= percent <= 49:
        return "Normal"
    if 50 <= percent <= 74:
        return "High"
    if 75 <= percent <= 100:
        return "Full"
    return None


def gamepad_info(paths: list[str]) -> list[Gamepad]:
    """Read name, charging state and battery level of each controller path.

    Controllers of a kind are numbered ("XBOX PAD-1", "XBOX PAD-2") when more
    than one of that kind is present. The result is sorted by name.
    """
    counts = {
        label: sum(
            1
            for p in paths
            for pattern in patterns
            if pattern in os.path.basename(p)
        )
        for label, patterns in _KINDS
    }
    counters = dict.fromkeys(counts, 0)
    pads: list[Gamepad] = []

    for path in paths:
        pad = Gamepad()
        for label, patterns in _KINDS:
            if any(pattern in path for pattern in patterns):
                if counts[label] == 1:
                    pad.name = label
                else:
                    pad.name = f"{label}-{counters[label] + 1}"
                counters[label] += 1

        status = _first_line(os.path.join(path, "status"))
        if status in ("Charging", "Full"):
            pad.is_charging = True

        capacity = os.path.join(path, "capacity")
        if os.path.exists(capacity):
            line = _first_line(capacity)
            if line is not None:
                pad.battery_percent = line
                pad.report_percent = True
                level = _battery_level(_parse_int(line))
                if level is not None:
                    pad.battery = level
        else:
            line = _first_line(os.path.join(path, "capacity_level"))
            if line is not None:
                pad.battery = line
        pads.append(pad)

    pads.sort()
    return pads