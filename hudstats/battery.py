"""Laptop battery charge, power draw and remaining time from sysfs."""

from __future__ import annotations

import logging
import math
import os
from collections import deque

log = logging.getLogger(__name__)

MAX_BATTERIES = 2
HISTORY_LENGTH = 25
_NOT_DRAINING = ("Charging", "Unknown", "Full")


def _first_line(path: str) -> str | None:
    """First line of a file without its newline, or None if missing or empty."""
    try:
        with open(path, encoding="utf-8", errors="replace") as fh:
            line = fh.readline()
    except OSError:
        return None
    if not line:
        return None
    return line.rstrip("\n")


def _fdiv(a: float, b: float) -> float:
    """Floating division that yields nan or inf instead of raising."""
    if b:
        return a / b
    if a == 0 or math.isnan(a):
        return math.nan
    return math.copysign(math.inf, a)


class BatteryStats:
    """Combined state of up to two batteries under a power_supply directory."""

    def __init__(self, power_supply_dir: str = "/sys/class/power_supply") -> None:
        self.power_supply_dir = power_supply_dir
        self.batt_paths: list[str] = []
        self.current_watt = 0.0
        self.current_percent = 0.0
        self.remaining_time = 0.0
        self.current_status = ""
        self.state: list[str] = [""] * MAX_BATTERIES
        self.batt_count = 0
        self.batt_check = False
        self.current_now_vec: deque[float] = deque(maxlen=HISTORY_LENGTH)

    def find_batteries(self) -> int:
        """Find entries whose name contains "BAT"; returns how many were found."""
        try:
            names = sorted(os.listdir(self.power_supply_dir))
        except OSError:
            names = []
        self.batt_paths = [
            os.path.join(self.power_supply_dir, name) for name in names if "BAT" in name
        ][:MAX_BATTERIES]
        self.batt_count = len(self.batt_paths)
        self.batt_check = True
        return self.batt_count

    def update(self) -> None:
        """Refresh power, charge percentage and remaining time."""
        if not self.batt_check:
            self.find_batteries()
            if self.batt_count == 0:
                log.error("No battery found")
        if self.batt_count > 0:
            self.current_watt = self.get_power()
            self.current_percent = self.get_percent()
            self.remaining_time = self.get_time_remaining()

    def get_percent(self) -> float:
        """Charge level in percent across all batteries."""
        charge_now = 0.0
        charge_full = 0.0
        for path in self.batt_paths:
            if os.path.exists(os.path.join(path, "charge_now")):
                now_file, full_file = "charge_now", "charge_full"
            elif os.path.exists(os.path.join(path, "energy_now")):
                now_file, full_file = "energy_now", "energy_full"
            else:
                # Only a percentage is available: average the batteries.
                line = _first_line(os.path.join(path, "capacity"))
                if line is not None:
                    charge_now += float(line) / 100
                    charge_full = float(self.batt_count)
                continue
            line = _first_line(os.path.join(path, now_file))
            if line is not None:
                charge_now += float(line) / 1_000_000
            line = _first_line(os.path.join(path, full_file))
            if line is not None:
                charge_full += float(line) / 1_000_000
        return _fdiv(charge_now, charge_full) * 100

    def get_power(self) -> float:
        """Power drawn in watts; 0 while charging, full or in an unknown state."""
        current = 0.0
        voltage = 0.0
        for i, path in enumerate(self.batt_paths):
            status = _first_line(os.path.join(path, "status"))
            if status is not None:
                self.current_status = status
                self.state[i] = status
            if self.state[i] in _NOT_DRAINING:
                return 0.0

            if os.path.exists(os.path.join(path, "current_now")):
                line = _first_line(os.path.join(path, "current_now"))
                if line is not None:
                    current += float(line) / 1_000_000
                line = _first_line(os.path.join(path, "voltage_now"))
                if line is not None:
                    voltage += float(line) / 1_000_000
            else:
                line = _first_line(os.path.join(path, "power_now"))
                if line is not None:
                    current += float(line) / 1_000_000
                    voltage = 1.0
        return current * voltage

    def get_time_remaining(self) -> float:
        """Remaining charge divided by the recent average draw."""
        charge = 0.0
        for path in self.batt_paths:
            current_now = os.path.join(path, "current_now")
            power_now = os.path.join(path, "power_now")
            if os.path.exists(current_now):
                line = _first_line(current_now)
                if line is not None:
                    self.current_now_vec.append(float(line))
            elif os.path.exists(power_now):
                # Both figures come from power_now.
                line = _first_line(power_now)
                power = voltage = float(line) if line is not None else 0.0
                self.current_now_vec.append(_fdiv(power, voltage))
            charge_now = os.path.join(path, "charge_now")
            if os.path.exists(charge_now):
                line = _first_line(charge_now)
                if line is not None:
                    charge += float(line)

        average = _fdiv(sum(self.current_now_vec), float(len(self.current_now_vec)))
        return _fdiv(charge, average)