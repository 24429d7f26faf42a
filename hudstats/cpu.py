"""CPU load, clock, temperature and power readings from procfs and sysfs."""

from __future__ import annotations

import enum
import logging
import os
import re
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from .file_utils import LsFlags, file_exists, ls, read_line

log = logging.getLogger(__name__)

_INT_RE = re.compile(r"\s*([+-]?\d+)")
_CPU_ID_RE = re.compile(r"cpu(\d{1,4})")


def _read_int(path: str | None) -> int | None:
    """Leading integer of a file's contents, or None if missing or unparsable."""
    if not path:
        return None
    try:
        with open(path, encoding="ascii", errors="replace") as fh:
            text = fh.read()
    except OSError:
        return None
    match = _INT_RE.match(text)
    return int(match.group(1)) if match else None


def _div_trunc(a: int, b: int) -> int:
    """Integer division rounding toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


@dataclass
class CpuData:
    """Accumulated jiffies and derived figures for one CPU or for all of them."""

    total_time: int = 0
    user_time: int = 0
    system_time: int = 0
    system_all_time: int = 0
    idle_all_time: int = 0
    idle_time: int = 0
    nice_time: int = 0
    io_wait_time: int = 0
    irq_time: int = 0
    soft_irq_time: int = 0
    steal_time: int = 0
    guest_time: int = 0

    total_period: int = 0
    user_period: int = 0
    system_period: int = 0
    system_all_period: int = 0
    idle_all_period: int = 0
    idle_period: int = 0
    nice_period: int = 0
    io_wait_period: int = 0
    irq_period: int = 0
    soft_irq_period: int = 0
    steal_period: int = 0
    guest_period: int = 0

    cpu_id: int = 0
    percent: float = 0.0
    mhz: int = 0
    temp: int = 0
    cpu_mhz: int = 0
    power: float = 0.0


class PowerSource(enum.Enum):
    """Where CPU package power is read from."""

    K10TEMP = 0
    ZENPOWER = 1
    RAPL = 2
    AMDGPU = 3


@dataclass
class K10TempPower:
    """Power from k10temp core/SoC voltage and current inputs."""

    core_voltage: str
    core_current: str
    soc_voltage: str
    soc_current: str
    source: PowerSource = field(default=PowerSource.K10TEMP, init=False)

    def read(self) -> float | None:
        values = [
            _read_int(p)
            for p in (self.core_voltage, self.core_current, self.soc_voltage, self.soc_current)
        ]
        if any(v is None for v in values):
            return None
        cv, cc, sv, sc = values
        return float(_div_trunc(cv * cc + sv * sc, 1_000_000))


@dataclass
class ZenPowerPower:
    """Power from zenpower core and SoC power inputs."""

    core_power: str
    soc_power: str
    source: PowerSource = field(default=PowerSource.ZENPOWER, init=False)

    def read(self) -> float | None:
        core = _read_int(self.core_power)
        soc = _read_int(self.soc_power)
        if core is None or soc is None:
            return None
        return float(_div_trunc(core + soc, 1_000_000))


@dataclass
class RaplPower:
    """Power derived from the RAPL energy counter between two reads."""

    energy_counter: str
    clock: Callable[[], float] = time.monotonic
    last_value: int = 0
    last_time: float = field(default=0.0)
    source: PowerSource = field(default=PowerSource.RAPL, init=False)

    def __post_init__(self) -> None:
        self.last_time = self.clock()

    def read(self) -> float | None:
        value = _read_int(self.energy_counter)
        if value is None or value < 0:
            return None
        now = self.clock()
        diff_us = int((now - self.last_time) * 1_000_000)
        power = 0.0
        if self.last_value > 0 and value > self.last_value and diff_us > 0:
            power = float((value - self.last_value) // diff_us)
        self.last_value = value
        self.last_time = now
        return power


@dataclass
class AmdgpuPower:
    """APU CPU power as reported through the amdgpu metrics."""

    power: float = 0.0
    source: PowerSource = field(default=PowerSource.AMDGPU, init=False)

    def read(self) -> float | None:
        return self.power


PowerData = K10TempPower | ZenPowerPower | RaplPower | AmdgpuPower


def calculate_cpu_data(
    cpu: CpuData,
    user: int,
    nice: int,
    system: int,
    idle: int,
    iowait: int,
    irq: int,
    softirq: int,
    steal: int,
    guest: int,
    guestnice: int,
) -> CpuData:
    """Fold a new /proc/stat sample into ``cpu``, updating periods and percent."""
    # Guest time is already accounted in user time.
    user = user - guest
    nice = nice - guestnice
    idle_all = idle + iowait
    system_all = system + irq + softirq
    virt_all = guest + guestnice
    total = user + nice + system_all + idle_all + steal + virt_all

    def wrap(a: int, b: int) -> int:
        return a - b if a > b else 0

    cpu.user_period = wrap(user, cpu.user_time)
    cpu.nice_period = wrap(nice, cpu.nice_time)
    cpu.system_period = wrap(system, cpu.system_time)
    cpu.system_all_period = wrap(system_all, cpu.system_all_time)
    cpu.idle_all_period = wrap(idle_all, cpu.idle_all_time)
    cpu.idle_period = wrap(idle, cpu.idle_time)
    cpu.io_wait_period = wrap(iowait, cpu.io_wait_time)
    cpu.irq_period = wrap(irq, cpu.irq_time)
    cpu.soft_irq_period = wrap(softirq, cpu.soft_irq_time)
    cpu.steal_period = wrap(steal, cpu.steal_time)
    cpu.guest_period = wrap(virt_all, cpu.guest_time)
    cpu.total_period = wrap(total, cpu.total_time)

    cpu.user_time = user
    cpu.nice_time = nice
    cpu.system_time = system
    cpu.system_all_time = system_all
    cpu.idle_all_time = idle_all
    cpu.idle_time = idle
    cpu.io_wait_time = iowait
    cpu.irq_time = irq
    cpu.soft_irq_time = softirq
    cpu.steal_time = steal
    cpu.guest_time = virt_all
    cpu.total_time = total

    if cpu.total_period == 0:
        return cpu
    period = float(cpu.total_period)
    load = (
        cpu.nice_period * 100.0 / period
        + cpu.user_period * 100.0 / period
        + cpu.system_all_period * 100.0 / period
        + (cpu.steal_period + cpu.guest_period) * 100.0 / period
    )
    cpu.percent = min(max(load, 0.0), 100.0)
    return cpu


def _parse_fields(tokens: list[str]) -> list[int] | None:
    values: list[int] = []
    for token in tokens[:10]:
        if not token.isdigit():
            return None
        values.append(int(token))
    return values if len(values) == 10 else None


def _find_input(path: str, prefix: str, name: str) -> str | None:
    for file in ls(path, prefix, LsFlags.FILES):
        if not file.endswith("_label"):
            continue
        if read_line(os.path.join(path, file)) != name:
            continue
        stem = file.split("_", 1)[0]
        return os.path.join(path, stem + "_input")
    return None


def _find_fallback_temp_input(path: str) -> str | None:
    for file in sorted(ls(path, "temp", LsFlags.FILES)):
        if file.endswith("_input"):
            found = os.path.join(path, file)
            log.debug("fallback cpu temp input: %s", found)
            return found
    return None


def _k10temp_from_hwmon(path: str) -> K10TempPower | None:
    inputs = [
        _find_input(path, "in", "Vcore"),
        _find_input(path, "curr", "Icore"),
        _find_input(path, "in", "Vsoc"),
        _find_input(path, "curr", "Isoc"),
    ]
    if any(i is None for i in inputs):
        return None
    for i in inputs:
        log.debug("hwmon: using input: %s", i)
    return K10TempPower(*inputs)


def _zenpower_from_hwmon(path: str) -> ZenPowerPower | None:
    core = _find_input(path, "power", "SVI2_P_Core")
    soc = _find_input(path, "power", "SVI2_P_SoC")
    if core is None or soc is None:
        return None
    log.debug("hwmon: using input: %s", core)
    log.debug("hwmon: using input: %s", soc)
    return ZenPowerPower(core, soc)


def _rapl_from_powercap(path: str) -> RaplPower | None:
    counter = os.path.join(path, "energy_uj")
    if not file_exists(counter):
        return None
    return RaplPower(counter)


class CPUStats:
    """Per-CPU and total load, clocks, temperature and power."""

    def __init__(self, proc_root: str = "/proc", sys_root: str = "/sys") -> None:
        self.proc_root = proc_root
        self.sys_root = sys_root
        self.cpu_type = "CPU"
        self.boottime = 0
        self.cpu_data: list[CpuData] = []
        self.total = CpuData()
        self.cpu_period = 0.0
        self.updated = False
        self._inited = False
        self._temp_input: str | None = None
        self.power_data: PowerData | None = None

    @property
    def _stat_path(self) -> str:
        return os.path.join(self.proc_root, "stat")

    @property
    def _hwmon_dir(self) -> str:
        return os.path.join(self.sys_root, "class", "hwmon")

    def init(self) -> bool:
        """Discover the CPUs listed in /proc/stat and take a first sample."""
        if self._inited:
            return True
        self.cpu_data = []
        try:
            fh = open(self._stat_path, encoding="ascii", errors="replace")
        except OSError:
            log.error("Failed to open %s", self._stat_path)
            return False
        with fh:
            first = True
            for line in fh:
                if line.startswith("cpu"):
                    if first:
                        first = False
                        continue
                    match = _CPU_ID_RE.match(line)
                    cpu = CpuData(total_time=1, total_period=1)
                    if match:
                        cpu.cpu_id = int(match.group(1))
                    self.cpu_data.append(cpu)
                elif line.startswith("btime "):
                    parts = line.split()
                    if len(parts) > 1 and parts[1].lstrip("-").isdigit():
                        self.boottime = int(parts[1])
                    break
            else:
                log.debug("Failed to read all of %s", self._stat_path)
                return False
        self._inited = True
        return self.update_cpu_data()

    def reinit(self) -> bool:
        self._inited = False
        return self.init()

    def update_cpu_data(self) -> bool:
        """Read /proc/stat again and update load figures."""
        if not self._inited:
            return False
        try:
            fh = open(self._stat_path, encoding="ascii", errors="replace")
        except OSError:
            log.error("Failed to open %s", self._stat_path)
            return False

        ret = False
        cpu_count = 0
        with fh:
            for line in fh:
                tokens = line.split()
                if not tokens:
                    break
                head = tokens[0]
                values = _parse_fields(tokens[1:])
                if not ret and head == "cpu" and values is not None:
                    ret = True
                    calculate_cpu_data(self.total, *values)
                    continue
                match = _CPU_ID_RE.fullmatch(head)
                if match is None or values is None:
                    break
                cpu_id = int(match.group(1))
                if not ret:
                    log.debug("Failed to parse 'cpu' line: %s", line.rstrip())
                    return False
                if cpu_count + 1 > len(self.cpu_data) or self.cpu_data[cpu_count].cpu_id != cpu_id:
                    log.debug("Cpu id '%d' is out of bounds or wrong index, reiniting", cpu_id)
                    return self.reinit()
                calculate_cpu_data(self.cpu_data[cpu_count], *values)
                cpu_count += 1

        del self.cpu_data[cpu_count:]
        if self.cpu_data:
            self.cpu_period = self.cpu_data[0].total_period / len(self.cpu_data)
        else:
            self.cpu_period = 0.0
        self.updated = True
        return ret

    def update_core_mhz(self) -> bool:
        """Read the current frequency of every CPU; the total keeps the highest."""
        for cpu in self.cpu_data:
            path = os.path.join(
                self.sys_root,
                "devices/system/cpu",
                f"cpu{cpu.cpu_id}",
                "cpufreq/scaling_cur_freq",
            )
            if not os.path.exists(path):
                continue
            khz = _read_int(path)
            cpu.mhz = _div_trunc(khz if khz is not None else 0, 1000)
        self.total.cpu_mhz = max((c.mhz for c in self.cpu_data if c.mhz > 0), default=0)
        return True

    def update_cpu_temp(self, apu_cpu_temp: int = 0) -> bool:
        """Update the package temperature; APUs take it from the GPU metrics."""
        if self.cpu_type == "APU":
            self.total.temp = apu_cpu_temp
            return True
        if self._temp_input is None:
            return False
        value = _read_int(self._temp_input)
        self.total.temp = _div_trunc(value if value is not None else 0, 1000)
        return value is not None

    def update_cpu_power(self, apu_cpu_power: float = 0.0) -> bool:
        """Update the package power from the selected power source."""
        if self.power_data is None:
            return False
        if isinstance(self.power_data, AmdgpuPower):
            self.power_data.power = apu_cpu_power
        power = self.power_data.read()
        if power is None:
            return False
        self.total.power = power
        return True

    def get_cpu_file(self) -> bool:
        """Locate the hwmon input that holds the CPU temperature."""
        if self._temp_input is not None:
            return True
        path = ""
        found: str | None = None
        for entry in ls(self._hwmon_dir):
            path = os.path.join(self._hwmon_dir, entry)
            name = read_line(os.path.join(path, "name"))
            log.debug("hwmon: sensor name: %s", name)
            if name == "coretemp":
                found = _find_input(path, "temp", "Package id 0")
                break
            if name in ("zenpower", "k10temp"):
                found = _find_input(path, "temp", "Tdie")
                break
            if name == "atk0110":
                found = _find_input(path, "temp", "CPU Temperature")
                break
            path = ""
        if path and not (found and file_exists(found)):
            found = _find_fallback_temp_input(path)
        if not path or found is None:
            log.error("Could not find cpu temp sensor location")
            return False
        log.debug("hwmon: using input: %s", found)
        self._temp_input = found
        return True

    def init_cpu_power_data(self) -> bool:
        """Choose a power source: k10temp, zenpower, RAPL or the amdgpu metrics."""
        if self.power_data is not None:
            return True
        power_data: PowerData | None = None
        intel = False
        for entry in ls(self._hwmon_dir):
            path = os.path.join(self._hwmon_dir, entry)
            name = read_line(os.path.join(path, "name"))
            log.debug("hwmon: sensor name: %s", name)
            if name == "k10temp":
                power_data = _k10temp_from_hwmon(path)
                break
            if name == "zenpower":
                power_data = _zenpower_from_hwmon(path)
                break
            if name == "coretemp":
                intel = True

        if power_data is None and intel:
            powercap = os.path.join(self.sys_root, "class", "powercap")
            for entry in ls(powercap):
                path = os.path.join(powercap, entry)
                name = read_line(os.path.join(path, "name"))
                log.debug("powercap: name: %s", name)
                if name == "package-0":
                    power_data = _rapl_from_powercap(path)
                    break

        if power_data is None and not intel:
            power_data = AmdgpuPower()

        if power_data is None:
            log.error("Failed to initialize CPU power data")
            return False
        self.power_data = power_data
        return True