# hudstats

Readers for the system statistics that a performance overlay shows. They read
from `/proc` and `/sys` on Linux. The package uses only the standard library.

## Modules

- `hudstats.file_utils` holds small filesystem helpers:
  - `read_line` returns the first line of a file.
  - `ls` lists a directory and takes `LsFlags.DIRS` and `LsFlags.FILES`.
  - `file_exists`, `dir_exists` and `read_symlink` check paths and read links.
  - `get_basename` returns the last component of a path.
  - `get_exe_path` and `get_wine_exe_name` report the running executable.
  - `get_home_dir`, `get_config_dir` and `get_data_dir` return the home
    directory and the XDG directories.
- `hudstats.cpu` provides `CPUStats`, which turns `/proc/stat` into load per
  core and in total. It also reads core clocks, the CPU temperature from
  hwmon, and package power. Power comes from k10temp, zenpower or RAPL. For APUs
  the caller supplies the figure. `calculate_cpu_data` folds one raw
  `/proc/stat` sample into a `CpuData`.
- `hudstats.battery` provides `BatteryStats`, which reports power draw, charge
  percentage and time remaining. It reads the batteries (`BAT*`, at most two)
  under a power_supply directory.
- `hudstats.gamepad` finds Xbox, DualShock 4, DualSense, Switch and 8BitDo
  controllers under a power_supply directory and reports their battery state:
  - `scan_gamepads` finds the controllers.
  - `gamepad_info` returns a sorted list of `Gamepad`.
- `hudstats.mangoapp` handles the packed binary messages of a standalone
  overlay app:
  - `AppMessage.unpack` reads frame reports.
  - `CtrlMessage.pack` and `CtrlMessage.unpack` handle control requests.
  - `build_ctrl_message` builds a control request from
    `[set|toggle] attribute [value]` arguments.

## Examples

Read CPU load:

```python
from hudstats.cpu import CPUStats

stats = CPUStats()            # proc_root="/proc", sys_root="/sys"
if stats.init():
    stats.update_cpu_data()
    print(stats.total.percent, [c.percent for c in stats.cpu_data])
    stats.update_core_mhz()
    print(stats.total.cpu_mhz)
    if stats.get_cpu_file():
        stats.update_cpu_temp()
        print(stats.total.temp)
```

Read the batteries:

```python
from hudstats.battery import BatteryStats

battery = BatteryStats()
battery.update()
print(battery.current_watt, battery.current_percent, battery.remaining_time)
```

List gamepads:

```python
from hudstats.gamepad import gamepad_info, scan_gamepads

for pad in gamepad_info(scan_gamepads()):
    print(pad.name, pad.battery, pad.battery_percent, pad.is_charging)
```

Build a control message. The arguments leave out the program name:

```python
from hudstats.mangoapp import CtrlMessage, UsageError, build_ctrl_message

message = build_ctrl_message(["toggle", "no_display"])
payload = message.pack()
assert CtrlMessage.unpack(payload).no_display == 3
```

`build_ctrl_message` raises `UsageError` when the arguments are invalid. It
raises `ValueError` when the `set` value is not `true`, `false`, `1` or `0`.

## What it does not do

The package reads statistics and encodes messages. It does not do the
following:

- It draws no overlay and installs no command-line program.
- It does not send or receive messages over a message queue or a socket.
- It does not read overlay configuration files.
- It does not decode the GPU's own metrics table. `CPUStats` takes APU CPU
  power and temperature as arguments from the caller.