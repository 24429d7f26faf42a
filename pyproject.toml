[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hudstats"
version = "0.1.0"
description = "Linux system statistics for performance overlays: CPU load, clocks, temperature and power, batteries, gamepads and overlay control messages."
requires-python = ">=3.10"
dependencies = []
keywords = ["monitoring", "overlay", "cpu", "battery", "gamepad", "hwmon", "sysfs", "procfs"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["hudstats"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
