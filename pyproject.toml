[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dmgcore"
version = "0.1.0"
description = "Building blocks for a handheld game console emulator: cartridge loading, disassembler, interrupt and joypad state, scanline renderer"
requires-python = ">=3.10"
dependencies = []
keywords = ["emulator", "game boy", "lr35902", "disassembler", "cartridge", "gzip", "inflate"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["dmgcore"]

[tool.hatch.build.targets.sdist]
include = ["dmgcore", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
