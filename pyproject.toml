[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "famippu"
version = "0.1.0"
description = "Picture processing unit, VRAM bus and iNES ROM loading for an NES emulator core"
requires-python = ">=3.10"
dependencies = []
keywords = ["nes", "famicom", "ppu", "emulator", "ines"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["famippu"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
