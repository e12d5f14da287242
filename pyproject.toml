[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "chipate"
version = "0.1.0"
description = "A small CHIP-8 interpreter with a simple assembler and a pygame window"
requires-python = ">=3.10"
keywords = ["chip-8", "chip8", "emulator", "interpreter", "assembler", "pygame"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: X11 Applications",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
    "Topic :: System :: Emulators",
]
dependencies = [
    "pygame",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
chipate = "chipate.app:main"

[tool.hatch.build.targets.wheel]
packages = ["chipate"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
