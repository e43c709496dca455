[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ninekit"
version = "0.1.0"
description = "9P2000 protocol messages and client, plumber messages, a PDP-1 emulator and draw helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["9p", "9P2000", "plumber", "pdp-1", "filesystem", "protocol"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Filesystems",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ninekit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
