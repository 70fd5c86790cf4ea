[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "virtualreader"
version = "0.3.0"
description = "Rebuild a flat flash image from PSDZ bootloader and software flash files"
requires-python = ">=3.10"
dependencies = []
keywords = ["psdz", "flash", "ecu", "btld", "swfl", "ucl", "nrv2b", "nrv2d", "nrv2e", "firmware"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Embedded Systems",
    "Topic :: System :: Archiving :: Compression",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
virtualreader = "virtualreader.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["virtualreader"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
