[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lavalsim"
version = "0.1.0"
description = "Assembler and cycle simulator for a grid of tiny 8-bit cores"
requires-python = ">=3.10"
dependencies = []
keywords = ["simulator", "assembler", "cpu", "emulator", "multicore"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
    "Topic :: Software Development :: Assemblers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
lavalsim = "lavalsim.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["lavalsim"]

[tool.pytest.ini_options]
addopts = "-ra"
