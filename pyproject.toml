[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pdpunix"
version = "0.1.0"
description = "Early PDP-11 UNIX tools: KE11 arithmetic unit, CPU arithmetic, a.out loading and classic small commands"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "pdp-11",
    "unix",
    "emulator",
    "a.out",
    "retrocomputing",
    "ke11",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
    "Topic :: Software Development :: Compilers",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
pdp-glob = "pdpunix.globmatch:main"
pdp-if = "pdpunix.ifexpr:main"
pdp-cp = "pdpunix.copyfile:main"
pdp-hyphen = "pdpunix.hyphen:main"
pdp-cvopt = "pdpunix.cvopt:main"
pdp-cc = "pdpunix.ccdriver:main"
pdp-fc = "pdpunix.fcdriver:main"

[tool.hatch.build.targets.wheel]
packages = ["pdpunix"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
