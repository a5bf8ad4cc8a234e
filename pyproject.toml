[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rspcore"
version = "0.1.0"
description = "Core state, memory banks and issue pipeline model of a Reality Signal Processor"
requires-python = ">=3.10"
dependencies = []
keywords = ["emulator", "rsp", "rcp", "n64", "pipeline", "mips", "fixed-width"]
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
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["rspcore"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
