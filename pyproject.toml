[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "megatron"
version = "0.1.0"
description = "A small teaching database engine over a simulated disk of platters, faces, tracks and sectors"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "database",
    "storage",
    "buffer-pool",
    "virtual-disk",
    "slotted-page",
    "csv",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Database Engines/Servers",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
megatron = "megatron.cli:main"
megatron-build-disk = "megatron.disk_builder:main"
megatron-virtual-disk = "megatron.virtual_disk:main"

[tool.hatch.build.targets.wheel]
packages = ["megatron"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
