[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "casanas"
version = "0.1.0"
description = "Home server services: SQLite-backed samba shares, connections, peers and notifications, cancellable streams, search suggestions and system utilization"
requires-python = ">=3.10"
keywords = ["nas", "samba", "home-server", "system-monitoring", "sqlite"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "requests",
    "psutil",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["casanas"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
