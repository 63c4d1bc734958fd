[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mcproxy"
version = "0.1.0"
description = "Building blocks of an IGMP/MLD multicast proxy: querier timers and code conversions, proxy messages, and tester task configuration"
requires-python = ">=3.10"
dependencies = []
keywords = ["multicast", "igmp", "mld", "proxy", "networking", "querier"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mcproxy"]

[tool.pytest.ini_options]
addopts = "-ra"
