[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nebo"
version = "0.1.0"
description = "SDK for building Nebo apps that serve tools, channels, gateways, comms, schedules and HTTP handlers over gRPC on a Unix socket"
requires-python = ">=3.10"
dependencies = [
    "grpcio",
]
keywords = ["nebo", "sdk", "grpc", "agent", "tools", "llm", "unix-socket"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
nebo-calculator = "nebo.calculator:main"

[tool.hatch.build.targets.wheel]
packages = ["nebo"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
