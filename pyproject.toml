[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cdlocal"
version = "0.1.0"
description = "Validate and plan local application deployments, with helpers for installing an agent as a system service"
requires-python = ">=3.10"
dependencies = []
keywords = ["deployment", "lifecycle", "appspec", "s3", "systemd", "sysv", "service"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Software Distribution",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["cdlocal"]

[tool.hatch.build.targets.sdist]
include = ["cdlocal", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
strict = true
