[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "winspecter"
version = "0.1"
description = "Windows machine specifications reporter with text, CSV, JSON, YAML, TOML and HTML output."
requires-python = ">=3.10"
keywords = ["windows", "specs", "hardware", "inventory", "wmi", "report"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: Microsoft :: Windows",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "pyyaml",
    "tomli-w",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
winspecter = "winspecter.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["winspecter"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
