[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "searchctl"
version = "1.0.0"
description = "Command line front end for managing search clusters: profiles, REST calls, k-NN and anomaly detection commands"
requires-python = ">=3.10"
dependencies = [
    "requests",
    "urllib3",
]
keywords = ["search", "cluster", "cli", "profiles", "knn", "anomaly-detection", "rest", "completion"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
searchctl = "searchctl.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["searchctl"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
