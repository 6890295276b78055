[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "alexnoc"
version = "0.1.0"
description = "Cycle-level simulation of an AlexNet inference pipeline on a 3x3 network-on-chip"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "network-on-chip",
    "noc",
    "alexnet",
    "cnn",
    "simulation",
    "router",
    "flit",
    "lfsr",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Electronic Design Automation (EDA)",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
alexnoc = "alexnoc.network:main"

[tool.hatch.build.targets.wheel]
packages = ["alexnoc"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
