[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "disco"
version = "0.1.0"
description = "Building blocks for moving-mesh hydrodynamics of accretion discs on a cylindrical grid"
requires-python = ">=3.10"
dependencies = []
keywords = ["hydrodynamics", "accretion disc", "moving mesh", "astrophysics", "finite volume"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Physics",
    "Topic :: Scientific/Engineering :: Astronomy",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["disco"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
