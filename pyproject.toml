[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mcglauber"
version = "3.2.0"
description = "Monte Carlo Glauber model of nucleus-nucleus collisions"
requires-python = ">=3.10"
dependencies = [
    "numpy",
    "scipy",
]
keywords = ["glauber", "monte-carlo", "heavy-ion", "nuclear-physics", "eccentricity"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
runglauber = "mcglauber.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["mcglauber"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
