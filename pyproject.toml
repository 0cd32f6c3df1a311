[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "orus"
version = "0.1.0"
description = "Compiler front-end pieces for the Orus language: types, symbols and diagnostics"
requires-python = ">=3.10"
dependencies = []
keywords = ["compiler", "type-system", "symbol-table", "diagnostics"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Compilers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["orus"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
