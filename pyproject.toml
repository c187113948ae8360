[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "daogen"
version = "0.1.0"
description = "Building blocks for generating typed data-access code: SQL template parsing, clause helpers and model metadata"
requires-python = ">=3.10"
dependencies = []
keywords = ["code generation", "sql", "orm", "dao", "templates"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Code Generators",
    "Topic :: Database",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["daogen"]

[tool.pytest.ini_options]
addopts = "-ra"
