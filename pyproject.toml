[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mergelite"
version = "0.1.0"
description = "SQL helper functions, result formatting and Postgres copying for querying code repositories"
requires-python = ">=3.11"
keywords = [
    "git",
    "sqlite",
    "sql",
    "json",
    "yaml",
    "toml",
    "xml",
    "postgres",
    "github",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
    "Topic :: Software Development :: Version Control :: Git",
    "Typing :: Typed",
]
dependencies = [
    "pyyaml>=6.0",
    "xmltodict>=0.13",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.23",
]

[tool.hatch.build.targets.wheel]
packages = ["mergelite"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
warn_redundant_casts = true
