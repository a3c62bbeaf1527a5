[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dancingshell"
version = "1.0.0"
description = "Building blocks of a small command shell: tokenizer, syntax checks, variable expansion, builtins, here-documents and pipelines"
requires-python = ">=3.10"
dependencies = []
keywords = ["shell", "tokenizer", "pipeline", "heredoc", "builtins", "command-line"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Shells",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["dancingshell"]

[tool.hatch.build.targets.sdist]
include = ["dancingshell", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
