[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "efflog"
version = "0.1.0"
description = "Structured, compressed and encrypted application logging with crash-safe memory-mapped caching"
requires-python = ">=3.10"
keywords = [
    "logging",
    "logger",
    "encryption",
    "compression",
    "zstd",
    "ecdh",
    "aes",
    "mmap",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Logging",
    "Topic :: Security :: Cryptography",
    "Typing :: Typed",
]
dependencies = [
    "cryptography",
    "zstandard",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
efflog-decode = "efflog.decode:main"

[tool.hatch.build.targets.wheel]
packages = ["efflog"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
