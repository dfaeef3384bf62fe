[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "msgvalue"
version = "0.1.0"
description = "A dynamic MessagePack value model with compact encoding and depth-limited decoding"
requires-python = ">=3.10"
dependencies = []
keywords = ["msgpack", "messagepack", "serialization", "binary", "value"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: File Formats",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["msgvalue"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
