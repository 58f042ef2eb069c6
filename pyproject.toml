[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wsnet"
version = "0.1.0"
description = "WebSocket building blocks: opening handshakes, permessage-deflate, URL parsing, HTTP headers and TLS setup"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "websocket",
    "rfc6455",
    "rfc7692",
    "permessage-deflate",
    "handshake",
    "tls",
    "http",
]
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
    "Topic :: Internet :: WWW/HTTP",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["wsnet"]

[tool.hatch.build.targets.sdist]
include = ["wsnet", "tests"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
