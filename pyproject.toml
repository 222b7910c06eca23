[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mqttwire"
version = "0.1.0"
description = "Encoder and decoder for MQTT 3.1 and 3.1.1 CONNECT, PUBLISH, SUBSCRIBE, SUBACK and UNSUBSCRIBE packets, with a small pluggable authentication registry"
requires-python = ">=3.10"
dependencies = []
keywords = ["mqtt", "iot", "protocol", "codec", "packets", "publish-subscribe"]
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
    "Topic :: System :: Networking",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mqttwire"]

[tool.hatch.build.targets.sdist]
include = ["mqttwire", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
