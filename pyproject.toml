[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cx34log"
version = "0.1.0"
description = "Read CX34 heat pump registers over Modbus, summarise runs and post status lines to a web logging script"
requires-python = ">=3.10"
dependencies = []
keywords = ["heat pump", "cx34", "modbus", "logging", "cop", "btu"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Home Automation",
    "Topic :: System :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["cx34log"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
