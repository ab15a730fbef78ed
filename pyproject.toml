[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kernelwire"
version = "0.23.2"
description = "Building blocks for Jupyter kernels: wire messages, signing, logging and ZeroMQ channels"
requires-python = ">=3.10"
dependencies = [
    "pyzmq",
]
keywords = ["jupyter", "kernel", "zeromq", "messaging", "protocol"]
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
    "Topic :: Software Development :: Libraries :: Application Frameworks",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["kernelwire"]

[tool.pytest.ini_options]
addopts = "-ra"
