[build-system]
requires = ["setuptools>=61.0"]
build-backend = "setuptools.build_meta"

[project]
name = "securebank"
version = "0.1.0"
description = "A small multi-process banking simulation with a shared account table, an asynchronous disk writer and a fraud monitor"
requires-python = ">=3.10"
dependencies = []
keywords = ["bank", "simulation", "shared-memory", "multiprocessing", "fraud-detection"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
securebank = "securebank.bank:main"
securebank-init = "securebank.init_accounts:main"
securebank-monitor = "securebank.monitor:main"
securebank-user = "securebank.user:main"

[tool.setuptools.packages.find]
include = ["securebank*"]

[tool.pytest.ini_options]
addopts = "-ra"
