[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "myftp"
version = "0.1.0"
description = "A small single-threaded FTP server with anonymous login, passive and active data connections"
requires-python = ">=3.10"
dependencies = []
keywords = ["ftp", "server", "pasv", "port", "anonymous"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: No Input/Output (Daemon)",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: File Transfer Protocol (FTP)",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
myftp = "myftp.server:main"

[tool.hatch.build.targets.wheel]
packages = ["myftp"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
