[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "showmyside"
version = "0.1.0"
description = "A small networked lobby game where players chat and change shape over an enciphered XML protocol"
requires-python = ">=3.10"
dependencies = []
keywords = ["game", "lobby", "multiplayer", "chat", "xml", "cipher"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
showmyside = "showmyside.app:main"

[tool.hatch.build.targets.wheel]
packages = ["showmyside"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
