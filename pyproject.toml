[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "entropyarcade"
version = "0.1.0"
description = "Multi-source entropy pool with distribution shaping, plus a terminal Game of Life, tic-tac-toe and Tetris rules built on it"
requires-python = ">=3.10"
dependencies = []
keywords = ["entropy", "random", "game-of-life", "tetris", "tic-tac-toe", "terminal"]
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
entropy-demo = "entropyarcade.demo:main"
new-life-game = "entropyarcade.life:main"
tic-tac-toe = "entropyarcade.tictactoe:main"

[tool.hatch.build.targets.wheel]
packages = ["entropyarcade"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
