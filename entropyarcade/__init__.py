"""Entropy pool, distribution shaping, and Life, tic-tac-toe and Tetris games that use it."""

__version__ = "0.1.0"