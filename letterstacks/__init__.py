"""Letter Stacks: a tile-stacking word game engine."""

__version__ = "0.1.0"
