"""Two-player naval combat: game-state engine and session lobby."""

__version__ = "0.1.0"
