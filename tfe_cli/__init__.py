"""Client and command-line interface for TFE organizations."""

__version__ = "0.1.0"
