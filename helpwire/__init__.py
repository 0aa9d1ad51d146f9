"""helpwire: help request dispatcher for modular chat bots."""

__version__ = "1.0.0"
