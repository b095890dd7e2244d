"""Release orchestration for the AVGPlus engine."""

__version__ = "0.1.0"
