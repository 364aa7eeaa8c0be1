"""Agency toolkit backend."""

__version__ = "0.1.0"
