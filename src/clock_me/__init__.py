"""clock-me: a small command-line time tracker."""

__version__ = "0.1.0"

__all__ = ["__version__"]
