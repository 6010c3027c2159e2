"""Image selection for CI build requests."""

__version__ = "0.1.0"
