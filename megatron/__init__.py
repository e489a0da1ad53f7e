"""A small teaching database engine over a simulated sector-based disk."""

__version__ = "0.1.0"