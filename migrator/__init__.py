"""Migration analysis engine for legacy integration platform applications."""

__version__ = "0.1.0"
