"""Seed a vector collection and query it by concept."""

__version__ = "0.1.0"
