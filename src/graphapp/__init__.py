"""graphapp - REST backend over a relational store and a property-graph store."""

__version__ = "0.1.0"

__all__ = ["__version__"]
