"""Building blocks for moving-mesh hydrodynamics on a cylindrical grid: mesh, conversion,
reconstruction, boundaries, sources, initial data and diagnostics."""

__version__ = "0.1.0"