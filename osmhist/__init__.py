"""OpenStreetMap ids, tile bounds, history datasources and child-version matching."""

__version__ = "0.1.0"