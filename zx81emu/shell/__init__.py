"""Rendering and machine-construction services built on the core."""
