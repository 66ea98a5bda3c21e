"""Terrain and region geometry engine for the worldbuilder map editor."""

__version__ = "0.1.0"
