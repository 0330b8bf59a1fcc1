"""Availability and booking core for driving-lesson scheduling."""

__version__ = "0.1.0"
