"""Choreobook — fetch, validate and list choreography sheets."""

__version__ = "0.1.0"
