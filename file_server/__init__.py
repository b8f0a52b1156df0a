"""Droplet upload edge for the platform file server."""

__version__ = "0.1.0"
