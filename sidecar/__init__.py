"""sidecar: a live terminal resource dashboard with an optional log tail."""

__version__ = "0.1.0"
