"""Copy repository contents between GitHub repositories through the REST API."""

__version__ = "0.1.0"
