"""OSS Review Toolkit command line entry point and report plugins."""

__version__ = "0.1.0"
