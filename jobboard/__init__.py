"""Job board HTTP API backed by MongoDB: job posts, listings and applications."""

__version__ = "0.1.0"