"""Chirpy: micro-blogging backend on a single-file JSON document store."""

__version__ = "0.1.0"
