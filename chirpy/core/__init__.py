"""
Core utilities shared across the chirpy backend.

This package hosts configuration, logging setup, the error hierarchy,
password hashing and the store lock. Services depend on these primitives
instead of importing FastAPI or touching the JSON file directly.
"""
