"""
High-level use cases for the chirpy API.

Routers should call these services instead of manipulating the JSON
document directly.
"""
