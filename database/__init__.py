"""
database — credential storage.

ORM models, engine construction, the user store and its connection health.
"""
