"""Database Infrastructure — declarative Base and standalone session factory.

Invariants:
    - The API engine lives in infrastructure/database.py; db/session.py serves the CLI
    - All sessions are async (AsyncSession)
"""
