"""Infrastructure Layer — database sessions, logging, retries, notifications.

Invariants:
    - Only this layer talks to drivers and external collaborators
"""
