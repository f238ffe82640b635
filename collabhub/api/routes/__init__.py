"""Route Modules — one file per actor surface.

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Role checks happen in dependencies; ownership checks in services
"""
