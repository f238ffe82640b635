"""ORM Models — SQLAlchemy declarative models for all persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - CollaborationRequest is the aggregate root; StatusChange rows hang off it

Design Decisions:
    - One file per entity
    - All models imported here so string-based relationship() references resolve
      before any query runs
"""

from collabhub.models.actor import Actor  # noqa: F401
from collabhub.models.collaboration_request import CollaborationRequest  # noqa: F401
from collabhub.models.status_change import StatusChange  # noqa: F401
from collabhub.models.view_event import ViewEvent  # noqa: F401
