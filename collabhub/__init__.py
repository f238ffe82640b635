"""CollabHub — collaboration request lifecycle service for brands and creators."""

__version__ = "1.0.0"
