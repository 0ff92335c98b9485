"""
Services layer for data access.

This layer handles:
- Identity lookups and token issuing
- Location persistence and history queries
- The background position writer
"""

from . import auth_service
from . import location_service

__all__ = [
    "auth_service",
    "location_service"
]
