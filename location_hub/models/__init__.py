from .users import User
from .locations import Location

__all__ = [
    "User",
    "Location",
]
