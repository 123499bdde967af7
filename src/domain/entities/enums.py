"""
Domain Enums

Enumeration types used across domain entities.
"""

from enum import Enum


class Gender(str, Enum):
    """Profile gender"""

    male = "Male"
    female = "Female"
