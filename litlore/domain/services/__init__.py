"""
Domain services package.

Services orchestrate domain logic that doesn't naturally belong to a single
entity. They coordinate between repositories (through their ports) to
implement use cases, and never depend on concrete implementations.
"""

from .profile_service import ProfileService

__all__ = [
    "ProfileService",
]
