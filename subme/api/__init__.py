"""
Domain REST API access.
"""

from subme.api.client import ResourceClient, UserProfile

__all__ = [
    "ResourceClient",
    "UserProfile",
]
