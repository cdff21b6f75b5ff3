"""
Data access repositories for tenant database tables.
"""

from hoa_nexus.repositories.base_repo import BaseRepository

__all__ = ["BaseRepository"]
