"""
Authoring engine - admin-managed lessons and checkpoint pools.
"""

from lessoncore.engines.authoring.content_store import ContentStore

__all__ = ["ContentStore"]
