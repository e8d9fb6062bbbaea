"""
Media Storage Package

Object storage access for course thumbnails, lecture videos and avatars.
"""

from .media_storage_service import MediaStorageError, MediaStorageService, StoredMedia

__all__ = ["MediaStorageError", "MediaStorageService", "StoredMedia"]
