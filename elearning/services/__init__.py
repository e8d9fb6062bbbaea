"""
E-Learning Services Package für DSP (Digital Solutions Platform)

Dieses Paket enthält die Services für die E-Learning-Plattform:
- Media Storage (Object Storage Upload/Delete)
- Notifications (transaktionale E-Mails)

Struktur:
├── media_storage/     # Object Storage Operationen
└── notifications.py   # E-Mail Versand

Author: DSP Development Team
Version: 1.0.0
"""

from .media_storage import MediaStorageError, MediaStorageService, StoredMedia

__all__ = ["MediaStorageError", "MediaStorageService", "StoredMedia"]
