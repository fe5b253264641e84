"""Stored media removal.

Uploaded files live in ``UPLOADS_DIR`` and are addressed by a storage id,
the file name under that directory.
"""

import logging
import os
from typing import Optional
from urllib.parse import urlparse
from app.config import UPLOADS_DIR

logger = logging.getLogger(__name__)


class MediaStorage:
    def __init__(self, root: str = UPLOADS_DIR):
        self.root = root

    def path_for(self, storage_id: str) -> str:
        return os.path.join(self.root, os.path.basename(storage_id))

    def delete(self, storage_id: str) -> None:
        path = self.path_for(storage_id)
        if os.path.exists(path):
            os.remove(path)
            logger.info("Deleted stored media %s", storage_id)


def storage_id_from_url(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    return os.path.basename(urlparse(url).path) or None


def delete_quietly(storage: MediaStorage, storage_id: Optional[str]) -> bool:
    """Delete a stored file; failures are logged and reported as False."""
    if not storage_id:
        return False
    try:
        storage.delete(storage_id)
        return True
    except Exception:
        logger.exception("Failed to delete stored media %s", storage_id)
        return False


media_storage = MediaStorage()


def get_media_storage() -> MediaStorage:
    return media_storage
