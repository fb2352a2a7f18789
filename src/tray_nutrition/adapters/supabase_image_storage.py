"""Supabase Storage bucket for tray images."""

import logging
from dataclasses import dataclass

from supabase import Client

from tray_nutrition.services.detection import ImageStorage, UploadResult

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseImageStorage(ImageStorage):
    """Uploads images to a public Supabase Storage bucket."""

    client: Client
    bucket: str = "detection_menu"

    def upload(self, path: str, content: bytes, content_type: str) -> UploadResult:
        """Upload (overwriting) and return the public URL or the failure."""
        bucket = self.client.storage.from_(self.bucket)
        try:
            bucket.upload(
                path,
                content,
                file_options={"content-type": content_type, "upsert": "true"},
            )
            url = bucket.get_public_url(path)
        except Exception as exc:  # noqa: BLE001
            _logger.exception("Supabase storage upload failed", extra={"path": path})
            return UploadResult(path=path, error=f"{type(exc).__name__}: {exc}")
        return UploadResult(path=path, url=url)
