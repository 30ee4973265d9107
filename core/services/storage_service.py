# =============================================================================
# core/services/storage_service.py - Supabase Storage Operations
# =============================================================================
# Handles initiative image upload/removal with Supabase Storage.
# Removal is best-effort: failures are logged and never block a response.
# =============================================================================

import logging

from lib.supabase_client import SupabaseClient
from lib.utils import build_storage_key, storage_key_from_url
from app.config import settings
from app.exceptions import ImageUploadError, InvalidImageTypeError, ImageTooLargeError

logger = logging.getLogger(__name__)


class StorageService:
    """
    Service for Supabase Storage operations.

    Images live in a single bucket under {currentTimeMillis}-{filename} keys
    and are referenced from initiatives by public URL.
    """

    @staticmethod
    def validate_image(filename: str, content_type: str | None, size: int) -> None:
        """
        Check an uploaded image against the type allow-list and size cap.

        Raises:
            InvalidImageTypeError: If the MIME type is not allowed
            ImageTooLargeError: If the payload exceeds MAX_IMAGE_SIZE_MB
        """
        allowed = settings.allowed_image_types_list
        if (content_type or "").lower() not in allowed:
            raise InvalidImageTypeError(filename, content_type, allowed)

        if size > settings.max_image_size_bytes:
            raise ImageTooLargeError(size / (1024 * 1024), settings.MAX_IMAGE_SIZE_MB)

    @staticmethod
    def upload_image(
        content: bytes,
        content_type: str,
        filename: str,
    ) -> tuple[str, str]:
        """
        Upload an image to the initiative bucket.

        Args:
            content: Image bytes
            content_type: MIME type, stored with the object
            filename: Original filename, used as the key suffix

        Returns:
            Tuple of (storage key, public URL)

        Raises:
            ImageUploadError: If upload fails
        """
        client = SupabaseClient.get_client()
        key = build_storage_key(filename)

        try:
            client.storage.from_(settings.IMAGE_BUCKET).upload(
                path=key,
                file=content,
                file_options={"content-type": content_type, "upsert": "false"}
            )
        except Exception as e:
            logger.error(f"Image upload failed: {e}")
            raise ImageUploadError(str(e))

        logger.info(f"Uploaded image to storage: {key}")

        try:
            public_url = StorageService.get_public_url(key)
        except ImageUploadError:
            StorageService.remove_image(key)
            raise

        return key, public_url

    @staticmethod
    def get_public_url(storage_key: str) -> str:
        """
        Get the public URL for an image.

        Raises:
            ImageUploadError: If the URL can't be computed
        """
        client = SupabaseClient.get_client()

        try:
            return client.storage.from_(settings.IMAGE_BUCKET).get_public_url(storage_key)
        except Exception as e:
            logger.error(f"Failed to get public URL: {e}")
            raise ImageUploadError(str(e))

    @staticmethod
    def remove_image(storage_key: str | None) -> bool:
        """
        Delete an image from storage. Best-effort.

        Returns:
            True if deleted successfully
        """
        if not storage_key:
            return False

        client = SupabaseClient.get_client()

        try:
            client.storage.from_(settings.IMAGE_BUCKET).remove([storage_key])
            logger.info(f"Deleted image from storage: {storage_key}")
            return True

        except Exception as e:
            logger.warning(f"Failed to delete image {storage_key}: {e}")
            return False

    @staticmethod
    def owns_url(public_url: str | None) -> bool:
        """Check whether a public URL points into the initiative bucket."""
        return bool(public_url) and f"/{settings.IMAGE_BUCKET}/" in public_url

    @staticmethod
    def remove_image_by_url(public_url: str | None) -> bool:
        """
        Delete the image a public URL points at. Best-effort.

        URLs outside the initiative bucket (e.g. a client-supplied imageUrl)
        are left alone.
        """
        if not StorageService.owns_url(public_url):
            return False
        return StorageService.remove_image(storage_key_from_url(public_url))
