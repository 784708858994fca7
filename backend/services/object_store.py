import logging
from functools import lru_cache

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader

from errors import ObjectStoreError
from settings import get_settings

logger = logging.getLogger(__name__)

# "not found" means the object is already gone, which is what we want
_DESTROY_OK_RESULTS = {"ok", "not found"}


class CloudinaryStore:
    """Remote object store for uploaded PDFs (stored as raw resources)."""

    resource_type = "raw"

    def __init__(self, cloud_name: str, api_key: str, api_secret: str):
        self.cloud_name = cloud_name
        cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True,
        )

    def destroy(self, public_id: str) -> None:
        try:
            response = cloudinary.uploader.destroy(public_id, resource_type=self.resource_type)
        except cloudinary.exceptions.Error as exc:
            raise ObjectStoreError(
                f"Failed to delete remote object {public_id}",
                detail=str(exc),
            ) from exc

        result = (response or {}).get("result")
        if result not in _DESTROY_OK_RESULTS:
            raise ObjectStoreError(
                f"Failed to delete remote object {public_id}",
                detail=f"destroy returned result={result!r}",
            )
        logger.debug("DESTROY: public_id=%s result=%s", public_id, result)


@lru_cache
def _default_store() -> CloudinaryStore:
    settings = get_settings()
    return CloudinaryStore(
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_api_key,
        api_secret=settings.cloudinary_api_secret,
    )


def get_object_store() -> CloudinaryStore:
    return _default_store()
