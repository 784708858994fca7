import logging
from dataclasses import dataclass

from errors import ClearFailure, SigningFault, ValidationError
from services.cascade_clear import CLEARABLE_CATEGORIES, clear_category
from services.signing import build_signature_params, sign_params
from services.storage_keys import current_timestamp, derive_storage_key
from settings import Settings

logger = logging.getLogger(__name__)

CLEAR_ACTION = "clear"


@dataclass(frozen=True)
class CredentialBundle:
    cloud_name: str
    api_key: str
    timestamp: int
    signature: str
    upload_preset: str
    public_id: str
    folder: str

    def to_response(self) -> dict:
        return {
            "cloudName": self.cloud_name,
            "apiKey": self.api_key,
            "timestamp": self.timestamp,
            "signature": self.signature,
            "upload_preset": self.upload_preset,
            "public_id": self.public_id,
            "folder": self.folder,
        }


async def issue_credentials(
    repo,
    store,
    settings: Settings,
    filename: str | None,
    category: str | None,
    user_id: str | None,
    user_email: str | None,
    action: str | None = None,
) -> CredentialBundle:
    if not filename or not category or not user_id or not user_email:
        raise ValidationError("Missing required fields: filename, category, userId, userEmail")

    # nothing may be cleared for a request that can never be signed
    if not settings.cloudinary_api_secret:
        raise SigningFault(detail="CLOUDINARY_API_SECRET is not set")

    if category in CLEARABLE_CATEGORIES and action == CLEAR_ACTION:
        result = await clear_category(repo, store, user_id, category)
        if result.fatal:
            raise ClearFailure(detail=f"failed stages: {', '.join(result.db_errors)}")

    timestamp = current_timestamp()
    public_id = derive_storage_key(category, filename, user_email, timestamp)
    params = build_signature_params(
        folder=settings.upload_folder,
        public_id=public_id,
        timestamp=timestamp,
        upload_preset=settings.cloudinary_upload_preset,
    )
    signature = sign_params(params, settings.cloudinary_api_secret)

    logger.info("SIGN: user=%s category=%s public_id=%s", user_id, category, public_id)
    return CredentialBundle(
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_api_key,
        timestamp=timestamp,
        signature=signature,
        upload_preset=settings.cloudinary_upload_preset,
        public_id=public_id,
        folder=settings.upload_folder,
    )
