import hashlib
from typing import Any

from errors import SigningFault


def build_signature_params(
    folder: str,
    public_id: str,
    timestamp: int,
    upload_preset: str,
) -> dict[str, Any]:
    return {
        "folder": folder,
        "public_id": public_id,
        "timestamp": timestamp,
        "upload_preset": upload_preset,
    }


def serialize_params(params: dict[str, Any]) -> str:
    # the provider drops empty values before verifying, so must we
    return "&".join(
        f"{key}={params[key]}"
        for key in sorted(params)
        if params[key] is not None and params[key] != ""
    )


def sign_params(params: dict[str, Any], secret: str) -> str:
    """
    Sign an upload parameter set the way the object store verifies it:
    sorted ``key=value`` pairs joined with ``&``, secret appended, SHA-1 hex digest.
    """
    if not secret:
        raise SigningFault(detail="CLOUDINARY_API_SECRET is not set")

    payload = serialize_params(params) + secret
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()
