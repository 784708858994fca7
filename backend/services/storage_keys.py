import re
import time

_PDF_SUFFIX = re.compile(r"\.pdf$", re.IGNORECASE)
_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9]")


def _sanitize(value: str) -> str:
    return _UNSAFE_CHARS.sub("_", value)


def current_timestamp() -> int:
    return int(round(time.time()))


def derive_storage_key(
    category: str,
    filename: str,
    user_email: str,
    timestamp: int | None = None,
) -> str:
    """
    Build the object-store key for an upload:
    ``{category}/{email_local_part}_{filename_stem}_{timestamp}``.
    """
    if timestamp is None:
        timestamp = current_timestamp()

    email_local = _sanitize(user_email.split("@")[0])
    stem = _sanitize(_PDF_SUFFIX.sub("", filename))
    return f"{category}/{email_local}_{stem}_{timestamp}"
