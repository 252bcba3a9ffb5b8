import re
from pathlib import Path
from coursemarket.config import settings

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def get_file_url(key: str, base_url: str = None) -> str:
    """
    Public URL of a stored object, served through the /uploads mount
    """
    if not key:
        return ""

    # Already a URL
    if key.startswith(('http://', 'https://', '//')):
        return key

    base = (base_url if base_url is not None else settings.UPLOAD_BASE_URL).rstrip('/')
    return f"{base}/{key.lstrip('/')}"


def sanitize_filename(filename: str) -> str:
    """Strip directories and characters that do not belong in an object key"""
    name = Path(filename or "").name
    name = _UNSAFE_CHARS.sub("_", name).strip("._")
    return name or "file"


def is_safe_path(base_path: str, target_path: str) -> bool:
    """
    Check that target_path stays inside base_path (path traversal guard)
    """
    try:
        base = Path(base_path).resolve()
        target = Path(target_path).resolve()
        return base in target.parents or base == target
    except (OSError, RuntimeError):
        return False
