"""
Validation utilities - Pure validation functions.
None of these touch the network or the disk.
"""
import re
from typing import Any, Mapping, Optional, Union

from ..api.dto import FileValidationResult
from ..core.config import MAX_FILE_SIZE, MAX_FILE_SIZE_MB
from ..domain.entities import FileInfo
from ..core.logging_config import get_logger

logger = get_logger(__name__)

ALLOWED_UPLOAD_TYPES = frozenset([
    "application/pdf",
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
])

PREVIEWABLE_TYPES = frozenset([
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/bmp",
    "image/webp",
    "application/pdf",
    "text/plain",
    "text/html",
])

NO_FILE_SELECTED = "No file selected"
UNSUPPORTED_TYPE = "File type not supported. Please select PDF, Image, or Document files."
FILE_TOO_LARGE = f"File is too large. Maximum size is {MAX_FILE_SIZE_MB}MB."

_MOBILE_RE = re.compile(r"^[0-9]{10}$")
_OTP_RE = re.compile(r"^[0-9]{6}$")


def _field(file: Union[FileInfo, Mapping[str, Any], None], name: str) -> Optional[Any]:
    if file is None:
        return None
    if isinstance(file, Mapping):
        return file.get(name)
    return getattr(file, name, None)


def validate_file(file: Union[FileInfo, Mapping[str, Any], None]) -> FileValidationResult:
    """
    Check a picked file against the upload rules.

    Rules, in order: a uri must be present, the MIME type must be in the
    allow-list (case-insensitive), and the size must not exceed 50 MB.

    Args:
        file: FileInfo or a {uri, type, name, size} mapping

    Returns:
        FileValidationResult with is_valid and, when invalid, a
        human-readable error
    """
    if not _field(file, "uri"):
        return FileValidationResult(is_valid=False, error=NO_FILE_SELECTED)

    mime_type = (_field(file, "type") or "").lower()
    if mime_type not in ALLOWED_UPLOAD_TYPES:
        return FileValidationResult(is_valid=False, error=UNSUPPORTED_TYPE)

    size = _field(file, "size") or 0
    if size > MAX_FILE_SIZE:
        return FileValidationResult(is_valid=False, error=FILE_TOO_LARGE)

    return FileValidationResult(is_valid=True)


def is_previewable(mime_type: Optional[str]) -> bool:
    """Whether the UI can render this MIME type inline."""
    if not mime_type:
        return False
    return mime_type.lower() in PREVIEWABLE_TYPES


def format_mobile_number(mobile: str) -> str:
    """Strip non-digits and keep the last 10 digits."""
    digits = re.sub(r"\D", "", mobile or "")
    return digits[-10:]


def validate_mobile_number(mobile: str) -> bool:
    """Exactly 10 digits."""
    return bool(_MOBILE_RE.match(mobile or ""))


def validate_otp_format(otp: str) -> bool:
    """Exactly 6 digits."""
    return bool(_OTP_RE.match(otp or ""))
