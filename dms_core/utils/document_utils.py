"""
Document utility functions for file naming, MIME inference and formatting.
Pure functions shared by the file manager and both backends.
"""
import math
import random
import re
import string
import time
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.\-_]")

MIME_TYPES = {
    "pdf": "application/pdf",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "xls": "application/vnd.ms-excel",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "txt": "text/plain",
}

DEFAULT_MIME_TYPE = "application/octet-stream"


def _random_suffix(length: int = 9) -> str:
    alphabet = string.ascii_lowercase + string.digits
    return "".join(random.choice(alphabet) for _ in range(length))


def generate_file_id() -> str:
    """Generate a file id of the form {epoch_millis}_{random-suffix}."""
    return f"{int(time.time() * 1000)}_{_random_suffix()}"


def generate_document_id() -> str:
    """Generate a mock document id (doc_{epoch_millis}_{random-suffix})."""
    return f"doc_{int(time.time() * 1000)}_{_random_suffix()}"


def sanitize_file_name(file_name: str) -> str:
    """
    Replace every character outside [a-zA-Z0-9.-_] with an underscore.

    Args:
        file_name: Name as supplied by the picker

    Returns:
        Filesystem-safe name
    """
    return _UNSAFE_FILENAME_CHARS.sub("_", file_name or "")


def mime_type_from_extension(file_name: str) -> str:
    """
    Infer a MIME type from the file extension.

    Returns:
        MIME type, or application/octet-stream for unknown extensions
    """
    if not file_name or "." not in file_name:
        return DEFAULT_MIME_TYPE
    extension = file_name.rsplit(".", 1)[-1].lower()
    return MIME_TYPES.get(extension, DEFAULT_MIME_TYPE)


def uri_to_path(uri: str) -> Path:
    """
    Resolve a picker uri to a local filesystem path.
    Accepts plain paths as well as file:// URIs.
    """
    if uri.startswith("file://"):
        return Path(unquote(urlparse(uri).path))
    return Path(uri)


def unique_download_name(file_name: str, timestamp_ms: Optional[int] = None) -> str:
    """
    Build a collision-safe filename by inserting a timestamp before the extension.

    Examples:
        invoice.pdf -> invoice_1700000000000.pdf
        README      -> README_1700000000000
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    path = Path(file_name)
    if path.suffix:
        return f"{path.stem}_{timestamp_ms}{path.suffix}"
    return f"{file_name}_{timestamp_ms}"


def format_bytes(size: int) -> str:
    """Human-readable size (0 Bytes, 512 Bytes, 1.5 KB, 2 MB, ...)."""
    if size <= 0:
        return "0 Bytes"

    k = 1024
    units = ["Bytes", "KB", "MB", "GB"]
    i = min(int(math.floor(math.log(size) / math.log(k))), len(units) - 1)
    value = round(size / math.pow(k, i), 2)
    # Drop trailing zeros like the display layer expects ("2 MB", not "2.00 MB")
    return f"{value:g} {units[i]}"
